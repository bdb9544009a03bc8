"""
Upload in-memory data and files with explicit options
"""
import asyncio

from directupload import (
    DirectBinaryUpload,
    HttpConfig,
    RetryConfig,
    AsyncHttpClient,
    UploadTask,
    TransportError
)


async def main():
    tasks = [
        UploadTask("hello.txt", 11, blob=b"hello world"),
        UploadTask("report.pdf", 1048576, file_path="report.pdf"),
    ]

    # Retry gateway errors on the transport level
    config = HttpConfig(retry=RetryConfig(max_retries=3))

    async with AsyncHttpClient(config) as http:
        uploader = DirectBinaryUpload(http)
        try:
            result = await uploader.upload_all(
                "http://localhost:4502/content/dam/reports",
                {"Authorization": "Basic YWRtaW46YWRtaW4="},
                tasks,
                concurrent=True,
                max_concurrency=4,
                continue_on_error=True
            )
        except TransportError as e:
            print(f"Upload failed: {e}")
            return

    print(f"Average part time: {result.avg_put_spent} ms")
    print(f"90th percentile: {result.ninety_percentile_total} ms")
    for failed in result.failed:
        print(f"Failed: {failed.file_name}: {failed.message}")


if __name__ == "__main__":
    asyncio.run(main())
