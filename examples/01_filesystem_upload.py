"""
Upload local files and folders to a repository folder
"""
import asyncio
import logging

from directupload import FileSystemUpload, UploadOptions, configure_logging


async def main():
    configure_logging(logging.INFO)

    options = UploadOptions(
        url="http://localhost:4502/content/dam/photos",
        headers={"Authorization": "Basic YWRtaW46YWRtaW4="}
    )

    async with FileSystemUpload() as uploader:
        # Directories contribute their direct, non-hidden files
        result = await uploader.upload(options, ["./photos", "notes.pdf"])

    print(f"Uploaded {result.total_completed}/{result.total_files} files "
          f"in {result.final_spent} ms")
    for item in result.detailed_result:
        print(f"  {item.target_path}: {item.file_size_str} in {item.part_count} parts")


if __name__ == "__main__":
    asyncio.run(main())
