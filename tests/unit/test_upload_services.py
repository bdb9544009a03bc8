"""Tests for upload services."""
import logging

import pytest

from directupload.core.exceptions import (
    FolderCreationError,
    TransportError,
    UnsupportedSourceError,
    UploadError
)
from directupload.core.upload.models import Chunk, UploadContext, UploadTask
from directupload.core.upload.services import (
    AsyncFileReader,
    BufferRangeBody,
    FileRangeBody,
    FolderCreator,
    LocalFileCollector,
    PartTransmitter,
    bind_part_body
)

from conftest import TARGET_URL


class TestAsyncFileReader:
    """Test suite for AsyncFileReader."""

    @pytest.fixture
    def reader(self):
        """Create reader instance."""
        return AsyncFileReader()

    @pytest.mark.asyncio
    async def test_read_chunk(self, reader, sample_file):
        """Test reading a chunk."""
        chunk = await reader.read_chunk(sample_file, 0, 10)

        assert chunk == b"0123456789"

    @pytest.mark.asyncio
    async def test_read_chunk_middle(self, reader, sample_file):
        """Test reading chunk from middle."""
        chunk = await reader.read_chunk(sample_file, 5, 15)

        assert chunk == b"56789ABCDE"

    @pytest.mark.asyncio
    async def test_read_past_end_raises(self, reader, sample_file):
        """Test short read raises error."""
        with pytest.raises(UploadError, match="Short read"):
            await reader.read_chunk(sample_file, 15, 30)

    @pytest.mark.asyncio
    async def test_read_nonexistent_file(self, reader, tmp_path):
        """Test reading non-existent file raises."""
        with pytest.raises(OSError):
            await reader.read_chunk(tmp_path / "missing.bin", 0, 10)


class TestPartBodies:
    """Test suite for lazily bound part bodies."""

    @pytest.mark.asyncio
    async def test_file_range_body(self, sample_file):
        body = FileRangeBody(sample_file, 10, 20)

        assert await body.read() == b"ABCDEFGHIJ"

    @pytest.mark.asyncio
    async def test_buffer_range_body_bytes(self):
        body = BufferRangeBody(b"hello world", 6, 11)

        assert await body.read() == b"world"

    @pytest.mark.asyncio
    async def test_buffer_range_body_slice_method(self):
        class Blob:
            def __init__(self, data):
                self.data = data

            def slice(self, start, end):
                return self.data[start:end]

        body = BufferRangeBody(Blob(b"abcdef"), 1, 3)

        assert await body.read() == b"bc"

    def test_bind_path(self, sample_file):
        body = bind_part_body(UploadTask("s", 20, file_path=sample_file), 0, 5)

        assert isinstance(body, FileRangeBody)

    def test_bind_blob(self):
        body = bind_part_body(UploadTask("s", 3, blob=bytearray(b"abc")), 0, 3)

        assert isinstance(body, BufferRangeBody)

    def test_bind_unsupported_source(self):
        with pytest.raises(UnsupportedSourceError):
            bind_part_body(UploadTask("s", 3), 0, 3)

    def test_bind_string_blob_unsupported(self):
        with pytest.raises(UnsupportedSourceError):
            bind_part_body(UploadTask("s", 3, blob="abc"), 0, 3)


class TestLocalFileCollector:
    """Test suite for LocalFileCollector."""

    @pytest.fixture
    def collector(self):
        return LocalFileCollector()

    def test_collect_file(self, collector, sample_file):
        tasks = collector.collect([sample_file])

        assert tasks == [UploadTask("sample.bin", 20, file_path=sample_file)]

    def test_collect_directory(self, collector, tmp_path):
        folder = tmp_path / "images"
        folder.mkdir()
        (folder / "b.jpg").write_bytes(b"bb")
        (folder / "a.jpg").write_bytes(b"a")
        (folder / ".hidden").write_bytes(b"h")
        (folder / "nested").mkdir()
        (folder / "nested" / "c.jpg").write_bytes(b"ccc")

        tasks = collector.collect([folder])

        assert [(t.file_name, t.file_size) for t in tasks] == [("a.jpg", 1), ("b.jpg", 2)]

    def test_missing_path_is_skipped(self, collector, tmp_path, sample_file, caplog):
        with caplog.at_level(logging.WARNING, logger='directupload'):
            tasks = collector.collect([tmp_path / "nope", sample_file])

        assert len(tasks) == 1
        assert "doesn't exist" in caplog.text


class TestPartTransmitter:
    """Test suite for PartTransmitter."""

    @pytest.mark.asyncio
    async def test_send_puts_body(self, fake_transport, context):
        """Test chunk bytes are PUT with a Content-Length header."""
        fake_transport.put_times["http://s/0"] = 42
        chunk = Chunk("a", 0, 0, 5, "http://s/0").with_body(BufferRangeBody(b"hello!", 0, 5))

        result = await PartTransmitter(fake_transport, context).send(chunk)

        call = fake_transport.calls[0]
        assert call.method == 'PUT'
        assert call.url == "http://s/0"
        assert call.data == b"hello"
        assert call.headers == {'Content-Length': '5'}
        assert result.put_spent == 42
        assert result.status == 201
        assert result.chunk is chunk

    @pytest.mark.asyncio
    async def test_send_without_content_length(self, fake_transport, options):
        """Test Content-Length header can be disabled."""
        context = UploadContext(options.with_add_content_length_header(False))
        chunk = Chunk("a", 0, 0, 2, "http://s/0").with_body(BufferRangeBody(b"hi", 0, 2))

        await PartTransmitter(fake_transport, context).send(chunk)

        assert fake_transport.calls[0].headers is None

    @pytest.mark.asyncio
    async def test_send_unbound_chunk_raises(self, fake_transport, context):
        with pytest.raises(UploadError, match="no body"):
            await PartTransmitter(fake_transport, context).send(Chunk("a", 0, 0, 2, "http://s/0"))

    @pytest.mark.asyncio
    async def test_send_failure_propagates(self, fake_transport, context):
        fake_transport.fail_urls.add("http://s/0")
        chunk = Chunk("a", 0, 0, 2, "http://s/0").with_body(BufferRangeBody(b"hi", 0, 2))

        with pytest.raises(TransportError) as exc_info:
            await PartTransmitter(fake_transport, context).send(chunk)

        assert exc_info.value.status == 500


class TestFolderCreator:
    """Test suite for FolderCreator."""

    @pytest.mark.asyncio
    async def test_existing_folder(self, fake_transport):
        created = await FolderCreator(fake_transport).ensure_folder(TARGET_URL)

        assert created is False
        assert [c.method for c in fake_transport.calls] == ['GET']
        assert fake_transport.calls[0].url == f"{TARGET_URL}.0.json"

    @pytest.mark.asyncio
    async def test_creates_missing_folder(self, fake_transport):
        fake_transport.folder_exists = False

        created = await FolderCreator(fake_transport).ensure_folder(
            TARGET_URL, {'Authorization': 'Basic x'}
        )

        assert created is True
        post = fake_transport.calls_for('POST')[0]
        assert post.url == TARGET_URL
        assert post.headers['Authorization'] == 'Basic x'
        assert post.form[':name'] == ['target']
        assert post.form['./jcr:primaryType'] == ['sling:Folder']
        assert post.form['./jcr:content/jcr:title'] == ['target']

    @pytest.mark.asyncio
    async def test_creation_failure(self, fake_transport):
        fake_transport.folder_exists = False
        fake_transport.fail_urls.add(TARGET_URL)

        with pytest.raises(FolderCreationError):
            await FolderCreator(fake_transport).ensure_folder(TARGET_URL)


class TestAsyncFileReaderStreaming:
    """Test suite for block-wise range reads."""

    @pytest.mark.asyncio
    async def test_iter_range_blocks(self, sample_file):
        blocks = [b async for b in AsyncFileReader().iter_range(sample_file, 2, 12, block_size=4)]

        assert blocks == [b"2345", b"6789", b"AB"]

    @pytest.mark.asyncio
    async def test_iter_range_short_file(self, sample_file):
        with pytest.raises(UploadError, match="Short read"):
            [b async for b in AsyncFileReader().iter_range(sample_file, 15, 30)]

    @pytest.mark.asyncio
    async def test_empty_range_yields_nothing(self, sample_file):
        assert [b async for b in FileRangeBody(sample_file, 5, 5).stream()] == []

    @pytest.mark.asyncio
    async def test_buffer_body_stream(self):
        assert [b async for b in BufferRangeBody(b"abcdef", 2, 4).stream()] == [b"cd"]
