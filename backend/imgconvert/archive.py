"""Incremental zip creation for streamed batch downloads."""
import io
import logging
import zipfile

from imgconvert.config import ZIP_COMPRESS_LEVEL

logger = logging.getLogger("converter.archive")


class _ChunkSink(io.RawIOBase):
    """Write-only, non-seekable buffer that hands out what was written since the last drain."""

    def __init__(self):
        super().__init__()
        self._chunks: list[bytes] = []

    def writable(self) -> bool:
        return True

    def write(self, b) -> int:
        self._chunks.append(bytes(b))
        return len(b)

    def drain(self) -> bytes:
        data = b"".join(self._chunks)
        self._chunks.clear()
        return data


class ZipStreamWriter:
    """Builds a zip archive entry by entry, returning archive bytes as soon as they exist.

    zipfile falls back to data descriptors when its file object cannot seek,
    so bytes handed out by add() are never rewritten later.
    """

    def __init__(self, compresslevel: int = ZIP_COMPRESS_LEVEL):
        self._sink = _ChunkSink()
        self._zip = zipfile.ZipFile(
            self._sink,
            "w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=compresslevel,
        )
        self._finished = False
        self.entries: list[str] = []

    def add(self, name: str, data: bytes) -> bytes:
        """Append one file under ``name``; return the archive bytes produced."""
        if self._finished:
            raise RuntimeError("Archive already finalized")
        self._zip.writestr(name, data)
        self.entries.append(name)
        return self._sink.drain()

    def finish(self) -> bytes:
        """Write the central directory and return the remaining bytes."""
        if self._finished:
            raise RuntimeError("Archive already finalized")
        self._finished = True
        self._zip.close()
        logger.info("Finalized zip with %s entries", len(self.entries))
        return self._sink.drain()

    def close(self) -> None:
        """Release the archive without emitting anything further. Safe to call more than once."""
        if self._finished:
            return
        self._finished = True
        try:
            self._zip.close()
        except (OSError, ValueError) as e:
            logger.warning("Discarding unfinished zip: %s", e)
        self._sink.drain()
