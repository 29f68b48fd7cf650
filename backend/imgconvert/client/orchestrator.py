"""Client-side conversion controller.

Tracks the files a user has selected, drives the converter API over httpx and
publishes events for whatever view is attached. It knows nothing about the
DOM or any UI toolkit, so it can be exercised directly in tests.
"""
import asyncio
import logging
from typing import Callable, Iterable, Optional, Union

import httpx

from imgconvert.client.models import (
    ClientFileEntry,
    EventKind,
    FileStatus,
    OrchestratorEvent,
    SelectedFile,
    ViewState,
)
from imgconvert.conversion.models import TargetFormat
from imgconvert.errors import TransportError

logger = logging.getLogger("converter.client")

Listener = Callable[[OrchestratorEvent], None]


class ConversionOrchestrator:
    """Owns the tracked files of one page/session. Instances are independent."""

    def __init__(self, client: httpx.AsyncClient, listener: Optional[Listener] = None):
        self._client = client
        self._listener = listener
        self._entries: dict[str, ClientFileEntry] = {}
        self.is_converting = False

    @property
    def entries(self) -> list[ClientFileEntry]:
        return list(self._entries.values())

    def get(self, key: str) -> Optional[ClientFileEntry]:
        return self._entries.get(key)

    def _emit(self, kind: EventKind, entry: Optional[ClientFileEntry] = None) -> None:
        if self._listener is None:
            return
        self._listener(OrchestratorEvent(kind, key=entry.key if entry else None, entry=entry))

    def _is_tracked(self, entry: ClientFileEntry) -> bool:
        return self._entries.get(entry.key) is entry

    def _set_status(self, entry: ClientFileEntry, status: FileStatus) -> None:
        entry.status = status
        # Entries dropped by clear() may still complete; their updates go nowhere.
        if self._is_tracked(entry):
            self._emit(EventKind.FILE_STATUS, entry)

    def add_files(self, files: Iterable[SelectedFile]) -> list[ClientFileEntry]:
        """Track new JPEG files. Non-JPEGs and files already tracked are ignored."""
        added = []
        for f in files:
            if not f.is_jpeg:
                logger.debug("Ignoring non-JPEG file %s (%s)", f.name, f.content_type)
                continue
            if f.key in self._entries:
                continue
            entry = ClientFileEntry(file=f)
            self._entries[f.key] = entry
            added.append(entry)
            self._emit(EventKind.FILE_ADDED, entry)
        self._emit(EventKind.STATE_CHANGED)
        return added

    async def convert_all(self, target: Union[TargetFormat, str]) -> None:
        """Convert every pending file concurrently and wait for all of them to settle."""
        fmt = _parse_target(target)
        if self.is_converting:
            logger.debug("convert_all ignored, a batch is already running")
            return
        self.is_converting = True
        self._emit(EventKind.BATCH_STARTED)
        try:
            pending = [e for e in self._entries.values() if e.status == FileStatus.PENDING]
            await asyncio.gather(*(self.convert_file(e, fmt) for e in pending))
        finally:
            self.is_converting = False
            self._emit(EventKind.BATCH_FINISHED)
            self._emit(EventKind.STATE_CHANGED)

    async def convert_file(self, entry: ClientFileEntry, target: Union[TargetFormat, str]) -> None:
        """Upload one file to /convert-single. Never raises; failures end in the error state."""
        fmt = _parse_target(target)
        self._set_status(entry, FileStatus.CONVERTING)
        f = entry.file
        try:
            resp = await self._client.post(
                "/convert-single",
                files={"image": (f.name, f.data, f.content_type)},
                data={"format": fmt.value},
            )
            if resp.status_code >= 400:
                raise TransportError(f"Server returned {resp.status_code}: {_error_message(resp)}")
        except (httpx.HTTPError, TransportError) as e:
            logger.warning("Conversion of %s failed: %s", f.name, e)
            entry.error = str(e)
            self._set_status(entry, FileStatus.ERROR)
            return
        entry.result = resp.content
        entry.output_filename = fmt.output_filename(f.name)
        entry.error = None
        self._set_status(entry, FileStatus.SUCCESS)

    def download(self, key: str) -> tuple[str, bytes]:
        """(filename, bytes) of a converted file."""
        entry = self._entries.get(key)
        if entry is None or entry.status != FileStatus.SUCCESS:
            raise KeyError(key)
        return entry.output_filename, entry.result

    async def download_all_as_zip(self, target: Union[TargetFormat, str]) -> Optional[bytes]:
        """Send the original bytes of every converted file to /convert-and-zip.

        The server re-converts them; the blobs cached from /convert-single are
        not reused. Returns None when nothing has converted yet.
        """
        fmt = _parse_target(target)
        done = [e for e in self._entries.values() if e.status == FileStatus.SUCCESS]
        if not done:
            return None
        files = [("images", (e.file.name, e.file.data, e.file.content_type)) for e in done]
        try:
            resp = await self._client.post("/convert-and-zip", files=files, data={"format": fmt.value})
        except httpx.HTTPError as e:
            raise TransportError(f"Zip download failed: {e}") from e
        if resp.status_code >= 400:
            raise TransportError(f"Server returned {resp.status_code}: {_error_message(resp)}")
        return resp.content

    def clear(self) -> None:
        """Forget every tracked file. In-flight requests are left to finish on their own."""
        self._entries = {}
        self._emit(EventKind.CLEARED)
        self._emit(EventKind.STATE_CHANGED)

    def view_state(self) -> ViewState:
        counts = {s.value: 0 for s in FileStatus}
        for e in self._entries.values():
            counts[e.status.value] += 1
        successes = counts[FileStatus.SUCCESS.value]
        return ViewState(
            has_files=bool(self._entries),
            show_footer=successes > 0,
            show_download_all=successes >= 2,
            is_converting=self.is_converting,
            counts=counts,
        )


def _parse_target(target: Union[TargetFormat, str]) -> TargetFormat:
    return target if isinstance(target, TargetFormat) else TargetFormat.parse(target)


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or resp.reason_phrase
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return resp.text or resp.reason_phrase
