"""Client-side file tracking state."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

JPEG_CONTENT_TYPES = ("image/jpeg", "image/jpg")


class FileStatus(str, Enum):
    PENDING = "pending"
    CONVERTING = "converting"
    SUCCESS = "success"
    ERROR = "error"


class EventKind(str, Enum):
    FILE_ADDED = "file_added"
    FILE_STATUS = "file_status"
    BATCH_STARTED = "batch_started"
    BATCH_FINISHED = "batch_finished"
    CLEARED = "cleared"
    STATE_CHANGED = "state_changed"


@dataclass(frozen=True)
class SelectedFile:
    """A file picked or dropped by the user."""

    name: str
    last_modified: int  # ms since epoch, as browsers report it
    content_type: str
    data: bytes = field(repr=False)

    @property
    def key(self) -> str:
        return f"{self.name}-{self.last_modified}"

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def is_jpeg(self) -> bool:
        return (self.content_type or "").lower() in JPEG_CONTENT_TYPES


@dataclass
class ClientFileEntry:
    file: SelectedFile
    status: FileStatus = FileStatus.PENDING
    result: Optional[bytes] = field(default=None, repr=False)
    output_filename: Optional[str] = None
    error: Optional[str] = None

    @property
    def key(self) -> str:
        return self.file.key


@dataclass(frozen=True)
class ViewState:
    """What the view should show, derived from the tracked entries."""

    has_files: bool
    show_footer: bool
    show_download_all: bool
    is_converting: bool
    counts: dict


@dataclass(frozen=True)
class OrchestratorEvent:
    kind: EventKind
    key: Optional[str] = None
    entry: Optional[ClientFileEntry] = None
