from .models import ClientFileEntry, EventKind, FileStatus, OrchestratorEvent, SelectedFile, ViewState
from .orchestrator import ConversionOrchestrator

__all__ = [
    "ClientFileEntry",
    "ConversionOrchestrator",
    "EventKind",
    "FileStatus",
    "OrchestratorEvent",
    "SelectedFile",
    "ViewState",
]
