"""
Editing package.

Edit actions, the undo/redo history, the single-flight operation controller
and the session object that ties them together.
"""

from .actions import (
    BATCH_ACTIONS,
    Adjustment,
    BatchAction,
    EditAction,
    Expand,
    Filter,
    LassoInpaint,
    LocalizedEdit,
    NamedAction,
    RemoveBackground,
    StyleTransfer,
    Upscale,
    apply_action,
    find_batch_action,
)
from .controller import OperationController, OperationStatus
from .history import HistoryEntry, HistoryStore
from .session import EditSession

__all__ = [
    "BATCH_ACTIONS",
    "Adjustment",
    "BatchAction",
    "EditAction",
    "EditSession",
    "Expand",
    "Filter",
    "HistoryEntry",
    "HistoryStore",
    "LassoInpaint",
    "LocalizedEdit",
    "NamedAction",
    "OperationController",
    "OperationStatus",
    "RemoveBackground",
    "StyleTransfer",
    "Upscale",
    "apply_action",
    "find_batch_action",
]
