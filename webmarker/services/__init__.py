"""Persistence services and the tag propagation saga."""

from webmarker.services.bookmark_service import BookmarkService
from webmarker.services.mark_service import MarkService
from webmarker.services.operations import (
    OperationKind,
    OperationLedger,
    OperationRecord,
    OperationStatus,
)
from webmarker.services.propagation import PropagationResult, TagPropagator
from webmarker.services.tag_service import TagService
from webmarker.services.user_service import UserService

__all__ = [
    "BookmarkService",
    "MarkService",
    "OperationKind",
    "OperationLedger",
    "OperationRecord",
    "OperationStatus",
    "PropagationResult",
    "TagPropagator",
    "TagService",
    "UserService",
]
