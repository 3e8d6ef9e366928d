"""Suggestion lifecycle: status state machine and bulk operations.

States are pending, accepted and rejected. Decisions are only made from
pending, and undoing one always returns to pending; there is no direct
accepted <-> rejected edge.

Every operation checks that the scan belongs to the requesting principal.
A scan owned by someone else is reported exactly like a missing one.
"""

import functools
import logging
import uuid
from collections import Counter

from models.schemas.suggestion import (
    SECTIONS,
    BulkUpdateResult,
    Suggestion,
    SuggestionStatus,
    SuggestionSummary,
)
from services.errors import (
    ActionResult,
    InputValidationError,
    NotFoundError,
    ServiceError,
)
from services.suggestion_store import SuggestionStore

logger = logging.getLogger(__name__)

STATUSES: frozenset[str] = frozenset({"pending", "accepted", "rejected"})

ALLOWED_TRANSITIONS: frozenset[tuple[str, str]] = frozenset({
    ("pending", "accepted"),
    ("pending", "rejected"),
    ("accepted", "pending"),
    ("rejected", "pending"),
})


def can_transition(current: str, new: str) -> bool:
    return (current, new) in ALLOWED_TRANSITIONS


def _require_uuid(value: str, label: str) -> str:
    try:
        return str(uuid.UUID(str(value)))
    except ValueError as e:
        raise InputValidationError(f"Invalid {label}") from e


def _require_section(section: str) -> str:
    if section not in SECTIONS:
        raise InputValidationError(f"Unknown section: {section}")
    return section


def _action(func):
    """Run an operation and convert ServiceErrors into a failed ActionResult."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs) -> ActionResult:
        try:
            return ActionResult.ok(await func(*args, **kwargs))
        except ServiceError as e:
            logger.warning("%s failed (%s): %s", func.__name__, e.code.value, e.message)
            return ActionResult.from_exception(e)

    return wrapper


class SuggestionLifecycleManager:
    def __init__(self, store: SuggestionStore) -> None:
        self.store = store

    async def _authorize(self, principal: str, scan_id: str) -> str:
        if not principal:
            raise NotFoundError("Scan not found")
        scan_id = _require_uuid(scan_id, "scan id")
        owner = await self.store.get_scan_owner(scan_id)
        if owner is None or owner != principal:
            raise NotFoundError("Scan not found")
        return scan_id

    @_action
    async def create_scan(self, principal: str) -> str:
        if not principal:
            raise InputValidationError("Principal is required")
        scan_id = await self.store.create_scan(principal)
        logger.info("Created scan %s", scan_id)
        return scan_id

    @_action
    async def verify_scan(self, principal: str, scan_id: str) -> str:
        """Normalized scan id if the principal owns the scan."""
        return await self._authorize(principal, scan_id)

    @_action
    async def save_suggestions(
        self, principal: str, scan_id: str, suggestions: list[Suggestion]
    ) -> BulkUpdateResult:
        """Persist freshly generated suggestions; every one starts pending."""
        scan_id = await self._authorize(principal, scan_id)
        fresh = [s.model_copy(update={"status": "pending"}) for s in suggestions]
        count = await self.store.insert_suggestions(scan_id, fresh)
        logger.info("Saved %d suggestions for scan %s", count, scan_id)
        return BulkUpdateResult(count=count)

    @_action
    async def list_suggestions(
        self, principal: str, scan_id: str, section: str | None = None
    ) -> list[Suggestion]:
        scan_id = await self._authorize(principal, scan_id)
        if section is not None:
            _require_section(section)
        return await self.store.list_suggestions(scan_id, section)

    @_action
    async def update_suggestion_status(
        self, principal: str, suggestion_id: str, scan_id: str, status: SuggestionStatus
    ) -> Suggestion:
        if status not in STATUSES:
            raise InputValidationError(f"Invalid status: {status}")
        suggestion_id = _require_uuid(suggestion_id, "suggestion id")
        scan_id = await self._authorize(principal, scan_id)

        current = await self.store.get_suggestion(scan_id, suggestion_id)
        if current is None:
            raise NotFoundError("Suggestion not found")
        if not can_transition(current.status, status):
            raise InputValidationError(
                f"Cannot change suggestion status from {current.status} to {status}"
            )
        if not await self.store.compare_and_set_status(scan_id, suggestion_id, current.status, status):
            raise InputValidationError("Suggestion status changed concurrently; reload and retry")

        logger.info("Suggestion %s: %s -> %s", suggestion_id, current.status, status)
        return current.model_copy(update={"status": status})

    async def _bulk(
        self, principal: str, scan_id: str, new: SuggestionStatus, section: str | None
    ) -> BulkUpdateResult:
        scan_id = await self._authorize(principal, scan_id)
        if section is not None:
            _require_section(section)
        count = await self.store.bulk_set_status(scan_id, "pending", new, section)
        logger.info("Bulk %s: %d pending suggestions in scan %s section=%s", new, count, scan_id, section or "all")
        return BulkUpdateResult(count=count)

    @_action
    async def accept_all_in_section(self, principal: str, scan_id: str, section: str) -> BulkUpdateResult:
        return await self._bulk(principal, scan_id, "accepted", section)

    @_action
    async def reject_all_in_section(self, principal: str, scan_id: str, section: str) -> BulkUpdateResult:
        return await self._bulk(principal, scan_id, "rejected", section)

    @_action
    async def skip_all_pending(self, principal: str, scan_id: str) -> BulkUpdateResult:
        """Reject every still-pending suggestion of the scan, across sections."""
        return await self._bulk(principal, scan_id, "rejected", None)

    @_action
    async def get_suggestion_summary(self, principal: str, scan_id: str) -> SuggestionSummary:
        scan_id = await self._authorize(principal, scan_id)
        counts = Counter(s.status for s in await self.store.list_suggestions(scan_id))
        return SuggestionSummary(
            total=sum(counts.values()),
            accepted=counts["accepted"],
            rejected=counts["rejected"],
            pending=counts["pending"],
        )
