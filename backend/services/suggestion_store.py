"""Persistence port for scans, suggestions and quality logs.

Status changes are compare-and-set on the current status, so bulk updates
only touch rows still in the expected state at write time.
"""

import uuid
from typing import Protocol

from models.schemas.quality import QualityMetricLog
from models.schemas.suggestion import Suggestion, SuggestionStatus


class SuggestionStore(Protocol):
    """Implementations raise ``StoreError`` on persistence failures."""

    async def create_scan(self, owner: str) -> str: ...

    async def get_scan_owner(self, scan_id: str) -> str | None: ...

    async def insert_suggestions(self, scan_id: str, suggestions: list[Suggestion]) -> int: ...

    async def get_suggestion(self, scan_id: str, suggestion_id: str) -> Suggestion | None: ...

    async def list_suggestions(self, scan_id: str, section: str | None = None) -> list[Suggestion]: ...

    async def compare_and_set_status(
        self, scan_id: str, suggestion_id: str, expected: SuggestionStatus, new: SuggestionStatus
    ) -> bool: ...

    async def bulk_set_status(
        self,
        scan_id: str,
        expected: SuggestionStatus,
        new: SuggestionStatus,
        section: str | None = None,
    ) -> int: ...

    async def append_quality_log(self, log: QualityMetricLog) -> None: ...

    async def list_quality_logs(self, limit: int | None = None) -> list[QualityMetricLog]: ...


class InMemorySuggestionStore:
    """Process-local store. Each method completes without yielding, so
    check-then-write sequences are atomic under asyncio."""

    def __init__(self) -> None:
        self._owners: dict[str, str] = {}
        self._suggestions: dict[str, dict[str, Suggestion]] = {}
        self._quality_logs: list[QualityMetricLog] = []

    async def create_scan(self, owner: str) -> str:
        scan_id = str(uuid.uuid4())
        self._owners[scan_id] = owner
        self._suggestions[scan_id] = {}
        return scan_id

    async def get_scan_owner(self, scan_id: str) -> str | None:
        return self._owners.get(scan_id)

    async def insert_suggestions(self, scan_id: str, suggestions: list[Suggestion]) -> int:
        rows = self._suggestions.setdefault(scan_id, {})
        for suggestion in suggestions:
            rows[suggestion.id] = suggestion.model_copy()
        return len(suggestions)

    async def get_suggestion(self, scan_id: str, suggestion_id: str) -> Suggestion | None:
        row = self._suggestions.get(scan_id, {}).get(suggestion_id)
        return row.model_copy() if row else None

    async def list_suggestions(self, scan_id: str, section: str | None = None) -> list[Suggestion]:
        rows = self._suggestions.get(scan_id, {}).values()
        return [
            row.model_copy()
            for row in sorted(rows, key=lambda r: (r.section, r.item_index))
            if section is None or row.section == section
        ]

    async def compare_and_set_status(
        self, scan_id: str, suggestion_id: str, expected: SuggestionStatus, new: SuggestionStatus
    ) -> bool:
        row = self._suggestions.get(scan_id, {}).get(suggestion_id)
        if row is None or row.status != expected:
            return False
        row.status = new
        return True

    async def bulk_set_status(
        self,
        scan_id: str,
        expected: SuggestionStatus,
        new: SuggestionStatus,
        section: str | None = None,
    ) -> int:
        count = 0
        for row in self._suggestions.get(scan_id, {}).values():
            if row.status == expected and (section is None or row.section == section):
                row.status = new
                count += 1
        return count

    async def append_quality_log(self, log: QualityMetricLog) -> None:
        self._quality_logs.append(log)

    async def list_quality_logs(self, limit: int | None = None) -> list[QualityMetricLog]:
        logs = list(self._quality_logs)
        return logs[-limit:] if limit else logs
