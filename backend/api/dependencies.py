"""Shared dependencies for API routes."""

from fastapi import Header

from services.llm_client import CompletionClient, get_completion_client
from services.quality_metrics import AlertSink, LoggingAlertSink
from services.suggestion_lifecycle import SuggestionLifecycleManager
from services.suggestion_store import InMemorySuggestionStore, SuggestionStore

_store = InMemorySuggestionStore()
_manager = SuggestionLifecycleManager(_store)
_alert_sink = LoggingAlertSink()


def get_llm_client() -> CompletionClient | None:
    return get_completion_client()


def get_store() -> SuggestionStore:
    return _store


def get_lifecycle_manager() -> SuggestionLifecycleManager:
    return _manager


def get_alert_sink() -> AlertSink:
    return _alert_sink


def get_principal(x_user_id: str = Header(default="")) -> str:
    """Caller identity as forwarded by the upstream gateway."""
    return x_user_id.strip()
