"""Abstract base class for all section-scoped suggestion generators."""

import logging
from abc import ABC, abstractmethod

from pydantic import BaseModel

from config import settings
from models.schemas.keywords import KeywordAnalysisResult
from models.schemas.resume import ResumeItem
from models.schemas.suggestion import CandidateType, Suggestion
from services.errors import LLMError
from services.llm_client import CompletionClient, complete_json

logger = logging.getLogger(__name__)

JOB_EXCERPT_CHARS = 1500


class GenerationContext(BaseModel):
    """Everything a generator may consult besides the section items."""
    job_text: str = ""
    resume_text: str = ""
    keyword_analysis: KeywordAnalysisResult | None = None
    candidate_type: CandidateType = "fulltime"

    @property
    def matched_keywords(self) -> list[str]:
        return self.keyword_analysis.matched_keywords if self.keyword_analysis else []

    @property
    def missing_keywords(self) -> list[str]:
        return self.keyword_analysis.missing_keywords if self.keyword_analysis else []

    @property
    def target_keywords(self) -> list[str]:
        return self.missing_keywords + self.matched_keywords

    @property
    def job_excerpt(self) -> str:
        return self.job_text.strip()[:JOB_EXCERPT_CHARS]


BulletRef = tuple[int, str]  # (item_index, bullet text)


def bullet_refs(items: list[ResumeItem]) -> list[BulletRef]:
    return [(i, bullet) for i, item in enumerate(items) for bullet in item.bullets]


class BaseSuggestionGenerator(ABC):
    """Base class for suggestion generators.

    Subclasses must implement:
        - name: identifier used in logs
        - suggestion_types: the SuggestionType values it emits
        - generate(section, items, context): candidate suggestions

    Generators raise ServiceError subclasses on failure; the runner turns
    that into a per-section error.
    """

    name: str = ""
    suggestion_types: tuple[str, ...] = ()

    def __init__(self, client: CompletionClient | None = None) -> None:
        self.client = client

    @abstractmethod
    async def generate(
        self, section: str, items: list[ResumeItem], context: GenerationContext
    ) -> list[Suggestion]:
        """Return zero or more candidate suggestions for one section."""

    async def _ask(self, prompt: str) -> list[dict]:
        """Run a prompt and return the ``suggestions`` entries it produced."""
        if self.client is None:
            raise LLMError("Language model is not configured")
        data = await complete_json(self.client, prompt, timeout=settings.llm_timeout_seconds)
        raw = data.get("suggestions", [])
        if not isinstance(raw, list):
            raise LLMError(f"{self.name} returned an unexpected shape")
        return [entry for entry in raw if isinstance(entry, dict)]

    def _resolve(
        self, entries: list[dict], refs: list[BulletRef]
    ) -> list[tuple[int, str, dict]]:
        """Map model entries back to (item_index, original, entry).

        Entries pointing at unknown indices, or whose suggestion is empty
        or unchanged, are dropped.
        """
        resolved = []
        for entry in entries:
            index = entry.get("index")
            if not isinstance(index, int) or not 0 <= index < len(refs):
                logger.debug("%s: dropping entry with bad index %r", self.name, index)
                continue
            item_index, original = refs[index]
            suggested = str(entry.get("suggested") or "").strip()
            if not suggested or suggested == original:
                continue
            resolved.append((item_index, original, entry))
        return resolved
