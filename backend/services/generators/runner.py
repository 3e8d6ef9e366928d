"""Per-section fan-out of suggestion generators.

Sections run concurrently. A section fails as a unit: if any of its
generators raises, the section contributes no suggestions and a
``SectionError`` instead, while every other section proceeds.
"""

import asyncio
import logging

from pydantic import BaseModel

from models.schemas.resume import ParsedResume, ResumeItem
from models.schemas.suggestion import SectionError, Suggestion
from services.errors import ErrorCode, ServiceError
from services.generators.base import BaseSuggestionGenerator, GenerationContext
from services.generators.bullets import (
    ActionVerbGenerator,
    BulletRewriteGenerator,
    QuantificationGenerator,
)
from services.generators.format_removal import FormatRemovalGenerator
from services.generators.skills import SkillExpansionGenerator, TransferableSkillsGenerator
from services.llm_client import CompletionClient

logger = logging.getLogger(__name__)

SECTION_PLAN: dict[str, tuple[type[BaseSuggestionGenerator], ...]] = {
    "experience": (BulletRewriteGenerator, ActionVerbGenerator, QuantificationGenerator),
    "projects": (BulletRewriteGenerator, ActionVerbGenerator, QuantificationGenerator),
    "education": (TransferableSkillsGenerator,),
    "skills": (SkillExpansionGenerator,),
    "format": (FormatRemovalGenerator,),
}


class GenerationResult(BaseModel):
    suggestions: dict[str, list[Suggestion]] = {}
    errors: list[SectionError] = []

    @property
    def all_suggestions(self) -> list[Suggestion]:
        return [s for section in self.suggestions.values() for s in section]

    @property
    def is_partial(self) -> bool:
        return bool(self.errors)


async def _run_section(
    section: str,
    items: list[ResumeItem],
    generators: list[BaseSuggestionGenerator],
    context: GenerationContext,
) -> list[Suggestion]:
    batches = await asyncio.gather(*(g.generate(section, items, context) for g in generators))
    suggestions = [s for batch in batches for s in batch]
    logger.info("Section %s: %d suggestions from %d generators", section, len(suggestions), len(generators))
    return suggestions


async def generate_suggestions(
    resume: ParsedResume,
    context: GenerationContext,
    client: CompletionClient | None,
    sections: list[str] | None = None,
) -> GenerationResult:
    """Run the section plan over a parsed resume."""
    planned: list[tuple[str, list[ResumeItem]]] = []
    for section in sections or list(SECTION_PLAN):
        if section not in SECTION_PLAN:
            continue
        items = resume.items(section)
        if section == "format":
            if not context.resume_text.strip():
                continue
        elif not items:
            continue
        planned.append((section, items))

    tasks = [
        _run_section(section, items, [cls(client) for cls in SECTION_PLAN[section]], context)
        for section, items in planned
    ]
    outcomes = await asyncio.gather(*tasks, return_exceptions=True)

    result = GenerationResult()
    for (section, _), outcome in zip(planned, outcomes):
        if isinstance(outcome, ServiceError):
            logger.warning("Section %s failed (%s): %s", section, outcome.code.value, outcome.message)
            result.errors.append(
                SectionError(section=section, code=outcome.code.value, message=outcome.message)
            )
        elif isinstance(outcome, Exception):
            logger.error("Section %s failed unexpectedly", section, exc_info=outcome)
            result.errors.append(
                SectionError(
                    section=section,
                    code=ErrorCode.LLM_ERROR.value,
                    message="Suggestion generation failed for this section",
                )
            )
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            result.suggestions[section] = outcome
    return result
