"""Bullet-level generators for experience and projects entries.

Each one gates locally before calling the model, so bullets that do not
need its kind of edit never reach the prompt.
"""

import logging
import re

from models.schemas.resume import ResumeItem
from models.schemas.suggestion import Suggestion
from services.generators.action_verbs import (
    STRONG_VERBS,
    WEAK_VERBS,
    starts_with_strong_verb,
)
from services.generators.base import (
    BaseSuggestionGenerator,
    GenerationContext,
    bullet_refs,
)
from services.prompt_builder import (
    build_action_verb_prompt,
    build_bullet_rewrite_prompt,
    build_quantification_prompt,
)
from services.quantification import has_metrics

logger = logging.getLogger(__name__)

PLACEHOLDER = "[X]"
_DIGITS_RE = re.compile(r"\d+")


def _mentions_any(text: str, keywords: list[str]) -> bool:
    lower = text.lower()
    return any(kw.lower() in lower for kw in keywords)


class BulletRewriteGenerator(BaseSuggestionGenerator):
    name = "bullet_rewrite"
    suggestion_types = ("bullet_rewrite",)

    async def generate(
        self, section: str, items: list[ResumeItem], context: GenerationContext
    ) -> list[Suggestion]:
        keywords = context.target_keywords
        refs = [
            (i, b) for i, b in bullet_refs(items)
            if not (starts_with_strong_verb(b) and has_metrics(b) and _mentions_any(b, keywords))
        ]
        if not refs:
            return []

        prompt = build_bullet_rewrite_prompt(
            [b for _, b in refs], keywords, context.job_excerpt, section
        )
        entries = await self._ask(prompt)
        return [
            Suggestion(
                section=section,
                item_index=item_index,
                original_text=original,
                suggested_text=str(entry["suggested"]).strip(),
                suggestion_type="bullet_rewrite",
                reasoning=str(entry.get("reasoning", "")),
            )
            for item_index, original, entry in self._resolve(entries, refs)
        ]


class ActionVerbGenerator(BaseSuggestionGenerator):
    name = "action_verb"
    suggestion_types = ("action_verb",)

    async def generate(
        self, section: str, items: list[ResumeItem], context: GenerationContext
    ) -> list[Suggestion]:
        refs = [(i, b) for i, b in bullet_refs(items) if not starts_with_strong_verb(b)]
        if not refs:
            return []

        prompt = build_action_verb_prompt(
            [b for _, b in refs], sorted(STRONG_VERBS), list(WEAK_VERBS)
        )
        entries = await self._ask(prompt)
        suggestions = []
        for item_index, original, entry in self._resolve(entries, refs):
            reasoning = str(entry.get("reasoning", ""))
            alternatives = entry.get("alternatives")
            if isinstance(alternatives, list) and alternatives:
                reasoning = f"{reasoning} Alternatives: {', '.join(map(str, alternatives))}.".strip()
            suggestions.append(
                Suggestion(
                    section=section,
                    item_index=item_index,
                    original_text=original,
                    suggested_text=str(entry["suggested"]).strip(),
                    suggestion_type="action_verb",
                    reasoning=reasoning,
                )
            )
        return suggestions


class QuantificationGenerator(BaseSuggestionGenerator):
    """Suggests where a metric belongs, never what it is."""

    name = "quantification"
    suggestion_types = ("quantification",)

    async def generate(
        self, section: str, items: list[ResumeItem], context: GenerationContext
    ) -> list[Suggestion]:
        refs = [(i, b) for i, b in bullet_refs(items) if not has_metrics(b)]
        if not refs:
            return []

        entries = await self._ask(build_quantification_prompt([b for _, b in refs]))
        suggestions = []
        for item_index, original, entry in self._resolve(entries, refs):
            suggested = str(entry["suggested"]).strip()
            if PLACEHOLDER not in suggested:
                logger.debug("quantification: no placeholder in %r, dropping", suggested)
                continue
            # Numbers absent from the original are invented.
            if set(_DIGITS_RE.findall(suggested)) - set(_DIGITS_RE.findall(original)):
                logger.warning("quantification: dropping suggestion with invented numbers")
                continue
            reasoning = str(entry.get("reasoning", ""))
            if entry.get("prompt"):
                reasoning = f"{reasoning} {entry['prompt']}".strip()
            suggestions.append(
                Suggestion(
                    section=section,
                    item_index=item_index,
                    original_text=original,
                    suggested_text=suggested,
                    suggestion_type="quantification",
                    reasoning=reasoning,
                )
            )
        return suggestions
