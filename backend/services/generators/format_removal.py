"""Format and removal suggestions for the resume as a whole.

Local rules catch personal details that do not belong on a resume and
over-long documents; the model reviews everything else. Model output is
kept only when it quotes a line that really exists in the resume.
"""

import logging
import math
import re

from models.schemas.resume import ResumeItem
from models.schemas.suggestion import Suggestion
from services.generators.base import BaseSuggestionGenerator, GenerationContext
from services.prompt_builder import build_format_review_prompt
from services.section_parser import extract_experience_years

logger = logging.getLogger(__name__)

# (pattern, reason) for lines that should not appear on a resume
SENSITIVE_FIELDS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"\b(?:date\s+of\s+birth|d\.?o\.?b\.?|birth\s*date)\b", re.I),
     "Date of birth invites age bias and is not expected by employers."),
    (re.compile(r"^\s*age\s*[:\-]", re.I | re.M),
     "Age invites bias and is not expected by employers."),
    (re.compile(r"\bmarital\s+status\b", re.I),
     "Marital status is protected information and should be omitted."),
    (re.compile(r"\b(?:nationality|citizenship)\s*:", re.I),
     "Nationality should be replaced by work authorization if relevant."),
    (re.compile(r"\breligion\s*:", re.I),
     "Religion is protected information and should be omitted."),
    (re.compile(r"\b(?:gender|sex)\s*:", re.I),
     "Gender is protected information and should be omitted."),
    (re.compile(r"\b(?:ssn|social\s+security)\b", re.I),
     "Never include a social security number on a resume."),
    (re.compile(r"\bphoto(?:graph)?\s*(?:attached|:)", re.I),
     "Photos are discouraged and can break ATS parsing."),
    (re.compile(r"\breferences\s+(?:are\s+)?available\s+(?:up)?on\s+request\b", re.I),
     "Employers assume references are available; the line wastes space."),
]

WORDS_PER_PAGE = 500
# Fewer years than this should fit on one page
ONE_PAGE_MAX_YEARS = 10


def estimate_pages(text: str) -> int:
    return max(1, math.ceil(len(text.split()) / WORDS_PER_PAGE))


def sensitive_field_suggestions(resume_text: str) -> list[Suggestion]:
    suggestions = []
    for line_no, line in enumerate(resume_text.split("\n")):
        stripped = line.strip()
        if not stripped:
            continue
        for pattern, reason in SENSITIVE_FIELDS:
            if pattern.search(stripped):
                suggestions.append(
                    Suggestion(
                        section="format",
                        item_index=line_no,
                        original_text=stripped,
                        suggested_text="",
                        suggestion_type="removal",
                        reasoning=reason,
                    )
                )
                break
    return suggestions


def page_length_suggestion(resume_text: str, experience_years: float) -> Suggestion | None:
    pages = estimate_pages(resume_text)
    if pages <= 1 or experience_years >= ONE_PAGE_MAX_YEARS:
        return None
    return Suggestion(
        section="format",
        item_index=0,
        original_text=f"Resume length: about {pages} pages",
        suggested_text="Resume length: 1 page",
        suggestion_type="format",
        reasoning=(
            f"With about {experience_years:.0f} years of experience, recruiters expect one page. "
            "Trim older or less relevant entries."
        ),
    )


class FormatRemovalGenerator(BaseSuggestionGenerator):
    name = "format_removal"
    suggestion_types = ("format", "removal")

    async def generate(
        self, section: str, items: list[ResumeItem], context: GenerationContext
    ) -> list[Suggestion]:
        text = context.resume_text
        if not text.strip():
            return []

        suggestions = sensitive_field_suggestions(text)
        years = extract_experience_years(text)
        length = page_length_suggestion(text, years)
        if length:
            suggestions.append(length)

        lines = [line.strip() for line in text.split("\n")]
        seen = {s.original_text for s in suggestions}
        for entry in await self._ask(build_format_review_prompt(text, years)):
            kind = entry.get("type")
            original = str(entry.get("original") or "").strip()
            suggested = str(entry.get("suggested") or "").strip()
            if kind not in self.suggestion_types or not original or original in seen:
                continue
            if original not in lines:
                logger.debug("format_removal: model quoted a line not in the resume, dropping")
                continue
            if kind == "format" and (not suggested or suggested == original):
                continue
            seen.add(original)
            suggestions.append(
                Suggestion(
                    section=section,
                    item_index=lines.index(original),
                    original_text=original,
                    suggested_text="" if kind == "removal" else suggested,
                    suggestion_type=kind,
                    reasoning=str(entry.get("reasoning", "")),
                )
            )
        return suggestions
