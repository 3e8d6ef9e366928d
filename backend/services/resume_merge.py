"""Apply accepted suggestions to a parsed resume and render the result.

Only suggestions whose status is ``accepted`` are applied, located by
(section, item_index) and then by their original text inside that item.
Suggestions whose original text can no longer be found are skipped and
reported rather than guessed at.
"""

import logging

from models.schemas.diff import MergeResult, SkippedSuggestion
from models.schemas.resume import ParsedResume, ResumeItem
from models.schemas.suggestion import Suggestion
from services.section_parser import render_resume

logger = logging.getLogger(__name__)


def _same(a: str, b: str) -> bool:
    return " ".join(a.split()).lower() == " ".join(b.split()).lower()


def _replace_in_item(item: ResumeItem, original: str, replacement: str | None) -> bool:
    """Replace (or delete, when replacement is None) a bullet or heading line."""
    for i, bullet in enumerate(item.bullets):
        if _same(bullet, original):
            if replacement is None:
                del item.bullets[i]
            else:
                item.bullets[i] = replacement
            return True

    lines = item.heading.split("\n") if item.heading else []
    for i, line in enumerate(lines):
        if _same(line, original):
            if replacement is None:
                del lines[i]
            else:
                lines[i] = replacement
            item.heading = "\n".join(lines)
            return True
    return False


def _apply_to_header(resume: ParsedResume, original: str, replacement: str | None) -> bool:
    lines = resume.header.split("\n")
    for i, line in enumerate(lines):
        if _same(line, original):
            if replacement is None:
                del lines[i]
            else:
                lines[i] = replacement
            resume.header = "\n".join(lines)
            return True
    return False


def _apply_format(resume: ParsedResume, suggestion: Suggestion, replacement: str | None) -> bool:
    # Format suggestions quote a raw resume line, which may live anywhere.
    if _apply_to_header(resume, suggestion.original_text, replacement):
        return True
    for items in resume.sections.values():
        for item in items:
            if _replace_in_item(item, suggestion.original_text, replacement):
                return True
    return False


def _apply_sectioned(resume: ParsedResume, suggestion: Suggestion, replacement: str | None) -> bool:
    items = resume.items(suggestion.section)
    candidates = []
    if 0 <= suggestion.item_index < len(items):
        candidates.append(items[suggestion.item_index])
    # Fall back to the rest of the section when the item shifted.
    candidates.extend(item for item in items if all(item is not c for c in candidates))

    if suggestion.section == "skills":
        for item in candidates:
            if _same(item.heading, suggestion.original_text):
                item.heading = replacement or ""
                return True
        return False

    return any(_replace_in_item(item, suggestion.original_text, replacement) for item in candidates)


def merge_accepted_suggestions(resume: ParsedResume, suggestions: list[Suggestion]) -> MergeResult:
    """Apply accepted suggestions; pending and rejected ones are ignored."""
    merged = resume.model_copy(deep=True)
    result = MergeResult(resume=merged)

    accepted = sorted(
        (s for s in suggestions if s.status == "accepted"),
        key=lambda s: (s.section, s.item_index),
    )
    for suggestion in accepted:
        replacement = None if suggestion.suggestion_type == "removal" else suggestion.suggested_text
        if suggestion.section == "format":
            found = _apply_format(merged, suggestion, replacement)
        else:
            found = _apply_sectioned(merged, suggestion, replacement)

        if found:
            result.applied.append(suggestion.id)
        else:
            result.skipped.append(
                SkippedSuggestion(suggestion_id=suggestion.id, reason="Original text not found")
            )

    # Drop items emptied by removals.
    for name, items in merged.sections.items():
        merged.sections[name] = [item for item in items if item.heading or item.bullets]

    result.text = render_resume(merged)
    logger.info(
        "Merged %d suggestions (%d skipped) of %d accepted",
        len(result.applied), len(result.skipped), len(accepted),
    )
    return result
