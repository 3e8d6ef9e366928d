"""Deterministic structural suggestions: section order, presence and headings.

Eight rules keyed on candidate type. No model, no I/O.
"""

import re
from collections.abc import Callable

from models.schemas.suggestion import CandidateType, StructuralSuggestion

# Informal headings ATS parsers may fail to categorize -> standard heading
UNSAFE_HEADERS: dict[str, str] = {
    "my journey": "Professional Experience",
    "track record": "Professional Experience",
    "career path": "Professional Experience",
    "what i've done": "Professional Experience",
    "what i know": "Technical Skills",
    "my toolkit": "Technical Skills",
    "tech stack": "Technical Skills",
    "learning": "Education",
    "where i studied": "Education",
    "things i've built": "Projects",
    "my work": "Projects",
    "about me": "Professional Summary",
    "who i am": "Professional Summary",
}


class StructureInput:
    """What the rules look at: which sections exist, their order, raw text."""

    def __init__(
        self,
        candidate_type: CandidateType,
        sections: dict[str, str],
        order: list[str],
        raw_text: str = "",
    ) -> None:
        self.candidate_type = candidate_type
        self.sections = sections
        self.order = order
        self.raw_text = raw_text

    def has(self, section: str) -> bool:
        return bool(self.sections.get(section, "").strip())

    def before(self, first: str, second: str) -> bool:
        """True when both sections are present and ``first`` precedes ``second``."""
        if first not in self.order or second not in self.order:
            return False
        return self.order.index(first) < self.order.index(second)


Rule = Callable[[StructureInput], StructuralSuggestion | None]


def _coop_experience_before_education(s: StructureInput) -> StructuralSuggestion | None:
    if s.candidate_type != "coop" or not s.before("experience", "education"):
        return None
    return StructuralSuggestion(
        id="rule-coop-exp-before-edu",
        category="section_order",
        priority="high",
        message="For co-op/internship resumes, Education should come before Experience",
        current_state="Experience section appears before Education section",
        recommended_action=(
            "Move Education above Experience so academic credentials are seen first."
        ),
    )


def _coop_skills_not_first(s: StructureInput) -> StructuralSuggestion | None:
    if s.candidate_type != "coop":
        return None
    missing = not s.has("skills")
    if not missing and (not s.order or s.order[0] == "skills"):
        return None
    return StructuralSuggestion(
        id="rule-coop-no-skills-at-top",
        category="section_presence",
        priority="critical",
        message="Co-op resumes must lead with a Skills section",
        current_state="Skills section is missing" if missing else "Skills section is not positioned first",
        recommended_action=(
            "Add or move Skills to the top of the resume, right after the header, "
            "to put technical keywords where ATS and recruiters look first."
        ),
    )


def _coop_summary_present(s: StructureInput) -> StructuralSuggestion | None:
    if s.candidate_type != "coop" or not s.has("summary"):
        return None
    return StructuralSuggestion(
        id="rule-coop-generic-summary",
        category="section_presence",
        priority="high",
        message="Co-op resumes typically should not include a Professional Summary",
        current_state="Professional Summary section is present",
        recommended_action="Remove the summary and use the space for Projects or relevant coursework.",
    )


def _coop_projects_heading(s: StructureInput) -> StructuralSuggestion | None:
    if s.candidate_type != "coop" or not s.has("projects"):
        return None
    return StructuralSuggestion(
        id="rule-coop-projects-heading",
        category="section_heading",
        priority="moderate",
        message='Use "Project Experience" heading instead of "Projects"',
        current_state='Section is titled "Projects"',
        recommended_action='Rename the heading to "Project Experience" for better ATS recognition.',
    )


def _fulltime_education_before_experience(s: StructureInput) -> StructuralSuggestion | None:
    if s.candidate_type != "fulltime" or not s.before("education", "experience"):
        return None
    return StructuralSuggestion(
        id="rule-fulltime-edu-before-exp",
        category="section_order",
        priority="high",
        message="For full-time positions, Experience should come before Education",
        current_state="Education section appears before Experience section",
        recommended_action="Move Experience above Education to lead with professional work.",
    )


def _career_changer_no_summary(s: StructureInput) -> StructuralSuggestion | None:
    if s.candidate_type != "career_changer" or s.has("summary"):
        return None
    return StructuralSuggestion(
        id="rule-career-changer-no-summary",
        category="section_presence",
        priority="critical",
        message="Career changers must include a Professional Summary",
        current_state="Professional Summary section is missing",
        recommended_action=(
            "Add a summary at the top that explains the transition and names transferable skills."
        ),
    )


def _career_changer_education_below_experience(s: StructureInput) -> StructuralSuggestion | None:
    if s.candidate_type != "career_changer" or not s.before("experience", "education"):
        return None
    return StructuralSuggestion(
        id="rule-career-changer-edu-below-exp",
        category="section_order",
        priority="high",
        message="For career changers, Education should come before Experience",
        current_state="Education section appears after Experience section",
        recommended_action="Move Education above Experience; the degree is the pivot credential.",
    )


def _non_standard_headings(s: StructureInput) -> StructuralSuggestion | None:
    if not s.raw_text:
        return None
    lower = s.raw_text.lower()
    # Whole-line matches only, so "machine learning" in a bullet is not a heading.
    detected = [
        f'"{unsafe}" -> "{standard}"'
        for unsafe, standard in UNSAFE_HEADERS.items()
        if re.search(rf"^\s*{re.escape(unsafe)}\s*:?\s*$", lower, re.M)
    ]
    if not detected:
        return None
    return StructuralSuggestion(
        id="rule-non-standard-headers",
        category="section_heading",
        priority="moderate",
        message="Non-standard section headings detected",
        current_state=f"Detected: {', '.join(detected)}",
        recommended_action="Replace informal headings with standard ATS-friendly ones.",
    )


RULES: tuple[Rule, ...] = (
    _coop_experience_before_education,
    _coop_skills_not_first,
    _coop_summary_present,
    _coop_projects_heading,
    _fulltime_education_before_experience,
    _career_changer_no_summary,
    _career_changer_education_below_experience,
    _non_standard_headings,
)


def structural_suggestions(
    candidate_type: CandidateType,
    sections: dict[str, str],
    order: list[str],
    raw_text: str = "",
) -> list[StructuralSuggestion]:
    """Apply every structural rule and collect the ones that fire."""
    structure = StructureInput(candidate_type, sections, order, raw_text)
    return [s for s in (rule(structure) for rule in RULES) if s is not None]
