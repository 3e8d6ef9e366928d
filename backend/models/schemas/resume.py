"""Parsed resume structure used by generators and the merge engine."""

from pydantic import BaseModel


class ResumeItem(BaseModel):
    """One entry of a section: a job, a degree, a project or a single skill."""
    heading: str = ""
    bullets: list[str] = []

    @property
    def text(self) -> str:
        lines = [self.heading] if self.heading else []
        lines.extend(f"- {b}" for b in self.bullets)
        return "\n".join(lines)


class ParsedResume(BaseModel):
    header: str = ""
    sections: dict[str, list[ResumeItem]] = {}
    section_order: list[str] = []
    section_titles: dict[str, str] = {}  # canonical name -> heading as written

    def items(self, section: str) -> list[ResumeItem]:
        return self.sections.get(section, [])

    def section_text(self, section: str) -> str:
        return "\n".join(item.text for item in self.items(section))
