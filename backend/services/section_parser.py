"""Resume section segmentation, bullet extraction and structured parsing."""

import re
from datetime import datetime

from models.schemas.resume import ParsedResume, ResumeItem

# Section header patterns and their canonical names
SECTION_PATTERNS: dict[str, list[str]] = {
    "experience": [
        r"(?:work|professional|employment)\s*(?:experience|history)",
        r"experience",
        r"career\s*(?:history|summary)",
        r"(?:positions?\s*held|roles)",
    ],
    "education": [
        r"education(?:al)?\s*(?:background|qualifications|history)?",
        r"academic\s*(?:background|qualifications)",
    ],
    "skills": [
        r"(?:technical|core|key|professional)?\s*skills",
        r"(?:technical|core)?\s*(?:competencies|proficiencies|expertise)",
        r"technologies",
    ],
    "summary": [
        r"(?:professional|executive|career)?\s*summary",
        r"(?:career|professional)?\s*objective",
        r"profile",
    ],
    "projects": [
        r"(?:key|notable|selected|personal)?\s*projects",
        r"project\s*experience",
        r"portfolio",
    ],
    "certifications": [
        r"certific(?:ations?|ates?)",
        r"licen[sc]es?\s*(?:&|and)?\s*certific(?:ations?|ates?)",
    ],
    "achievements": [
        r"(?:key\s+)?achievements?",
        r"(?:awards?|honors?|accomplishments)",
    ],
}

# Compile all patterns into a single regex per section
_COMPILED: dict[str, re.Pattern] = {}
for section, patterns in SECTION_PATTERNS.items():
    combined = "|".join(patterns)
    _COMPILED[section] = re.compile(
        rf"^\s*(?:{combined})\s*:?\s*$", re.IGNORECASE | re.MULTILINE
    )

# Weighted section importance for completeness scoring
SECTION_WEIGHTS: dict[str, float] = {
    "experience": 20,
    "skills": 15,
    "education": 12,
    "projects": 12,
    "summary": 10,
    "certifications": 8,
    "achievements": 5,
}
_TOTAL_WEIGHT = sum(SECTION_WEIGHTS.values())

# Bullet markers: standard + expanded unicode set
BULLET_MARKERS = frozenset("•-–—―►▪✓*○◆⚫→▸▹◇■□●")
_NUMBERED_RE = re.compile(r"^\d{1,2}[.)]\s")
_SKILL_SPLIT_RE = re.compile(r"\s*[,;|•·]\s*")


def _match_heading(line: str) -> str | None:
    stripped = line.strip()
    if not stripped:
        return None
    for section_name, pattern in _COMPILED.items():
        if pattern.match(stripped):
            return section_name
    return None


def parse_sections(text: str) -> dict[str, str]:
    """Split resume text into named sections.

    Returns a dict mapping section name -> section text content.
    Unmatched text at the top goes into 'header'.
    """
    sections: dict[str, str] = {}
    current_section = "header"
    current_lines: list[str] = []

    for line in text.split("\n"):
        matched_section = _match_heading(line)
        if matched_section:
            if current_lines:
                sections[current_section] = "\n".join(current_lines).strip()
            current_section = matched_section
            current_lines = []
        else:
            current_lines.append(line)

    if current_lines:
        sections[current_section] = "\n".join(current_lines).strip()

    return sections


def section_order(text: str) -> list[str]:
    """Canonical section names in the order their headings appear."""
    order: list[str] = []
    for line in text.split("\n"):
        name = _match_heading(line)
        if name and name not in order:
            order.append(name)
    return order


def compute_section_completeness(sections: dict[str, str]) -> float:
    """Score 0.0-1.0 based on weighted importance of present sections."""
    found_weight = sum(
        SECTION_WEIGHTS[s] for s in SECTION_WEIGHTS if sections.get(s)
    )
    return round(found_weight / _TOTAL_WEIGHT, 3)


def _bullet_text(line: str) -> str | None:
    """Return the bullet body if ``line`` is a bullet, else None."""
    stripped = line.strip()
    if not stripped:
        return None
    if stripped[0] in BULLET_MARKERS:
        return stripped.lstrip("".join(BULLET_MARKERS) + " ").strip()
    if _NUMBERED_RE.match(stripped):
        return re.sub(r"^\d{1,2}[.)]\s*", "", stripped).strip()
    return None


def extract_bullets(text: str) -> list[str]:
    """Extract bullet-point lines from resume text."""
    bullets = []
    for line in text.split("\n"):
        body = _bullet_text(line)
        if body:
            bullets.append(body)
    return bullets


# ---------------------------------------------------------------------------
# Structured parsing
# ---------------------------------------------------------------------------

def _parse_entries(section_text: str) -> list[ResumeItem]:
    """Group a section's lines into entries: heading lines, then bullets.

    A blank line or a heading line that follows bullets starts a new entry.
    """
    items: list[ResumeItem] = []
    current: ResumeItem | None = None

    for line in section_text.split("\n"):
        stripped = line.strip()
        if not stripped:
            current = None
            continue
        body = _bullet_text(stripped)
        if body is not None:
            if not body:
                continue
            if current is None:
                current = ResumeItem()
                items.append(current)
            current.bullets.append(body)
        elif current is None or current.bullets:
            current = ResumeItem(heading=stripped)
            items.append(current)
        else:
            current.heading = f"{current.heading}\n{stripped}" if current.heading else stripped
    return items


def _parse_skills(section_text: str) -> list[ResumeItem]:
    skills: list[ResumeItem] = []
    for line in section_text.split("\n"):
        body = _bullet_text(line)
        line = body if body is not None else line.strip()
        if ":" in line:
            line = line.split(":", 1)[1]
        for skill in _SKILL_SPLIT_RE.split(line):
            skill = skill.strip()
            if skill:
                skills.append(ResumeItem(heading=skill))
    return skills


def parse_resume(text: str) -> ParsedResume:
    """Parse raw resume text into sections of items."""
    sections = parse_sections(text)
    titles: dict[str, str] = {}
    for line in text.split("\n"):
        name = _match_heading(line)
        if name and name not in titles:
            titles[name] = line.strip().rstrip(":")

    parsed: dict[str, list[ResumeItem]] = {}
    for name, body in sections.items():
        if name == "header":
            continue
        if name == "skills":
            parsed[name] = _parse_skills(body)
        elif name == "summary":
            parsed[name] = [ResumeItem(heading=body)] if body else []
        else:
            parsed[name] = _parse_entries(body)

    return ParsedResume(
        header=sections.get("header", ""),
        sections=parsed,
        section_order=section_order(text),
        section_titles=titles,
    )


def render_resume(resume: ParsedResume) -> str:
    """Render a ParsedResume back to plain text."""
    blocks: list[str] = []
    if resume.header:
        blocks.append(resume.header.strip())

    for name in resume.section_order:
        items = resume.items(name)
        title = resume.section_titles.get(name, name.title())
        if name == "skills":
            body = ", ".join(item.heading for item in items if item.heading)
        else:
            entries = []
            for item in items:
                lines = [item.heading] if item.heading else []
                lines.extend(f"• {b}" for b in item.bullets)
                entries.append("\n".join(lines))
            body = "\n\n".join(e for e in entries if e)
        blocks.append(f"{title}\n{body}" if body else title)

    return "\n\n".join(blocks).strip()


# ---------------------------------------------------------------------------
# Experience duration
# ---------------------------------------------------------------------------

# "5+ years of experience", "3 yrs exp"
EXP_YEARS_RE = re.compile(
    r"(\d+)\+?\s*(?:years?|yrs?)\s*(?:of\s+)?(?:experience|exp\b)",
    re.IGNORECASE,
)

_MONTH_NAMES = ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec")
_DATE = r"(?:(?P<{0}_month>[A-Za-z]{{3}})[a-z]*\.?\s*)?(?P<{0}_year>\d{{4}})"
# "Jan 2019 - Present", "2020 - 2023", "March 2018 – Nov 2022", "2016 to 2018"
DATE_RANGE_RE = re.compile(
    _DATE.format("start")
    + r"\s*(?:[-–—]+|to)\s*"
    + rf"(?:{_DATE.format('end')}|(?P<open>present|current|now))",
    re.IGNORECASE,
)

MAX_ROLE_MONTHS = 600


def _month_index(year: str, month: str | None, default: int) -> int:
    """Months since year 0; unknown month names fall back to ``default``."""
    number = default
    if month and month.lower() in _MONTH_NAMES:
        number = _MONTH_NAMES.index(month.lower()) + 1
    return int(year) * 12 + number - 1


def _role_spans(text: str) -> list[tuple[int, int]]:
    now = datetime.now()
    spans = []
    for m in DATE_RANGE_RE.finditer(text):
        start = _month_index(m["start_year"], m["start_month"], 1)
        if m["open"]:
            end = now.year * 12 + now.month - 1
        else:
            end = _month_index(m["end_year"], m["end_month"], 1)
        if 0 < end - start < MAX_ROLE_MONTHS:
            spans.append((start, end))
    return spans


def _covered_months(spans: list[tuple[int, int]]) -> int:
    """Total months covered, counting overlapping roles once."""
    total = 0
    current_start, current_end = None, None
    for start, end in sorted(spans):
        if current_end is None or start > current_end:
            if current_end is not None:
                total += current_end - current_start
            current_start, current_end = start, end
        else:
            current_end = max(current_end, end)
    if current_end is not None:
        total += current_end - current_start
    return total


def extract_experience_years(text: str) -> float:
    """Estimate years of experience from resume text.

    Takes the larger of an explicit claim and the months covered by role
    date ranges, where concurrent roles are not double counted.
    """
    claimed = max((float(m.group(1)) for m in EXP_YEARS_RE.finditer(text)), default=0.0)
    months = _covered_months(_role_spans(text))
    return max(claimed, round(months / 12, 1))
