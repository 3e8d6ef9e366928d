from conftest import SAMPLE_RESUME
from services.section_parser import (
    compute_section_completeness,
    extract_bullets,
    extract_experience_years,
    parse_resume,
    parse_sections,
    render_resume,
    section_order,
)


def test_parse_sections_detects_all():
    sections = parse_sections(SAMPLE_RESUME)
    assert "header" in sections
    assert "summary" in sections
    assert "experience" in sections
    assert "education" in sections
    assert "skills" in sections


def test_parse_sections_content():
    sections = parse_sections(SAMPLE_RESUME)
    assert "FastAPI" in sections["experience"]
    assert "Computer Science" in sections["education"]
    assert "Python" in sections["skills"]


def test_parse_sections_empty():
    sections = parse_sections("")
    assert len(sections) <= 1  # At most 'header' with empty content


def test_section_order():
    assert section_order(SAMPLE_RESUME) == ["summary", "experience", "education", "skills"]


def test_section_completeness_partial():
    completeness = compute_section_completeness({"experience": "x", "skills": "y"})
    assert 0 < completeness < 1


def test_experience_years_from_date_ranges():
    text = "Engineer | Jan 2018 - Jan 2021\nAnalyst | 2015 - 2017"
    assert extract_experience_years(text) == 5.0


def test_experience_years_overlapping_roles_counted_once():
    text = "Engineer | March 2018 – Mar 2020\nFreelance | 2019 to 2021"
    assert extract_experience_years(text) == 2.8


def test_experience_years_explicit_claim():
    assert extract_experience_years("Engineer with 8+ years of experience") == 8.0


class TestBullets:
    def test_markers_and_numbers(self):
        text = "• First bullet here\n- Second bullet here\n1. Third bullet here\nPlain line"
        assert extract_bullets(text) == ["First bullet here", "Second bullet here", "Third bullet here"]

    def test_no_bullets(self):
        assert extract_bullets("Just a paragraph of text.") == []


class TestParseResume:
    def test_header_kept(self):
        parsed = parse_resume(SAMPLE_RESUME)
        assert parsed.header.startswith("Jane Doe")

    def test_experience_items(self):
        parsed = parse_resume(SAMPLE_RESUME)
        jobs = parsed.items("experience")
        assert len(jobs) == 2
        assert jobs[0].heading.startswith("Software Engineer | Acme Corp")
        assert len(jobs[0].bullets) == 3
        assert jobs[1].bullets[1].startswith("Reduced page load time")

    def test_education_multi_line_heading(self):
        parsed = parse_resume(SAMPLE_RESUME)
        [degree] = parsed.items("education")
        assert degree.heading.split("\n") == [
            "B.S. Computer Science | State University | 2019",
            "Teaching assistant for Data Structures",
        ]
        assert degree.bullets == []

    def test_skills_one_item_per_skill(self):
        parsed = parse_resume(SAMPLE_RESUME)
        assert [item.heading for item in parsed.items("skills")] == ["Python", "React", "Docker", "SQL"]

    def test_skills_with_labels(self):
        parsed = parse_resume("Skills\nLanguages: Python, Go\nTools: Docker | Git")
        assert [item.heading for item in parsed.items("skills")] == ["Python", "Go", "Docker", "Git"]

    def test_summary_single_item(self):
        parsed = parse_resume(SAMPLE_RESUME)
        [summary] = parsed.items("summary")
        assert "Backend engineer" in summary.heading

    def test_missing_section(self):
        assert parse_resume(SAMPLE_RESUME).items("projects") == []


class TestRenderResume:
    def test_round_trip_keeps_content(self):
        parsed = parse_resume(SAMPLE_RESUME)
        rendered = render_resume(parsed)
        assert rendered.startswith("Jane Doe")
        assert "Experience\nSoftware Engineer | Acme Corp" in rendered
        assert "• Built REST APIs with FastAPI serving 2M requests per day" in rendered
        assert "Skills\nPython, React, Docker, SQL" in rendered

    def test_reparse_is_stable(self):
        parsed = parse_resume(SAMPLE_RESUME)
        reparsed = parse_resume(render_resume(parsed))
        assert reparsed.sections == parsed.sections
        assert reparsed.section_order == parsed.section_order
