"""Shared test fixtures: an offline completion client and a recording alert sink."""

import json

import pytest

from services.errors import ServiceError

# Unique phrases of each prompt template, used to route canned responses
KEYWORDS = "ATS (Applicant Tracking System) analyst"
BULLET_REWRITE = "Rewrite the"
ACTION_VERB = "specializing in action verbs"
QUANTIFICATION = "achievement quantification"
TRANSFERABLE = "reframes experience"
FORMAT_REVIEW = "ATS formatting expert"
JUDGE = "You are a VERIFIER"

EMPTY_SUGGESTIONS = json.dumps({"suggestions": []})


class StubCompletionClient:
    """Returns canned responses keyed by a marker found in the prompt.

    A response may be a string, a dict (serialized to JSON), an exception
    instance (raised), or a callable taking the prompt.
    """

    def __init__(self, responses: dict | None = None, default: str = EMPTY_SUGGESTIONS):
        self.responses = responses or {}
        self.default = default
        self.prompts: list[str] = []

    def calls_for(self, marker: str) -> list[str]:
        return [p for p in self.prompts if marker in p]

    async def complete(self, prompt: str, *, timeout: float | None = None) -> str:
        self.prompts.append(prompt)
        for marker, response in self.responses.items():
            if marker not in prompt:
                continue
            if callable(response):
                response = response(prompt)
            if isinstance(response, ServiceError):
                raise response
            if isinstance(response, dict):
                return json.dumps(response)
            return response
        return self.default


class RecordingAlertSink:
    def __init__(self):
        self.alerts: list[tuple[str, str, str, str]] = []

    def emit(self, level, message, *, run_id="", section=""):
        self.alerts.append((level, message, run_id, section))


def judge_response(
    overall: int, authenticity=20, clarity=20, ats_relevance=20, actionability=20, reasoning="ok"
) -> dict:
    return {
        "authenticity": authenticity,
        "clarity": clarity,
        "ats_relevance": ats_relevance,
        "actionability": actionability,
        "overall_score": overall,
        "reasoning": reasoning,
    }


def keywords_response(*keywords: tuple[str, str, str]) -> dict:
    return {
        "keywords": [
            {"keyword": text, "category": category, "importance": importance}
            for text, category, importance in keywords
        ]
    }


SAMPLE_RESUME = """Jane Doe
jane.doe@email.com | (555) 123-4567

Summary
Backend engineer with 4 years building Python services.

Experience
Software Engineer | Acme Corp | Jan 2021 - Present
• Responsible for maintaining the billing service written in Python
• Built REST APIs with FastAPI serving 2M requests per day
• Helped migrate deployments to Docker and Kubernetes

Junior Developer | Startup Inc | Jun 2019 - Dec 2020
• Worked on internal dashboards using React
• Reduced page load time by 40% through caching with Redis

Education
B.S. Computer Science | State University | 2019
Teaching assistant for Data Structures

Skills
Python, React, Docker, SQL
"""

SAMPLE_JD = """Senior Backend Engineer

We need a backend engineer to build and scale Python services.
Requirements:
- Strong Python and FastAPI experience
- PostgreSQL and Redis
- Docker and Kubernetes in production
Nice to have:
- GraphQL
"""


@pytest.fixture
def stub_client():
    return StubCompletionClient()


@pytest.fixture
def alert_sink():
    return RecordingAlertSink()
