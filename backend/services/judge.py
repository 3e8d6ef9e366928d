"""Suggestion judge: rubric-constrained quality verdicts.

A candidate suggestion either gets a ``JudgeResult`` (including failing
verdicts for near-duplicates and malformed model output) or a retryable
error when the model call itself failed or timed out. Unjudged
suggestions are never treated as passed.
"""

import asyncio
import logging
import re

from pydantic import ValidationError

from config import settings
from models.schemas.judge_result import CriteriaBreakdown, JudgeResult, Recommendation
from models.schemas.suggestion import CandidateType, Suggestion, VettedSuggestion
from services.errors import ActionResult, ErrorCode, LLMError, ServiceError
from services.llm_client import CompletionClient, parse_json_response
from services.prompt_builder import build_judge_prompt
from services.rounding import round_half_up

logger = logging.getLogger(__name__)

NEAR_DUPLICATE_SIMILARITY = 0.95
NEAR_DUPLICATE_SCORE = 25
JD_EXCERPT_CHARS = 600

_WORD_RE = re.compile(r"[a-z0-9+#.]{3,}")


def _normalize(text: str) -> str:
    return " ".join(text.lower().split())


def _bigrams(text: str) -> set[str]:
    return {text[i:i + 2] for i in range(len(text) - 1)}


def text_similarity(a: str, b: str) -> float:
    """Jaccard similarity of character bigrams after whitespace normalization."""
    a, b = _normalize(a), _normalize(b)
    if a == b:
        return 1.0
    grams_a, grams_b = _bigrams(a), _bigrams(b)
    if not grams_a or not grams_b:
        return 0.0
    return len(grams_a & grams_b) / len(grams_a | grams_b)


def is_near_duplicate(original: str, suggested: str) -> bool:
    return text_similarity(original, suggested) > NEAR_DUPLICATE_SIMILARITY


def recommendation_for(score: float) -> Recommendation:
    if score >= settings.judge_pass_threshold:
        return "accept"
    if score >= settings.judge_borderline_threshold:
        return "revise"
    return "reject"


def extract_jd_excerpt(job_text: str, suggestion_text: str, limit: int = JD_EXCERPT_CHARS) -> str:
    """Job-description lines that share words with the suggestion.

    Falls back to the head of the job description when nothing overlaps.
    """
    words = set(_WORD_RE.findall(suggestion_text.lower()))
    lines = [line.strip() for line in job_text.split("\n") if line.strip()]
    scored = [
        (len(words & set(_WORD_RE.findall(line.lower()))), i)
        for i, line in enumerate(lines)
    ]
    picked = sorted(i for overlap, i in sorted(scored, reverse=True)[:8] if overlap > 0)
    if not picked:
        return job_text.strip()[:limit]

    excerpt: list[str] = []
    size = 0
    for i in picked:
        if size + len(lines[i]) > limit:
            break
        excerpt.append(lines[i])
        size += len(lines[i]) + 1
    return "\n".join(excerpt) or lines[picked[0]][:limit]


def _failed_verdict(suggestion_id: str, score: int, reasoning: str, **criteria: int) -> JudgeResult:
    return JudgeResult(
        suggestion_id=suggestion_id,
        quality_score=score,
        passed=False,
        criteria_breakdown=CriteriaBreakdown(**criteria),
        recommendation="reject",
        reasoning=reasoning,
    )


def parse_verdict(suggestion_id: str, raw: str) -> JudgeResult:
    """Turn raw model output into a JudgeResult; bad output fails the suggestion."""
    try:
        data = parse_json_response(raw)
        if not isinstance(data, dict):
            raise LLMError("Judge returned a non-object")
        criteria = CriteriaBreakdown(
            authenticity=data["authenticity"],
            clarity=data["clarity"],
            ats_relevance=data["ats_relevance"],
            actionability=data["actionability"],
        )
        score = data["overall_score"]
        if isinstance(score, bool) or not isinstance(score, (int, float)) or not 0 <= score <= 100:
            raise ValueError(f"overall_score out of range: {score!r}")
    except (LLMError, KeyError, ValueError, TypeError, ValidationError) as e:
        logger.warning("Malformed judge output for %s: %s", suggestion_id, e)
        return _failed_verdict(suggestion_id, 0, "Judge output could not be interpreted.")

    # Thresholds compare the unrounded score
    return JudgeResult(
        suggestion_id=suggestion_id,
        quality_score=round_half_up(score),
        passed=score >= settings.judge_pass_threshold,
        criteria_breakdown=criteria,
        recommendation=recommendation_for(score),
        reasoning=str(data.get("reasoning", "")),
    )


async def judge_suggestion(
    suggestion: Suggestion,
    jd_excerpt: str,
    client: CompletionClient | None,
    candidate_type: CandidateType | None = None,
) -> ActionResult[JudgeResult]:
    """Evaluate one suggestion against the four-criterion rubric."""
    if is_near_duplicate(suggestion.original_text, suggestion.suggested_text):
        logger.info("Judge: %s is a near-duplicate of its original", suggestion.id)
        return ActionResult.ok(
            _failed_verdict(
                suggestion.id,
                NEAR_DUPLICATE_SCORE,
                "Suggestion is effectively identical to the original text.",
                authenticity=25,
            )
        )
    if client is None:
        return ActionResult.fail(ErrorCode.LLM_ERROR, "Language model is not configured")

    prompt = build_judge_prompt(
        suggestion.original_text,
        suggestion.suggested_text,
        jd_excerpt,
        suggestion.section,
        candidate_type,
    )
    try:
        raw = await client.complete(prompt, timeout=settings.judge_timeout_seconds)
    except ServiceError as e:
        logger.warning("Judge call failed for %s (%s): %s", suggestion.id, e.code.value, e.message)
        return ActionResult.from_exception(e)
    except Exception as e:
        logger.error("Judge call for %s failed unexpectedly", suggestion.id, exc_info=e)
        return ActionResult.fail(ErrorCode.LLM_ERROR, "Suggestion could not be verified")

    verdict = parse_verdict(suggestion.id, raw)
    if settings.judge_trace:
        c = verdict.criteria_breakdown
        logger.debug(
            "Judge trace id=%s section=%s type=%s score=%d passed=%s "
            "auth=%d clarity=%d ats=%d action=%d",
            suggestion.id, suggestion.section, suggestion.suggestion_type,
            verdict.quality_score, verdict.passed,
            c.authenticity, c.clarity, c.ats_relevance, c.actionability,
        )
    return ActionResult.ok(verdict)


async def judge_batch(
    suggestions: list[Suggestion],
    job_text: str,
    client: CompletionClient | None,
    candidate_type: CandidateType | None = None,
    concurrency: int | None = None,
) -> dict[str, ActionResult[JudgeResult]]:
    """Judge suggestions concurrently, bounded by a semaphore. Keyed by suggestion id."""
    semaphore = asyncio.Semaphore(concurrency or settings.judge_concurrency)

    async def _one(suggestion: Suggestion) -> ActionResult[JudgeResult]:
        excerpt = extract_jd_excerpt(job_text, suggestion.suggested_text or suggestion.original_text)
        async with semaphore:
            return await judge_suggestion(suggestion, excerpt, client, candidate_type)

    outcomes = await asyncio.gather(*(_one(s) for s in suggestions))
    return {s.id: outcome for s, outcome in zip(suggestions, outcomes)}


def vet(suggestion: Suggestion, outcome: ActionResult[JudgeResult]) -> VettedSuggestion:
    if outcome.error is not None:
        return VettedSuggestion(
            suggestion=suggestion,
            judge_error=outcome.error.code.value,
            retryable=outcome.error.retryable,
        )
    verdict = outcome.data
    return VettedSuggestion(
        suggestion=suggestion,
        judge=verdict,
        quality_flag="verified" if verdict.passed else "unverified",
    )
