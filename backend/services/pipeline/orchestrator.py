"""Pipeline orchestrator: wires the analysis and suggestion stages together.

Analysis flow:
    resume_text + jd_text
      ├─ analyze_keywords(jd, resume)        → KeywordAnalysisResult
      ├─ parse_sections / section_order      → structural_suggestions
      ├─ scorable_bullets → calculate_density → DensityResult
      └─ content / format / skills signals   → compute_score → ScoreBreakdown

Suggestion flow:
    parse_resume → generate_suggestions (per section, may be partial)
                 → judge_batch → vet
                 → collect_quality_metrics → store log → check_and_emit_alerts
"""

import logging
import uuid

from models.responses import AnalysisResponse, SectionAnalysis, SuggestionPipelineResult
from models.schemas.keywords import KeywordAnalysisResult
from models.schemas.suggestion import CandidateType
from services.errors import ActionResult, ErrorCode, ServiceError
from services.generators.base import GenerationContext
from services.generators.runner import generate_suggestions
from services.generators.structural import structural_suggestions
from services.judge import judge_batch, vet
from services.keyword_extractor import analyze_keywords
from services.llm_client import CompletionClient
from services.quality_metrics import AlertSink, check_and_emit_alerts, collect_quality_metrics
from services.quantification import calculate_density, scorable_bullets
from services.scoring import (
    compute_score,
    content_relevance_score,
    format_structure_score,
    skills_coverage_score,
)
from services.section_parser import (
    compute_section_completeness,
    extract_experience_years,
    parse_resume,
    parse_sections,
    section_order,
)
from services.suggestion_store import SuggestionStore

logger = logging.getLogger(__name__)

# Sections whose bullets count toward quantification density
BULLET_SECTIONS = ("experience", "projects")


def _bullet_source(resume_text: str, sections: dict[str, str]) -> str:
    body = "\n".join(sections[name] for name in BULLET_SECTIONS if sections.get(name))
    return body or resume_text


async def analyze_resume(
    resume_text: str,
    job_description: str,
    client: CompletionClient | None,
    candidate_type: CandidateType = "fulltime",
    keyword_analysis: KeywordAnalysisResult | None = None,
) -> ActionResult[AnalysisResponse]:
    """Score a resume against a job posting.

    Pass ``keyword_analysis`` to reuse an earlier extraction instead of
    calling the language model again.
    """
    if keyword_analysis is None:
        outcome = await analyze_keywords(job_description, resume_text, client)
        if not outcome.is_ok:
            return ActionResult(error=outcome.error)
        keyword_analysis = outcome.data

    # --- Structure ---
    sections = parse_sections(resume_text)
    order = section_order(resume_text)
    structural = structural_suggestions(candidate_type, sections, order, resume_text)

    # --- Quantification ---
    bullets = scorable_bullets(_bullet_source(resume_text, sections))
    density = calculate_density(bullets)

    # --- Scoring ---
    score = compute_score(
        keyword_analysis,
        density.density,
        content_score=content_relevance_score(bullets, keyword_analysis),
        format_score=format_structure_score(resume_text, structural),
        skills_score=skills_coverage_score(keyword_analysis),
    )

    return ActionResult.ok(
        AnalysisResponse(
            score=score,
            keyword_analysis=keyword_analysis,
            quantification=density,
            structural_suggestions=structural,
            section_analysis=SectionAnalysis(
                detected_sections=[name for name in sections if name != "header"],
                section_order=order,
                completeness=compute_section_completeness(sections),
            ),
            experience_years=extract_experience_years(resume_text),
        )
    )


async def run_suggestion_pipeline(
    resume_text: str,
    job_description: str,
    client: CompletionClient | None,
    candidate_type: CandidateType = "fulltime",
    keyword_analysis: KeywordAnalysisResult | None = None,
    sections: list[str] | None = None,
    store: SuggestionStore | None = None,
    alert_sink: AlertSink | None = None,
    run_id: str | None = None,
) -> ActionResult[SuggestionPipelineResult]:
    """Generate, judge and vet suggestions for one resume.

    Sections fail independently; a partial result lists them under
    ``failed_sections``. Suggestions the judge could not evaluate are
    returned unverified rather than dropped.
    """
    if client is None:
        return ActionResult.fail(ErrorCode.LLM_ERROR, "Language model is not configured")
    run_id = run_id or str(uuid.uuid4())

    if keyword_analysis is None:
        outcome = await analyze_keywords(job_description, resume_text, client)
        if not outcome.is_ok:
            return ActionResult(error=outcome.error)
        keyword_analysis = outcome.data

    # --- Stage 1: Generation ---
    resume = parse_resume(resume_text)
    context = GenerationContext(
        job_text=job_description,
        resume_text=resume_text,
        keyword_analysis=keyword_analysis,
        candidate_type=candidate_type,
    )
    generation = await generate_suggestions(resume, context, client, sections)
    suggestions = generation.all_suggestions

    # --- Stage 2: Judge ---
    outcomes = await judge_batch(suggestions, job_description, client, candidate_type)
    vetted = [vet(s, outcomes[s.id]) for s in suggestions]
    verdicts = [o.data for o in outcomes.values() if o.is_ok]

    # --- Stage 3: Quality metrics ---
    log = collect_quality_metrics(verdicts, section="all", run_id=run_id)
    if store is not None and log.total_evaluated:
        try:
            await store.append_quality_log(log)
        except ServiceError as e:
            logger.warning("Could not persist quality log for run %s: %s", run_id, e.message)
    alerts = check_and_emit_alerts(log, alert_sink)

    structural = structural_suggestions(
        candidate_type, parse_sections(resume_text), resume.section_order, resume_text
    )

    logger.info(
        "Suggestion run %s: %d suggestions (%d verified), %d failed sections",
        run_id,
        len(vetted),
        sum(1 for v in vetted if v.quality_flag == "verified"),
        len(generation.errors),
    )
    return ActionResult.ok(
        SuggestionPipelineResult(
            run_id=run_id,
            suggestions=vetted,
            failed_sections=generation.errors,
            structural_suggestions=structural,
            quality_log=log,
            alerts=alerts,
        )
    )
