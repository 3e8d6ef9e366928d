from fastapi import APIRouter, Depends, HTTPException, Query, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import (
    get_alert_sink,
    get_lifecycle_manager,
    get_llm_client,
    get_principal,
    get_store,
)
from config import settings
from models.requests import (
    AnalyzeRequest,
    DiffRequest,
    GenerateSuggestionsRequest,
    MergeRequest,
    StatusUpdateRequest,
)
from models.responses import (
    AnalysisResponse,
    DiffResponse,
    GenerateSuggestionsResponse,
    MergeResponse,
)
from models.schemas.quality import QualityHealth
from models.schemas.suggestion import BulkUpdateResult, Section, Suggestion, SuggestionSummary
from services.errors import ActionResult, ErrorCode
from services.llm_client import CompletionClient
from services.pipeline.orchestrator import analyze_resume, run_suggestion_pipeline
from services.quality_metrics import AlertSink, evaluate_quality_health
from services.resume_merge import merge_accepted_suggestions
from services.section_parser import parse_resume
from services.suggestion_lifecycle import SuggestionLifecycleManager
from services.suggestion_store import SuggestionStore
from services.text_diff import compute_word_diff, count_changes

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)

HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.RATE_LIMITED: 429,
    ErrorCode.LLM_ERROR: 502,
    ErrorCode.DB_ERROR: 503,
    ErrorCode.LLM_TIMEOUT: 504,
}


def _unwrap(result: ActionResult):
    if result.error is not None:
        raise HTTPException(
            status_code=HTTP_STATUS[result.error.code],
            detail={
                "code": result.error.code.value,
                "message": result.error.message,
                "retryable": result.error.retryable,
            },
        )
    return result.data


@router.get("/health")
async def health():
    return {
        "status": "ok",
        "gemini_configured": bool(settings.gemini_api_key),
    }


@router.post("/analyze", response_model=AnalysisResponse)
@limiter.limit("10/minute")
async def analyze(
    request: Request,
    body: AnalyzeRequest,
    client: CompletionClient | None = Depends(get_llm_client),
):
    return _unwrap(
        await analyze_resume(body.resume_text, body.job_description, client, body.candidate_type)
    )


@router.post("/scans", status_code=201)
async def create_scan(
    principal: str = Depends(get_principal),
    manager: SuggestionLifecycleManager = Depends(get_lifecycle_manager),
):
    return {"scan_id": _unwrap(await manager.create_scan(principal))}


@router.post("/scans/{scan_id}/suggestions/generate", response_model=GenerateSuggestionsResponse)
@limiter.limit("10/minute")
async def generate(
    request: Request,
    scan_id: str,
    body: GenerateSuggestionsRequest,
    principal: str = Depends(get_principal),
    manager: SuggestionLifecycleManager = Depends(get_lifecycle_manager),
    store: SuggestionStore = Depends(get_store),
    client: CompletionClient | None = Depends(get_llm_client),
    alert_sink: AlertSink = Depends(get_alert_sink),
):
    scan_id = _unwrap(await manager.verify_scan(principal, scan_id))
    result = _unwrap(
        await run_suggestion_pipeline(
            body.resume_text,
            body.job_description,
            client,
            candidate_type=body.candidate_type,
            sections=body.sections,
            store=store,
            alert_sink=alert_sink,
        )
    )
    saved = _unwrap(
        await manager.save_suggestions(principal, scan_id, [v.suggestion for v in result.suggestions])
    )
    return GenerateSuggestionsResponse(**result.model_dump(), scan_id=scan_id, saved=saved.count)


@router.get("/scans/{scan_id}/suggestions", response_model=list[Suggestion])
async def list_suggestions(
    scan_id: str,
    section: Section | None = None,
    principal: str = Depends(get_principal),
    manager: SuggestionLifecycleManager = Depends(get_lifecycle_manager),
):
    return _unwrap(await manager.list_suggestions(principal, scan_id, section))


@router.patch("/scans/{scan_id}/suggestions/{suggestion_id}", response_model=Suggestion)
async def update_status(
    scan_id: str,
    suggestion_id: str,
    body: StatusUpdateRequest,
    principal: str = Depends(get_principal),
    manager: SuggestionLifecycleManager = Depends(get_lifecycle_manager),
):
    return _unwrap(
        await manager.update_suggestion_status(principal, suggestion_id, scan_id, body.status)
    )


@router.post("/scans/{scan_id}/sections/{section}/accept-all", response_model=BulkUpdateResult)
async def accept_all(
    scan_id: str,
    section: str,
    principal: str = Depends(get_principal),
    manager: SuggestionLifecycleManager = Depends(get_lifecycle_manager),
):
    return _unwrap(await manager.accept_all_in_section(principal, scan_id, section))


@router.post("/scans/{scan_id}/sections/{section}/reject-all", response_model=BulkUpdateResult)
async def reject_all(
    scan_id: str,
    section: str,
    principal: str = Depends(get_principal),
    manager: SuggestionLifecycleManager = Depends(get_lifecycle_manager),
):
    return _unwrap(await manager.reject_all_in_section(principal, scan_id, section))


@router.post("/scans/{scan_id}/skip-pending", response_model=BulkUpdateResult)
async def skip_pending(
    scan_id: str,
    principal: str = Depends(get_principal),
    manager: SuggestionLifecycleManager = Depends(get_lifecycle_manager),
):
    return _unwrap(await manager.skip_all_pending(principal, scan_id))


@router.get("/scans/{scan_id}/summary", response_model=SuggestionSummary)
async def summary(
    scan_id: str,
    principal: str = Depends(get_principal),
    manager: SuggestionLifecycleManager = Depends(get_lifecycle_manager),
):
    return _unwrap(await manager.get_suggestion_summary(principal, scan_id))


@router.post("/scans/{scan_id}/merge", response_model=MergeResponse)
async def merge(
    scan_id: str,
    body: MergeRequest,
    principal: str = Depends(get_principal),
    manager: SuggestionLifecycleManager = Depends(get_lifecycle_manager),
):
    suggestions = _unwrap(await manager.list_suggestions(principal, scan_id))
    result = merge_accepted_suggestions(parse_resume(body.resume_text), suggestions)
    return MergeResponse(text=result.text, applied=result.applied, skipped=result.skipped)


@router.get("/quality/health", response_model=QualityHealth)
async def quality_health(
    limit: int = Query(50, ge=1, le=1000),
    store: SuggestionStore = Depends(get_store),
):
    return evaluate_quality_health(await store.list_quality_logs(limit=limit))


@router.post("/diff", response_model=DiffResponse)
async def diff(body: DiffRequest):
    chunks = compute_word_diff(body.original, body.suggested)
    return DiffResponse(chunks=chunks, stats=count_changes(chunks))
