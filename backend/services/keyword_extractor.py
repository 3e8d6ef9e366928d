"""Keyword extraction and matching for resume-JD analysis.

Keywords are extracted once per job posting by the language model, then
matched locally against resume text: canonical form first, then every
known variant from ``KEYWORD_VARIANTS``, then a rapidfuzz pass for typos
and close spellings.
"""

import logging
import re

from rapidfuzz import fuzz, process

from config import settings
from models.schemas.keywords import (
    ExtractedKeyword,
    ImportanceCount,
    KeywordAnalysisResult,
    KeywordMatch,
)
from services.errors import (
    ActionResult,
    ErrorCode,
    InputValidationError,
    LLMError,
    ServiceError,
)
from services.llm_client import CompletionClient, complete_json
from services.prompt_builder import build_keyword_extraction_prompt
from services.rounding import round_half_up

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Canonical keyword -> known variants (abbreviations, alternate spellings)
# Keys and variants are lowercase; lookups are case-insensitive.
# ---------------------------------------------------------------------------
KEYWORD_VARIANTS: dict[str, tuple[str, ...]] = {
    # JavaScript ecosystem
    "javascript": ("js", "ecmascript", "es6", "es2015"),
    "typescript": ("ts",),
    "react": ("react.js", "reactjs"),
    "vue": ("vue.js", "vuejs"),
    "angular": ("angular.js", "angularjs"),
    "node.js": ("node", "nodejs"),
    "next.js": ("nextjs",),
    "express": ("express.js", "expressjs"),
    # Python ecosystem
    "python": ("python3",),
    "scikit-learn": ("sklearn", "scikit learn"),
    "tensorflow": ("tensor flow",),
    "pytorch": ("torch",),
    "fastapi": ("fast api",),
    # Cloud & DevOps
    "kubernetes": ("k8s", "kube"),
    "aws": ("amazon web services", "amazon aws"),
    "gcp": ("google cloud", "google cloud platform"),
    "azure": ("microsoft azure",),
    "ci/cd": ("cicd", "continuous integration", "continuous delivery"),
    "github actions": ("github action", "gh actions"),
    "docker": ("docker compose", "containerization"),
    # Databases
    "postgresql": ("postgres", "psql"),
    "mongodb": ("mongo", "mongo db"),
    "mysql": ("my sql",),
    "sql server": ("mssql", "ms sql"),
    "dynamodb": ("dynamo", "dynamo db"),
    # Languages
    "c#": ("c sharp", "csharp"),
    "c++": ("cpp", "c plus plus"),
    "go": ("golang",),
    # AI/ML
    "machine learning": ("ml", "ai/ml"),
    "deep learning": ("dl",),
    "natural language processing": ("nlp",),
    "generative ai": ("gen ai", "genai"),
    "llm": ("large language model", "large language models"),
    # Tools & methodologies
    "vscode": ("vs code", "visual studio code"),
    "rest": ("rest api", "rest apis", "restful"),
    "graphql": ("graph ql",),
    "project management": ("project mgmt",),
    "agile": ("agile methodology", "agile/scrum", "scrum"),
    "team leadership": ("led teams", "led a team", "team lead"),
}

# Reverse lookup: any variant -> canonical
_VARIANT_TO_CANONICAL: dict[str, str] = {
    variant: canonical
    for canonical, variants in KEYWORD_VARIANTS.items()
    for variant in variants
}

_IMPORTANCE_ORDER = {"high": 0, "medium": 1, "low": 2}

# Model output is loose about category spelling; map to our vocabulary.
_CATEGORY_ALIASES = {
    "skill": "skill", "skills": "skill", "technical_skill": "skill",
    "technology": "technology", "technologies": "technology", "tool": "technology",
    "tools": "technology",
    "qualification": "qualification", "qualifications": "qualification",
    "education": "qualification",
    "experience": "experience",
    "soft_skill": "soft_skill", "soft_skills": "soft_skill", "soft skill": "soft_skill",
    "certification": "certification", "certifications": "certification",
}

_TERM_RE = re.compile(r"[a-z0-9][a-z0-9.#+/-]*")
CONTEXT_WINDOW = 100


def canonicalize(term: str) -> str:
    """Resolve a term to its canonical lowercase form."""
    lower = term.lower().strip()
    return _VARIANT_TO_CANONICAL.get(lower, lower)


def variants_for(keyword: str) -> tuple[str, ...]:
    """All known spellings for a keyword, canonical form excluded."""
    canonical = canonicalize(keyword)
    known = KEYWORD_VARIANTS.get(canonical, ())
    literal = keyword.lower().strip()
    if literal != canonical and literal not in known:
        known = (literal, *known)
    return known


def _term_pattern(term: str) -> re.Pattern:
    # Word-boundary aware on both sides, tolerant of symbols like "c++".
    return re.compile(rf"(?<![\w]){re.escape(term)}(?![\w])", re.IGNORECASE)


def _context(text: str, start: int, end: int) -> str:
    """Up to CONTEXT_WINDOW chars of text around [start, end)."""
    pad = max(0, (CONTEXT_WINDOW - (end - start)) // 2)
    lo = max(0, start - pad)
    hi = min(len(text), lo + CONTEXT_WINDOW)
    return " ".join(text[lo:hi].split())


def _resume_terms(resume_lower: str, size: int) -> list[str]:
    words = _TERM_RE.findall(resume_lower)
    if size <= 1:
        return list(dict.fromkeys(words))
    grams = (" ".join(words[i:i + size]) for i in range(len(words) - size + 1))
    return list(dict.fromkeys(grams))


def _find_match(keyword: ExtractedKeyword, resume_text: str) -> KeywordMatch | None:
    canonical = canonicalize(keyword.text)

    m = _term_pattern(canonical).search(resume_text)
    if m:
        return KeywordMatch(
            keyword=keyword,
            match_type="exact",
            matched_text=m.group(),
            context=_context(resume_text, m.start(), m.end()),
        )

    for variant in variants_for(keyword.text):
        m = _term_pattern(variant).search(resume_text)
        if m:
            return KeywordMatch(
                keyword=keyword,
                match_type="variant",
                matched_text=m.group(),
                context=_context(resume_text, m.start(), m.end()),
            )

    # Short terms produce too many false positives under edit distance.
    if len(canonical) < settings.keyword_fuzzy_min_length:
        return None

    resume_lower = resume_text.lower()
    candidates = _resume_terms(resume_lower, len(canonical.split()))
    best = process.extractOne(
        canonical,
        candidates,
        scorer=fuzz.ratio,
        score_cutoff=settings.keyword_fuzzy_threshold,
    )
    if best is None:
        return None
    term = best[0]
    pos = resume_lower.find(term)
    return KeywordMatch(
        keyword=keyword,
        match_type="fuzzy",
        matched_text=resume_text[pos:pos + len(term)] if pos >= 0 else term,
        context=_context(resume_text, pos, pos + len(term)) if pos >= 0 else "",
    )


def compute_match_rate(matched: int, missing: int) -> int:
    total = matched + missing
    if total == 0:
        return 0
    return round_half_up(matched / total * 100)


def match_keywords(
    resume_text: str, keywords: list[ExtractedKeyword]
) -> KeywordAnalysisResult:
    """Match extracted keywords against resume text. Pure, no I/O."""
    matched: list[KeywordMatch] = []
    missing: list[ExtractedKeyword] = []
    by_importance = {level: ImportanceCount() for level in _IMPORTANCE_ORDER}

    for keyword in keywords:
        hit = _find_match(keyword, resume_text)
        bucket = by_importance[keyword.importance]
        bucket.total += 1
        if hit:
            matched.append(hit)
            bucket.matched += 1
        else:
            missing.append(keyword)

    return KeywordAnalysisResult(
        matched=matched,
        missing=missing,
        match_rate=compute_match_rate(len(matched), len(missing)),
        by_importance=by_importance,
    )


def normalize_keywords(raw: list) -> list[ExtractedKeyword]:
    """Clean model output: drop junk, dedupe by canonical form, rank, bound."""
    seen: set[str] = set()
    keywords: list[ExtractedKeyword] = []
    for entry in raw:
        if isinstance(entry, str):
            entry = {"keyword": entry}
        if not isinstance(entry, dict):
            continue
        text = str(entry.get("keyword") or entry.get("text") or "").strip()
        if not text:
            continue
        key = canonicalize(text)
        if key in seen:
            continue
        seen.add(key)

        category = _CATEGORY_ALIASES.get(str(entry.get("category", "")).lower().strip(), "skill")
        importance = str(entry.get("importance", "")).lower().strip()
        if importance not in _IMPORTANCE_ORDER:
            importance = "medium"
        keywords.append(ExtractedKeyword(text=text, category=category, importance=importance))

    # sorted() is stable, so model order is kept within an importance level
    keywords = sorted(keywords, key=lambda k: _IMPORTANCE_ORDER[k.importance])
    return keywords[: settings.max_keywords]


async def extract_keywords(job_text: str, client: CompletionClient) -> list[ExtractedKeyword]:
    """Extract a bounded, ranked keyword list from a job posting."""
    if not job_text or not job_text.strip():
        raise InputValidationError("Job description is required")

    prompt = build_keyword_extraction_prompt(job_text, settings.max_keywords)
    data = await complete_json(client, prompt, timeout=settings.llm_timeout_seconds)
    raw = data.get("keywords")
    if not isinstance(raw, list):
        raise LLMError("Keyword extraction returned an unexpected shape")

    keywords = normalize_keywords(raw)
    if not keywords:
        raise LLMError("No keywords could be extracted from the job description")
    logger.info("Extracted %d keywords from job description (%d chars)", len(keywords), len(job_text))
    return keywords


async def analyze_keywords(
    job_text: str, resume_text: str, client: CompletionClient | None
) -> ActionResult[KeywordAnalysisResult]:
    """Extract keywords from the job posting and match them in the resume."""
    if not job_text or not job_text.strip():
        return ActionResult.fail(ErrorCode.VALIDATION_ERROR, "Job description is required")
    if not resume_text or not resume_text.strip():
        return ActionResult.fail(ErrorCode.VALIDATION_ERROR, "Resume content is required")
    if len(job_text) > settings.max_job_description_chars:
        return ActionResult.fail(
            ErrorCode.VALIDATION_ERROR,
            f"Job description exceeds {settings.max_job_description_chars} characters",
        )
    if len(resume_text) > settings.max_resume_chars:
        return ActionResult.fail(
            ErrorCode.VALIDATION_ERROR,
            f"Resume exceeds {settings.max_resume_chars} characters",
        )
    if client is None:
        return ActionResult.fail(ErrorCode.LLM_ERROR)

    try:
        keywords = await extract_keywords(job_text, client)
    except ServiceError as e:
        logger.warning("Keyword extraction failed (%s): %s", e.code.value, e.message)
        return ActionResult.from_exception(e)

    result = match_keywords(resume_text, keywords)
    logger.info(
        "Keyword match: %d matched, %d missing, rate %d%%",
        len(result.matched), len(result.missing), result.match_rate,
    )
    return ActionResult.ok(result)
