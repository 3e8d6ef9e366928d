"""Action verb vocabulary for bullet-opening checks."""

import re

STRONG_VERBS_BY_CATEGORY: dict[str, tuple[str, ...]] = {
    "leadership": (
        "led", "directed", "managed", "coordinated", "guided", "organized",
        "supervised", "mentored", "oversaw", "founded",
    ),
    "technical": (
        "built", "developed", "designed", "implemented", "created", "engineered",
        "architected", "automated", "deployed", "integrated", "migrated",
        "programmed", "refactored", "configured", "debugged", "shipped",
    ),
    "impact": (
        "achieved", "delivered", "drove", "increased", "reduced", "improved",
        "optimized", "accelerated", "expanded", "grew", "generated", "saved",
        "cut", "doubled", "tripled", "surpassed", "streamlined",
    ),
    "analysis": (
        "analyzed", "evaluated", "identified", "investigated", "measured",
        "researched", "assessed", "diagnosed", "modeled", "tested",
    ),
    "communication": (
        "presented", "authored", "negotiated", "published", "documented",
        "trained", "advised", "persuaded", "facilitated",
    ),
    "initiative": (
        "launched", "established", "initiated", "introduced", "pioneered",
        "proposed", "revamped", "transformed", "modernized", "resolved",
    ),
}

STRONG_VERBS: frozenset[str] = frozenset(
    verb for verbs in STRONG_VERBS_BY_CATEGORY.values() for verb in verbs
)

# Openers that describe presence rather than contribution
WEAK_VERBS: tuple[str, ...] = (
    "helped", "worked", "assisted", "responsible for", "was responsible",
    "participated", "involved in", "was involved", "handled", "did",
    "made", "tasked with", "duties included", "worked on", "in charge of",
)

_WORD_RE = re.compile(r"[A-Za-z]+")


def leading_verb(bullet: str) -> str:
    match = _WORD_RE.search(bullet)
    return match.group().lower() if match else ""


def starts_with_strong_verb(bullet: str) -> bool:
    return leading_verb(bullet) in STRONG_VERBS
