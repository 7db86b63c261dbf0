"""Leak tag canonicalization against a fixed allow-list."""
import re

FALLBACK_LEAK_TAG = "fundamentals"

ALLOWED_LEAK_TAGS = frozenset(
    {
        "chasing_draws",
        "missed_value_bet",
        "overbet_bluff",
        "passive_play",
        "bad_pot_odds_call",
        "river_betting_strategy",
        "turn_raise_undervalue",
        "preflop_3bet_defense",
        "cbet_frequency",
        "position_awareness",
        "bluff_catching",
        "sizing_mistakes",
        FALLBACK_LEAK_TAG,
    }
)

_SEPARATOR_RUN = re.compile(r"[\s\-_]+")


def canonical_form(raw: str | None) -> str:
    """Lower snake case: "  Position-Awareness " -> "position_awareness"."""
    text = _SEPARATOR_RUN.sub("_", (raw or "").strip().lower())
    return text.strip("_")


def normalize_leak_tag(raw: str | None) -> str:
    """Map any label to an allowed tag; unknown or empty labels become the fallback."""
    tag = canonical_form(raw)
    if tag in ALLOWED_LEAK_TAGS:
        return tag
    return FALLBACK_LEAK_TAG


def top_leak_tags(labels: list[str], limit: int) -> list[str]:
    """First ``limit`` distinct allowed tags from free-form labels, never empty."""
    seen: list[str] = []
    for label in labels:
        if len(seen) >= limit:
            break
        if not canonical_form(label):
            continue
        tag = normalize_leak_tag(label)
        if tag not in seen:
            seen.append(tag)
    return seen or [FALLBACK_LEAK_TAG]
