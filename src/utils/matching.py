"""
Name matching used by entity resolution.

Candidates are ranked by match tier first: an exact name beats a prefix, a
prefix beats a substring, a substring beats the reverse substring, and the
optional similarity fallback comes last. Inside a tier a rapidfuzz score
breaks ties, then the shorter name, then the order the store returned the
candidates in. The result is deterministic for unchanged data.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from rapidfuzz import fuzz

TIER_EXACT = 0
TIER_PREFIX = 1
TIER_CONTAINS = 2       # candidate name contains the query
TIER_CONTAINED = 3      # query contains the candidate name
TIER_SIMILAR = 4        # similarity fallback, only when a threshold is set

# A company must contain the requested name; products also match the other way
# round ("SK001 serum" -> "SK001").
COMPANY_TIERS = (TIER_EXACT, TIER_PREFIX, TIER_CONTAINS)
PRODUCT_TIERS = (TIER_EXACT, TIER_PREFIX, TIER_CONTAINS, TIER_CONTAINED)


def normalize_name(value: Any) -> str:
    """Lowercase and collapse whitespace."""
    return " ".join(str(value or "").lower().split())


@dataclass(frozen=True)
class RankedMatch:
    item: Dict[str, Any]
    tier: int
    score: float
    position: int


def match_tier(query: str, name: str) -> Optional[int]:
    """Return the tier of `name` for `query` (both normalized), or None."""
    if not query or not name:
        return None
    if name == query:
        return TIER_EXACT
    if name.startswith(query):
        return TIER_PREFIX
    if query in name:
        return TIER_CONTAINS
    if name in query:
        return TIER_CONTAINED
    return None


def similarity(query: str, name: str) -> float:
    """rapidfuzz token_set_ratio scaled to 0.0-1.0."""
    if not query or not name:
        return 0.0
    return fuzz.token_set_ratio(query, name) / 100.0


def rank_candidates(
    query: str,
    candidates: Iterable[Dict[str, Any]],
    *,
    name_key: str = "name",
    tiers: Sequence[int] = PRODUCT_TIERS,
    fuzzy_threshold: Optional[float] = None,
) -> List[RankedMatch]:
    """
    Rank `candidates` (dicts carrying `name_key`) against `query`.

    Args:
        query: Free-text name to look for
        candidates: Store rows in store order
        name_key: Key holding the display name
        tiers: Tiers allowed to match
        fuzzy_threshold: Minimum similarity (0.0-1.0) for the fallback tier;
            None disables the fallback

    Returns:
        Matches, best first. Empty when nothing qualifies.
    """
    normalized_query = normalize_name(query)
    if not normalized_query:
        return []

    ranked: List[RankedMatch] = []
    for position, item in enumerate(candidates):
        name = normalize_name(item.get(name_key))
        score = similarity(normalized_query, name)
        tier = match_tier(normalized_query, name)
        if tier is None or tier not in tiers:
            if fuzzy_threshold is None or score < fuzzy_threshold:
                continue
            tier = TIER_SIMILAR
        ranked.append(RankedMatch(item=item, tier=tier, score=score, position=position))

    ranked.sort(
        key=lambda m: (m.tier, -m.score, len(normalize_name(m.item.get(name_key))), m.position)
    )
    return ranked

