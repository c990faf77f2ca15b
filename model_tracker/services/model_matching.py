"""Fuzzy matching of model names between vendor emails and the mapping sheet.

The vendor numbers its rows ("1. Glen S&P 100") while the sheet does not, and
capitalisation drifts between the two. Matching runs an ordered list of
strategies and the first hit wins:

1. case-insensitive equality
2. case-insensitive substring containment, either direction
3. equality after stripping a leading "<digits>. " prefix from both sides

Known risk: containment lets short names match longer ones ("Growth" matches
"Aggressive Growth").
"""

import re
from collections.abc import Callable, Iterable

NUMBER_PREFIX = re.compile(r"^\d+\.\s*")


def strip_number_prefix(name: str) -> str:
    """'1. Glen S&P 100' -> 'Glen S&P 100'."""
    return NUMBER_PREFIX.sub("", name).strip()


def exact_match(candidate: str, canonical: str) -> bool:
    return candidate.lower() == canonical.lower()


def containment_match(candidate: str, canonical: str) -> bool:
    a, b = candidate.lower(), canonical.lower()
    return a in b or b in a


def prefix_stripped_match(candidate: str, canonical: str) -> bool:
    return strip_number_prefix(candidate).lower() == strip_number_prefix(canonical).lower()


MATCH_STRATEGIES: tuple[Callable[[str, str], bool], ...] = (
    exact_match,
    containment_match,
    prefix_stripped_match,
)


def models_match(candidate: str, canonical: str) -> bool:
    """True when the email model name and the canonical name refer to the same model."""
    if not candidate or not canonical:
        return False
    return any(strategy(candidate, canonical) for strategy in MATCH_STRATEGIES)


def matches_any(candidate: str, canonical_names: Iterable[str]) -> bool:
    """Filter check; an empty canonical list disables filtering."""
    names = list(canonical_names)
    if not names:
        return True
    return any(models_match(candidate, name) for name in names)
