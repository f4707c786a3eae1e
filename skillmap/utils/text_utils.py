import re
from difflib import SequenceMatcher


def normalize_text(value: str | None) -> str:
    if value is None:
        return ""
    return re.sub(r"\s+", " ", str(value)).strip()


def normalize_key(value: str | None) -> str:
    """Lookup key for case- and whitespace-insensitive comparisons."""
    return normalize_text(value).lower()


def similarity(a: str, b: str) -> float:
    return SequenceMatcher(None, normalize_key(a), normalize_key(b)).ratio()


def best_match(query_value: str | None, candidates: list[str], threshold: float = 0.55) -> tuple[str | None, float]:
    q = normalize_key(query_value)
    if not q:
        return None, 0.0

    for candidate in candidates:
        if candidate and normalize_key(candidate) == q:
            return candidate, 1.0

    best_candidate = None
    best_score = 0.0
    for candidate in candidates:
        if not candidate:
            continue
        score = similarity(q, candidate)
        if score > best_score:
            best_score = score
            best_candidate = candidate

    if best_score < threshold:
        return None, best_score
    return best_candidate, best_score
