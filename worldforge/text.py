from __future__ import annotations

import re
from typing import Iterable, List, Sequence


def unique_strings(items: Iterable[str]) -> List[str]:
    """Strip, drop blanks, and de-duplicate case-insensitively keeping first spelling."""
    out: List[str] = []
    seen = set()
    for item in items:
        clean = str(item).strip()
        if not clean:
            continue
        key = clean.lower()
        if key in seen:
            continue
        seen.add(key)
        out.append(clean)
    return out


def ensure_min_unique(values: Iterable[str], min_count: int, fallback_pool: Sequence[str]) -> List[str]:
    out = unique_strings(values)
    if len(out) >= min_count:
        return out
    known = {entry.lower() for entry in out}
    for candidate in fallback_pool:
        if len(out) >= min_count:
            break
        clean = candidate.strip()
        if not clean or clean.lower() in known:
            continue
        known.add(clean.lower())
        out.append(clean)
    return out


def slug_token(value: str) -> str:
    """Lowercase underscore token used in ids and flags."""
    token = re.sub(r"[^a-z0-9]+", "_", value.strip().lower()).strip("_")
    return token or "token"
