# src/jobboard/pipeline/query.py
"""
Tiny boolean query parser for job search.

Supported syntax:
- `welder cnc`                      -> both words required (AND)
- `welder OR "metal fabricator"`    -> either alternative (OR)
- `"metal fabricator"`              -> one phrase token

Everything is case-folded; matching is plain substring containment.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Tuple

# `OR` only counts as an operator when it stands alone between whitespace.
_OR_RE = re.compile(r"(?:(?<=\s)|^)or(?=\s|$)")
_TOKEN_RE = re.compile(r'"([^"]*)"|(\S+)')


@dataclass(frozen=True)
class QueryTokens:
    required: Tuple[str, ...] = ()
    groups: Tuple[Tuple[str, ...], ...] = ()

    @property
    def empty(self) -> bool:
        return not self.required and not self.groups

    def all_tokens(self) -> Tuple[str, ...]:
        seen = list(self.required)
        for group in self.groups:
            seen.extend(t for t in group if t not in seen)
        return tuple(seen)

    def matches(self, haystack: str) -> bool:
        """Every required token present, and at least one token of every group."""
        hay = (haystack or "").casefold()
        if not all(t in hay for t in self.required):
            return False
        return all(any(t in hay for t in group) for group in self.groups)


def _split_tokens(segment: str) -> Tuple[str, ...]:
    out = []
    for phrase, word in _TOKEN_RE.findall(segment):
        token = " ".join(phrase.split()) if phrase else word.strip('"')
        if token and token not in out:
            out.append(token)
    return tuple(out)


def tokenize_query(query: str) -> QueryTokens:
    """
    Parse a free-text query.

    With no OR operator every token is required. With OR, the tokens of all
    segments become the alternatives of one group. A query made only of OR
    operators (or nothing at all) yields no constraint.
    """
    text = (query or "").casefold().strip()
    if not text:
        return QueryTokens()

    segments = _OR_RE.split(text)
    if len(segments) == 1:
        return QueryTokens(required=_split_tokens(text))

    alternatives = []
    for segment in segments:
        for token in _split_tokens(segment):
            if token not in alternatives:
                alternatives.append(token)
    if not alternatives:
        return QueryTokens()
    return QueryTokens(groups=(tuple(alternatives),))
