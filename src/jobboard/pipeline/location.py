# src/jobboard/pipeline/location.py
"""
Location parsing for search.

`normalize_location("sf, ca")` -> phrase "San Francisco, ca",
tokens {"san", "francisco", "california"}.

The phrase is for exact-ish matching ("San Francisco, CA" appears verbatim),
the tokens for looser matching (a posting that says "California" but not "CA").
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, FrozenSet

# Nicknames people type into the location box. Keys are lower-case segments.
ALIASES: Dict[str, str] = {
    "sf": "San Francisco",
    "san fran": "San Francisco",
    "nyc": "New York",
    "philly": "Philadelphia",
    "vegas": "Las Vegas",
    "slc": "Salt Lake City",
}

US_STATES: Dict[str, str] = {
    "al": "alabama", "ak": "alaska", "az": "arizona", "ar": "arkansas",
    "ca": "california", "co": "colorado", "ct": "connecticut", "de": "delaware",
    "fl": "florida", "ga": "georgia", "hi": "hawaii", "id": "idaho",
    "il": "illinois", "in": "indiana", "ia": "iowa", "ks": "kansas",
    "ky": "kentucky", "la": "louisiana", "me": "maine", "md": "maryland",
    "ma": "massachusetts", "mi": "michigan", "mn": "minnesota", "ms": "mississippi",
    "mo": "missouri", "mt": "montana", "ne": "nebraska", "nv": "nevada",
    "nh": "new hampshire", "nj": "new jersey", "nm": "new mexico", "ny": "new york",
    "nc": "north carolina", "nd": "north dakota", "oh": "ohio", "ok": "oklahoma",
    "or": "oregon", "pa": "pennsylvania", "ri": "rhode island", "sc": "south carolina",
    "sd": "south dakota", "tn": "tennessee", "tx": "texas", "ut": "utah",
    "vt": "vermont", "va": "virginia", "wa": "washington", "wv": "west virginia",
    "wi": "wisconsin", "wy": "wyoming", "dc": "district of columbia",
}

STATE_CODES: Dict[str, str] = {name: code for code, name in US_STATES.items()}

_WORD_RE = re.compile(r"[a-z0-9]+")


@dataclass(frozen=True)
class Location:
    phrase: str = ""
    tokens: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def empty(self) -> bool:
        return not self.phrase and not self.tokens


def normalize_location(raw: str) -> Location:
    """
    Trim, expand aliases per comma segment, build the display phrase from the
    (aliased, original-case) segments and the token set from the lower-cased
    words with two-letter state codes spelled out.
    """
    text = (raw or "").strip()
    if not text:
        return Location()

    segments = []
    for part in text.split(","):
        part = " ".join(part.split())
        if not part:
            continue
        segments.append(ALIASES.get(part.lower(), part))
    phrase = ", ".join(segments)

    tokens = set()
    for word in _WORD_RE.findall(phrase.lower()):
        # "ca" -> "california"; multi-word states stay one token ("new york")
        tokens.add(US_STATES.get(word, word) if len(word) == 2 else word)
    return Location(phrase=phrase, tokens=frozenset(tokens))


def location_haystack(job: Dict) -> str:
    return f"{job.get('location') or ''} {job.get('description') or ''}".casefold()


def _has_word(haystack: str, word: str) -> bool:
    return re.search(rf"(?<![a-z0-9]){re.escape(word)}(?![a-z0-9])", haystack) is not None


def has_token(haystack: str, token: str) -> bool:
    """
    Word-boundary match. A state name is also satisfied by its two-letter
    code written the "City, ST" way; a bare "or"/"in"/"me" is just a word.
    """
    if _has_word(haystack, token):
        return True
    code = STATE_CODES.get(token)
    return code is not None and re.search(rf",\s*{code}(?![a-z0-9])", haystack) is not None


def contains_phrase(haystack: str, loc: Location) -> bool:
    return bool(loc.phrase) and loc.phrase.casefold() in haystack


def matching_tokens(haystack: str, loc: Location) -> int:
    return sum(1 for t in loc.tokens if has_token(haystack, t))


def matches_location(haystack: str, loc: Location) -> bool:
    """
    Full phrase anywhere in the haystack, or every token on a word boundary.
    An empty location matches everything.
    """
    if loc.empty:
        return True
    if contains_phrase(haystack, loc):
        return True
    return bool(loc.tokens) and all(has_token(haystack, t) for t in loc.tokens)
