"""Tokenizer and proximity keyword matcher for dimension phrases.

A *quantity* is a number token immediately followed by a length-unit
token ("900 mm", "900mm", "12-foot", "3'").  A quantity is associated
with a dimensional keyword when the keyword phrase lies within
:data:`MAX_GAP` intervening tokens before or after it.  Punctuation and
other numbers are barriers: a keyword on the far side of a comma never
binds.  Each field takes the first quantity that has one of its keywords
in range; a quantity serves two fields only when nothing else qualifies.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from famai.units import is_length_unit

MAX_GAP = 3

_TOKEN_RE = re.compile(r"(\d+(?:\.\d+)?)|([a-z]+)|(['\"])|([^\sa-z\d])")

NUMBER = "number"
WORD = "word"
SYMBOL = "symbol"
PUNCT = "punct"

# Dimensional keyword phrases by field.  Longer phrases are matched first,
# so "sill height" binds to the sill and not to the height.
FIELD_KEYWORDS: dict[str, tuple[tuple[str, ...], ...]] = {
    "width": (("wide",), ("width",)),
    "height": (("high",), ("height",), ("tall",)),
    "sill_height": (
        ("sill", "height"),
        ("sill",),
        ("from", "floor"),
        ("above", "floor"),
    ),
    "inset": (("frame", "depth"), ("inset",), ("depth",)),
}


@dataclass(frozen=True)
class Token:
    text: str
    kind: str
    index: int


@dataclass(frozen=True)
class Quantity:
    """A number with its unit, spanning tokens ``start``..``end`` inclusive."""

    value: float
    unit: str
    start: int
    end: int

    @property
    def label(self) -> str:
        return f"{self.value:g} {self.unit}"


@dataclass(frozen=True)
class KeywordHit:
    field: str
    phrase: str
    start: int
    end: int


@dataclass(frozen=True)
class FieldMatch:
    """A quantity bound to a dimensional field."""

    field: str
    quantity: Quantity
    keyword: KeywordHit
    gap: int
    after: bool


def tokenize(text: str) -> list[Token]:
    """Split *text* into lower-case number, word, symbol and punctuation tokens."""
    tokens: list[Token] = []
    for match in _TOKEN_RE.finditer(text.lower()):
        number, word, symbol, punct = match.groups()
        if number is not None:
            kind, value = NUMBER, number
        elif word is not None:
            kind, value = WORD, word
        elif symbol is not None:
            kind, value = SYMBOL, symbol
        else:
            kind, value = PUNCT, punct
        tokens.append(Token(value, kind, len(tokens)))
    return tokens


def find_quantities(tokens: list[Token]) -> list[Quantity]:
    """Return every number+unit pair in *tokens*, in order."""
    quantities: list[Quantity] = []
    i = 0
    while i < len(tokens):
        tok = tokens[i]
        if tok.kind != NUMBER:
            i += 1
            continue
        j = i + 1
        # "12-foot"
        if j < len(tokens) and tokens[j].text == "-":
            j += 1
        if j < len(tokens) and tokens[j].kind in (WORD, SYMBOL) and is_length_unit(tokens[j].text):
            quantities.append(Quantity(float(tok.text), tokens[j].text, i, j))
            i = j + 1
        else:
            i += 1
    return quantities


def find_keywords(tokens: list[Token]) -> list[KeywordHit]:
    """Return non-overlapping keyword phrases, longest phrase first at each position."""
    phrases = sorted(
        ((phrase, field) for field, options in FIELD_KEYWORDS.items() for phrase in options),
        key=lambda item: -len(item[0]),
    )
    hits: list[KeywordHit] = []
    i = 0
    while i < len(tokens):
        for phrase, field in phrases:
            end = i + len(phrase)
            if end <= len(tokens) and tuple(t.text for t in tokens[i:end]) == phrase:
                hits.append(KeywordHit(field, " ".join(phrase), i, end - 1))
                i = end
                break
        else:
            i += 1
    return hits


def _is_barrier(token: Token) -> bool:
    return token.kind in (PUNCT, NUMBER, SYMBOL)


def _gap(tokens: list[Token], lo: int, hi: int) -> int | None:
    """Count tokens strictly between *lo* and *hi*; *None* if a barrier intervenes."""
    between = tokens[lo + 1:hi]
    if any(_is_barrier(t) for t in between):
        return None
    return len(between)


def bind_field(
    tokens: list[Token], quantity: Quantity, hits: list[KeywordHit], field: str,
) -> FieldMatch | None:
    """Return the nearest *field* keyword within the window around *quantity*.

    On equal distance the keyword after the quantity wins.
    """
    best: FieldMatch | None = None
    for hit in hits:
        if hit.field != field:
            continue
        if hit.start > quantity.end:
            gap = _gap(tokens, quantity.end, hit.start)
            after = True
        elif hit.end < quantity.start:
            gap = _gap(tokens, hit.end, quantity.start)
            after = False
        else:
            continue
        if gap is None or gap > MAX_GAP:
            continue
        candidate = FieldMatch(hit.field, quantity, hit, gap, after)
        if best is None or (gap, not after) < (best.gap, not best.after):
            best = candidate
    return best


def match_fields(text: str) -> dict[str, FieldMatch]:
    """Bind quantities in *text* to dimensional fields.

    Fields are scanned in :data:`FIELD_KEYWORDS` order; each takes the
    first quantity with one of its keywords in the window.  A quantity
    already taken by an earlier field is used only when no free
    quantity qualifies, so "width 900 mm height 1200 mm" binds both.
    """
    tokens = tokenize(text)
    hits = find_keywords(tokens)
    quantities = find_quantities(tokens)
    matches: dict[str, FieldMatch] = {}
    taken: set[int] = set()
    for field in FIELD_KEYWORDS:
        candidates = [m for m in (bind_field(tokens, q, hits, field) for q in quantities) if m]
        if not candidates:
            continue
        free = [m for m in candidates if m.quantity.start not in taken]
        match = (free or candidates)[0]
        matches[field] = match
        taken.add(match.quantity.start)
    return matches
