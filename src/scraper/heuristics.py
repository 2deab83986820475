"""
List entry classification heuristics.

The host list view has no stable semantic markup, so entries are recognised
from the text and geometry of candidate elements. The heuristic is expressed
as two ordered tables of named rules:

- FILTERS: every filter must pass, otherwise the candidate is rejected.
- ACCEPT_RULES: evaluated in order, the first matching rule accepts the
  candidate. The last rule is a loose fallback that trades some false
  positives (non-place text) for recall on entries without a visible rating.

Each rule is a plain function so it can be tested on its own.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple


MIN_TEXT_LENGTH = 10
SUBSTANTIAL_TEXT_LENGTH = 15
STAR_GLYPH = "★"

TAB_LABEL_RE = re.compile(r"(Overview|Reviews|Photos|About)")
ACTION_LABEL_RE = re.compile(r"(Share|Save|Directions|Nearby)")
RATING_WITH_COUNT_RE = re.compile(r"\d\.\d.*\([\d,]+\)")
RATING_RE = re.compile(r"\d\.\d.*\(")
CAPITALIZED_WORD_RE = re.compile(r"[A-Z][a-z]+")
NUMERIC_ONLY_RE = re.compile(r"\d+[\s\d,.-]*")
DATE_PREFIX_RE = re.compile(r"\d{1,2}/\d{1,2}/\d{2,4}")


@dataclass(frozen=True)
class Candidate:
    """Raw facts about one clickable element inside the list container."""
    text: str
    width: float = 0.0
    height: float = 0.0
    in_container: bool = True

    @classmethod
    def from_js(cls, raw: Dict[str, Any]) -> "Candidate":
        return cls(
            text=raw.get("text") or "",
            width=float(raw.get("width") or 0),
            height=float(raw.get("height") or 0),
            in_container=bool(raw.get("inContainer", True)),
        )


@dataclass(frozen=True)
class Rule:
    name: str
    test: Callable[[Candidate], bool]


# --- filters -------------------------------------------------------------

def is_visible(c: Candidate) -> bool:
    return c.width > 0 and c.height > 0


def has_enough_text(c: Candidate) -> bool:
    return len(c.text.strip()) >= MIN_TEXT_LENGTH


def is_not_chrome_label(c: Candidate) -> bool:
    return not (TAB_LABEL_RE.fullmatch(c.text) or ACTION_LABEL_RE.fullmatch(c.text))


def is_in_container(c: Candidate) -> bool:
    return c.in_container


# --- accept rules --------------------------------------------------------

def has_rating_with_count(c: Candidate) -> bool:
    """``4.5 (1,203)`` style rating followed by a review count."""
    return RATING_WITH_COUNT_RE.search(c.text) is not None


def has_rating(c: Candidate) -> bool:
    """Looser rating: ``4.5`` followed somewhere by an opening parenthesis."""
    return RATING_RE.search(c.text) is not None


def has_star_and_name(c: Candidate) -> bool:
    return STAR_GLYPH in c.text and CAPITALIZED_WORD_RE.search(c.text) is not None


def looks_like_place_name(c: Candidate) -> bool:
    if CAPITALIZED_WORD_RE.search(c.text) is None:
        return False
    stripped = c.text.strip()
    word_count = len(stripped.split())
    if word_count < 2 and len(stripped) < SUBSTANTIAL_TEXT_LENGTH:
        return False
    if NUMERIC_ONLY_RE.fullmatch(c.text):
        return False
    return DATE_PREFIX_RE.match(c.text) is None


FILTERS: Tuple[Rule, ...] = (
    Rule("visible", is_visible),
    Rule("min_text_length", has_enough_text),
    Rule("not_chrome_label", is_not_chrome_label),
    Rule("in_list_container", is_in_container),
)

ACCEPT_RULES: Tuple[Rule, ...] = (
    Rule("rating_with_count", has_rating_with_count),
    Rule("rating", has_rating),
    Rule("star_and_name", has_star_and_name),
    Rule("place_name_fallback", looks_like_place_name),
)


def rejected_by(c: Candidate) -> Optional[str]:
    """Name of the first filter the candidate fails, or None."""
    for rule in FILTERS:
        if not rule.test(c):
            return rule.name
    return None


def classify(c: Candidate) -> Optional[str]:
    """
    Name of the rule that accepts the candidate as a list entry.

    Returns None when a filter rejects it or no accept rule matches.

    Example:
        >>> classify(Candidate("Joe's Pizza 4.5 (120)", 200, 40))
        'rating_with_count'
        >>> classify(Candidate("Photos", 80, 20)) is None
        True
    """
    if rejected_by(c) is not None:
        return None
    for rule in ACCEPT_RULES:
        if rule.test(c):
            return rule.name
    return None


def is_list_entry(c: Candidate) -> bool:
    return classify(c) is not None


def select_entries(candidates: List[Candidate]) -> List[Tuple[int, str]]:
    """
    Positions of accepted candidates with the accepting rule name.

    Positions index into ``candidates`` (document order), so the N-th entry
    is ``select_entries(...)[N]``.
    """
    out: List[Tuple[int, str]] = []
    for position, c in enumerate(candidates):
        rule = classify(c)
        if rule is not None:
            out.append((position, rule))
    return out
