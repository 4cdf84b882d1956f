"""
Competition priority engine.

Parses free-text competition labels into (country, league) and ranks them:
continental 1-3, primary domestic market 4-10, major European leagues
200-209, secondary market 300-309, everything else 1000. Youth, reserve and
friendly labels, and league names too ambiguous to place without a country,
sink to 9000.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

DEFAULT_PRIORITY = 1000
YOUTH_PRIORITY = 9000
AMBIGUOUS_PRIORITY = 9000
EUROPEAN_NIGHTS_OFFSET = 10
PRIMARY_TIER = range(4, 11)

CONTINENTAL_COUNTRY = "uefa"

_PAREN_RE = re.compile(r"^(?P<league>.+?)\s*\((?P<country>[^()]+)\)\s*$")
_PREFIX_RE = re.compile(r"^(?P<country>[^:]+):\s*(?P<league>.+)$")
_YOUTH_RE = re.compile(
    r"\b(u-?1[5-9]|u-?2[0-3]|under[- ]?\d{2}|youth|junior|juniors|reserves?|"
    r"premier league 2|development|academy|friendl(y|ies)|women'?s? (u|youth))\b",
    re.IGNORECASE,
)

AMBIGUOUS_LEAGUES = frozenset(
    {
        "championship",
        "premier league",
        "premiership",
        "league one",
        "league two",
        "super league",
        "first division",
        "serie a",
        "bundesliga",
        "primera division",
    }
)

# (country, league) -> priority; names compared lowercased.
PRIORITY_TABLE: Dict[Tuple[str, str], int] = {
    ("uefa", "champions league"): 1,
    ("uefa", "europa league"): 2,
    ("uefa", "conference league"): 3,
    ("uefa", "europa conference league"): 3,
    ("england", "premier league"): 4,
    ("england", "fa cup"): 5,
    ("england", "league cup"): 6,
    ("england", "efl cup"): 6,
    ("england", "carabao cup"): 6,
    ("england", "championship"): 7,
    ("england", "community shield"): 8,
    ("england", "league one"): 9,
    ("england", "league two"): 10,
    ("spain", "laliga"): 200,
    ("spain", "la liga"): 200,
    ("spain", "primera division"): 200,
    ("italy", "serie a"): 201,
    ("germany", "bundesliga"): 202,
    ("france", "ligue 1"): 203,
    ("portugal", "primeira liga"): 204,
    ("portugal", "liga portugal"): 204,
    ("netherlands", "eredivisie"): 205,
    ("belgium", "jupiler pro league"): 206,
    ("belgium", "first division a"): 206,
    ("turkey", "super lig"): 207,
    ("spain", "copa del rey"): 208,
    ("italy", "coppa italia"): 209,
    ("germany", "dfb pokal"): 209,
    ("scotland", "premiership"): 300,
    ("scotland", "scottish premiership"): 300,
    ("scotland", "championship"): 301,
    ("scotland", "scottish cup"): 302,
    ("scotland", "league cup"): 303,
    ("wales", "premier league"): 304,
    ("wales", "cymru premier"): 304,
    ("ireland", "premier division"): 305,
    ("northern ireland", "premiership"): 306,
    ("scotland", "league one"): 307,
    ("scotland", "league two"): 308,
    ("ireland", "fai cup"): 309,
}


@dataclass(frozen=True)
class CompetitionLabel:
    country: Optional[str]
    league: str


def _clean(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip()


def parse_competition_label(label: str) -> CompetitionLabel:
    """Split "League (Country)", "Country: League" or "UEFA League" into parts."""
    text = _clean(label)
    m = _PAREN_RE.match(text)
    if m:
        return CompetitionLabel(_clean(m.group("country")), _clean(m.group("league")))
    m = _PREFIX_RE.match(text)
    if m:
        return CompetitionLabel(_clean(m.group("country")), _clean(m.group("league")))
    if text.lower().startswith("uefa "):
        return CompetitionLabel("UEFA", _clean(text[5:]))
    return CompetitionLabel(None, text)


def is_youth_or_friendly(label: str) -> bool:
    return bool(_YOUTH_RE.search(label or ""))


def _base_priority(label: str) -> int:
    if is_youth_or_friendly(label):
        return YOUTH_PRIORITY
    parsed = parse_competition_label(label)
    league = parsed.league.lower()
    if parsed.country is None:
        if league in AMBIGUOUS_LEAGUES:
            return AMBIGUOUS_PRIORITY
        return DEFAULT_PRIORITY
    return PRIORITY_TABLE.get((parsed.country.lower(), league), DEFAULT_PRIORITY)


def competition_priority(label: str, european_nights: bool = False) -> int:
    """Lower is more prominent. Domestic tiers 4-10 drop by an offset on European nights."""
    priority = _base_priority(label)
    if european_nights and priority in PRIMARY_TIER:
        priority += EUROPEAN_NIGHTS_OFFSET
    return priority


def is_continental(label: str) -> bool:
    return _base_priority(label) in (1, 2, 3)


def has_continental(labels: Iterable[str]) -> bool:
    """True when any label is a continental competition (European night)."""
    return any(is_continental(label) for label in labels)


T = TypeVar("T")


def sort_matches(
    items: Sequence[T],
    *,
    mode: str = "priority",
    label_of: Callable[[T], str],
    kickoff_of: Callable[[T], datetime],
    id_of: Callable[[T], Any],
) -> List[Tuple[T, int]]:
    """Order items and return (item, priority) pairs.

    mode "priority": (priority, competition name, kickoff); mode "time":
    (kickoff, priority, competition name). Remaining ties break on id.
    """
    labels = [label_of(item) for item in items]
    nights = has_continental(labels)
    decorated = []
    for item, label in zip(items, labels):
        priority = competition_priority(label, nights)
        name = (label or "").lower()
        kickoff = kickoff_of(item)
        if mode == "time":
            key = (kickoff, priority, name, str(id_of(item)))
        else:
            key = (priority, name, kickoff, str(id_of(item)))
        decorated.append((key, item, priority))
    decorated.sort(key=lambda entry: entry[0])
    return [(item, priority) for _, item, priority in decorated]
