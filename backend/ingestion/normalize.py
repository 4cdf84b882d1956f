"""
Field normalizer: pure functions turning provider encodings into canonical values.

Covers match status, DD.MM.YYYY kickoff dates, scores spread over several
attribute names, round labels, season strings and standings timestamps.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .schema import MatchStatus, StandingsTeamRow
from .tree import attr, child, first_attr

_DATE_RE = re.compile(r"^(\d{2})\.(\d{2})\.(\d{4})$")
_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
_MINUTES_RE = re.compile(r"^\d+$")
_SEASON_RE = re.compile(r"^(\d{4})[/\-](\d{2,4})$")
_TIMESTAMP_RE = re.compile(r"^(\d{2})\.(\d{2})\.(\d{4})\s+(\d{2}):(\d{2}):(\d{2})$")
_SLUG_RE = re.compile(r"[^a-z0-9]+")

DEFAULT_KICKOFF_HOUR = 12

_FINISHED = {"ft", "aet", "pen.", "pen"}
_LIVE = {"ht", "1st half", "2nd half", "live"}
_POSTPONED = {"postp.", "postponed", "canc.", "cancelled", "canceled"}


def normalize_status(raw: Optional[str]) -> MatchStatus:
    """Classify a provider status literal (case-insensitive).

    "FT" -> finished, "45" -> live, "Postp." -> postponed, "NS"/"15:00" -> scheduled.
    """
    s = (raw or "").strip().lower()
    if s in _FINISHED or "finished" in s:
        return MatchStatus.FINISHED
    if s in _LIVE or _MINUTES_RE.match(s):
        return MatchStatus.LIVE
    if s in _POSTPONED:
        return MatchStatus.POSTPONED
    return MatchStatus.SCHEDULED


def parse_kickoff(date_str: Optional[str], time_str: Optional[str] = None) -> Optional[datetime]:
    """Combine DD.MM.YYYY and optional H:MM into an aware UTC datetime.

    Missing or unparsable time defaults to 12:00; unparsable date returns None.
    """
    m = _DATE_RE.match((date_str or "").strip())
    if not m:
        return None
    day, month, year = (int(p) for p in m.groups())
    hour, minute = DEFAULT_KICKOFF_HOUR, 0
    t = _TIME_RE.match((time_str or "").strip())
    if t:
        h, mi = int(t.group(1)), int(t.group(2))
        if h < 24 and mi < 60:
            hour, minute = h, mi
    try:
        return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)
    except ValueError:
        return None


def looks_like_time(value: Optional[str]) -> bool:
    return bool(value and _TIME_RE.match(value.strip()))


def parse_int(value: Any) -> Optional[int]:
    """Leading-integer parse ("3", " 2 ", "4 (pen)"); None when absent."""
    if value is None or isinstance(value, (dict, list, bool)):
        return None
    m = re.match(r"^\s*([-+]?\d+)", str(value))
    return int(m.group(1)) if m else None


def extract_score(match: Dict[str, Any], team: Any, side: str) -> Optional[int]:
    """Score for one side, or None (never 0) when no representation is present.

    Order: team-level score/goals, then match-level {side}score / {side}_score /
    {side}TeamScore / localteam_score (visitorteam_score), then a combined "H-A"
    result string.
    """
    feed_side = "localteam" if side == "home" else "visitorteam"
    for name in ("score", "goals"):
        parsed = parse_int(attr(team, name))
        if parsed is not None:
            return parsed

    for name in (f"{side}score", f"{side}_score", f"{side}TeamScore", f"{feed_side}_score"):
        parsed = parse_int(attr(match, name))
        if parsed is not None:
            return parsed

    for name in ("result", "score", "ft_score"):
        value = attr(match, name)
        if value and "-" in value:
            parts = [p.strip() for p in value.strip("[]").split("-")]
            if len(parts) == 2:
                parsed = parse_int(parts[0 if side == "home" else 1])
                if parsed is not None:
                    return parsed
    return None


def extract_round(match: Dict[str, Any], week_label: Optional[str] = None) -> Optional[str]:
    """Round/matchday label from the match first, then the containing week/stage."""
    value = first_attr(match, "round", "matchday", "week", "round_id")
    if value is not None:
        return value
    if week_label is not None and str(week_label).strip():
        return str(week_label).strip()
    return None


def normalize_season_for_feed(season: Optional[str]) -> Optional[str]:
    """"2024/25" -> "2024-2025" (also YYYY/YYYY, YYYY-YY, YYYY-YYYY; century wrap handled).

    Other strings come back trimmed; empty -> None.
    """
    if season is None or not str(season).strip():
        return None
    s = str(season).strip()
    m = _SEASON_RE.match(s)
    if not m:
        return s
    start = int(m.group(1))
    end_part = m.group(2)
    if len(end_part) == 2:
        end = (start // 100) * 100 + int(end_part)
        if end < start:
            end += 100
    else:
        end = int(end_part)
    return f"{start}-{end}"


def season_key(season: Optional[str]) -> Optional[str]:
    """Canonical storage key: "2024-25" -> "2024/2025"."""
    normalized = normalize_season_for_feed(season)
    if normalized is None:
        return None
    m = _SEASON_RE.match(normalized)
    if not m:
        return normalized
    return f"{m.group(1)}/{m.group(2)}"


def season_to_display(season: Optional[str]) -> str:
    """"2024-2025" -> "2024/25"; unrecognized strings pass through."""
    if not season:
        return ""
    m = _SEASON_RE.match(season.strip())
    if not m:
        return season
    end = m.group(2)
    return f"{m.group(1)}/{end[-2:]}"


def parse_provider_timestamp(ts: Optional[str], fallback: Optional[datetime] = None) -> datetime:
    """Parse "DD.MM.YYYY HH:MM:SS" as UTC; anything else yields the fallback (default: now)."""
    m = _TIMESTAMP_RE.match((ts or "").strip())
    if m:
        dd, mm, yyyy, hh, mi, ss = (int(p) for p in m.groups())
        try:
            return datetime(yyyy, mm, dd, hh, mi, ss, tzinfo=timezone.utc)
        except ValueError:
            pass
    return fallback or datetime.now(timezone.utc)


def slugify(text: str) -> str:
    return _SLUG_RE.sub("-", (text or "").lower()).strip("-")


def _standings_int(node: Dict[str, Any], flat: str, nested: Optional[tuple] = None) -> int:
    """Read a counter from the flat JSON form (overall_gp) or the nested XML form (overall/@gp)."""
    value = parse_int(attr(node, flat))
    if value is None and nested is not None:
        value = parse_int(attr(child(node, nested[0]), nested[1]))
    return value or 0


def parse_standings_row(node: Dict[str, Any]) -> StandingsTeamRow:
    """Normalize one provider standings team entry."""
    fields: Dict[str, Any] = {
        "provider_team_id": attr(node, "id") or "",
        "team_name": attr(node, "name"),
        "position": _standings_int(node, "position"),
        "points": _standings_int(node, "p", ("total", "p")),
        "played": _standings_int(node, "overall_gp", ("overall", "gp")),
        "won": _standings_int(node, "overall_w", ("overall", "w")),
        "drawn": _standings_int(node, "overall_d", ("overall", "d")),
        "lost": _standings_int(node, "overall_l", ("overall", "l")),
        "goals_for": _standings_int(node, "overall_gs", ("overall", "gs")),
        "goals_against": _standings_int(node, "overall_ga", ("overall", "ga")),
        "goal_difference": _standings_int(node, "gd", ("total", "gd")),
        "recent_form": attr(node, "recent_form"),
        "movement_status": attr(node, "status"),
        "qualification_note": attr(node, "description") or attr(child(node, "description"), "value"),
    }
    for side in ("home", "away"):
        for suffix, target in (
            ("gp", "played"),
            ("w", "won"),
            ("d", "drawn"),
            ("l", "lost"),
            ("gs", "goals_for"),
            ("ga", "goals_against"),
        ):
            fields[f"{side}_{target}"] = _standings_int(node, f"{side}_{suffix}", (side, suffix))
    return StandingsTeamRow(**fields)
