"""
Shape extractor for provider fixture, score and standings trees.

Each shape variant is a small function that either recognizes the tree and
returns an ExtractedFixtures, or returns None. Variants are tried in a fixed
order; new dialects are added to FIXTURE_SHAPES without touching callers.
When nothing matches, ShapeNotFound carries the keys that were present.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple

from core.errors import ShapeNotFound

from .schema import ExtractedFixtures, ExtractedStandings, WeekGroup
from .tree import as_array, attr, child, first_attr, top_level_keys

ShapeVariant = Callable[[Dict[str, Any]], Optional[ExtractedFixtures]]


def _matches_of(node: Any) -> List[Dict[str, Any]]:
    """Match records directly under a node, via "matches.match" or "match"."""
    if not isinstance(node, dict):
        return []
    data = child(node, "matches", "match")
    if data is None:
        data = node.get("match")
    return [m for m in as_array(data) if isinstance(m, dict)]


def _group_date(node: Any) -> Optional[str]:
    return attr(child(node, "matches"), "formatted_date") or attr(node, "formatted_date")


def _week_group(week: Dict[str, Any], **extra: Any) -> WeekGroup:
    return WeekGroup(
        label=first_attr(week, "number", "name", "round"),
        formatted_date=_group_date(week),
        matches=_matches_of(week),
        **extra,
    )


def _groups_from_mixed(items: List[Any], **extra: Any) -> List[WeekGroup]:
    """A list that may hold week containers or bare matches; bare ones share one group."""
    groups: List[WeekGroup] = []
    loose: List[Dict[str, Any]] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        if "match" in item or "matches" in item:
            groups.append(_week_group(item, **extra))
        else:
            loose.append(item)
    if loose:
        groups.append(WeekGroup(matches=loose, **extra))
    return [g for g in groups if g.matches]


def _tournaments(tree: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [t for t in as_array(child(tree, "results", "tournament")) if isinstance(t, dict)]


def _tournament_header(t: Dict[str, Any]) -> Tuple[str, Optional[str]]:
    return attr(t, "name") or attr(t, "league") or "Unknown", attr(t, "season")


def _results_tournament_week(tree: Dict[str, Any]) -> Optional[ExtractedFixtures]:
    for t in _tournaments(tree):
        groups = [g for g in (_week_group(w) for w in as_array(t.get("week")) if isinstance(w, dict)) if g.matches]
        if groups:
            name, season = _tournament_header(t)
            return ExtractedFixtures(
                competition_name=name, season_hint=season, weeks=groups,
                response_path="results.tournament.week",
            )
    return None


def _results_tournament_stage(tree: Dict[str, Any]) -> Optional[ExtractedFixtures]:
    for t in _tournaments(tree):
        groups: List[WeekGroup] = []
        for stage in as_array(t.get("stage")):
            if not isinstance(stage, dict):
                continue
            label = first_attr(stage, "name", "round", "id")
            matches = _matches_of(stage)
            for inner in as_array(stage.get("group")) + as_array(stage.get("week")):
                matches.extend(_matches_of(inner))
            if matches:
                groups.append(WeekGroup(label=label, formatted_date=_group_date(stage), matches=matches))
        if groups:
            name, season = _tournament_header(t)
            return ExtractedFixtures(
                competition_name=name, season_hint=season, weeks=groups,
                response_path="results.tournament.stage",
            )
    return None


def _results_tournament_match(tree: Dict[str, Any]) -> Optional[ExtractedFixtures]:
    for t in _tournaments(tree):
        matches = [m for m in as_array(t.get("match")) if isinstance(m, dict)]
        if matches:
            name, season = _tournament_header(t)
            return ExtractedFixtures(
                competition_name=name, season_hint=season, weeks=[WeekGroup(matches=matches)],
                response_path="results.tournament.match",
            )
    return None


def _league_container(root_key: str) -> ShapeVariant:
    def variant(tree: Dict[str, Any]) -> Optional[ExtractedFixtures]:
        for league in as_array(child(tree, root_key, "league")):
            if not isinstance(league, dict):
                continue
            data = league.get("week")
            if data is None:
                data = league.get("match")
            groups = _groups_from_mixed(as_array(data))
            if groups:
                return ExtractedFixtures(
                    competition_name=attr(league, "name") or "Unknown",
                    season_hint=attr(league, "season"),
                    weeks=groups,
                    response_path=f"{root_key}.league",
                )
        return None

    variant.__name__ = f"_{root_key}_league"
    return variant


def _categories(tree: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [c for c in as_array(child(tree, "scores", "category")) if isinstance(c, dict)]


def _scores_category_league(tree: Dict[str, Any]) -> Optional[ExtractedFixtures]:
    groups: List[WeekGroup] = []
    for cat in _categories(tree):
        for league in as_array(cat.get("league")):
            if not isinstance(league, dict):
                continue
            data = league.get("match")
            if data is None:
                data = league.get("week")
            groups.extend(
                _groups_from_mixed(
                    as_array(data),
                    competition_name=attr(league, "name") or attr(cat, "name"),
                    provider_competition_id=attr(league, "id") or attr(cat, "id"),
                )
            )
    if not groups:
        return None
    return ExtractedFixtures(
        competition_name=groups[0].competition_name or "Unknown",
        weeks=groups,
        response_path="scores.category.league",
    )


def _scores_category_matches(tree: Dict[str, Any]) -> Optional[ExtractedFixtures]:
    groups: List[WeekGroup] = []
    for cat in _categories(tree):
        for block in as_array(cat.get("matches")):
            if not isinstance(block, dict):
                continue
            matches = [m for m in as_array(block.get("match")) if isinstance(m, dict)]
            if matches:
                groups.append(
                    WeekGroup(
                        formatted_date=attr(block, "formatted_date"),
                        competition_name=attr(cat, "name"),
                        provider_competition_id=attr(cat, "id"),
                        matches=matches,
                    )
                )
    if not groups:
        return None
    return ExtractedFixtures(
        competition_name=groups[0].competition_name or "Unknown",
        weeks=groups,
        response_path="scores.category.matches",
    )


FIXTURE_SHAPES: List[ShapeVariant] = [
    _results_tournament_week,
    _results_tournament_stage,
    _results_tournament_match,
    _league_container("leagues"),
    _league_container("fixtures"),
    _scores_category_league,
    _scores_category_matches,
]


def _diagnostics(tree: Any) -> Dict[str, Any]:
    tournament = child(tree, "results", "tournament")
    first = as_array(tournament)[0] if as_array(tournament) else None
    return {
        "tournament_keys": top_level_keys(first) if isinstance(first, dict) else [],
        "has_week": isinstance(first, dict) and first.get("week") is not None,
        "has_stage": isinstance(first, dict) and first.get("stage") is not None,
        "has_category": child(tree, "scores", "category") is not None,
    }


def extract_fixtures(tree: Any) -> ExtractedFixtures:
    """Return the first shape variant that yields at least one group of matches."""
    if isinstance(tree, dict):
        for variant in FIXTURE_SHAPES:
            found = variant(tree)
            if found is not None:
                return found
    raise ShapeNotFound(top_level_keys(tree), _diagnostics(tree))


def extract_standings(tree: Any) -> ExtractedStandings:
    """Locate standings.tournament.team rows (first tournament with rows wins)."""
    standings = child(tree, "standings") if isinstance(tree, dict) else None
    if isinstance(standings, dict):
        for t in as_array(standings.get("tournament")):
            if not isinstance(t, dict):
                continue
            teams = [row for row in as_array(t.get("team")) if isinstance(row, dict)]
            if teams:
                return ExtractedStandings(
                    timestamp=attr(standings, "timestamp"),
                    season=attr(t, "season"),
                    stage_id=attr(t, "stage_id"),
                    league_name=attr(t, "league") or attr(t, "name"),
                    teams=teams,
                    response_path="standings.tournament.team",
                )
    detail = {"standings_keys": top_level_keys(standings)} if isinstance(standings, dict) else {}
    raise ShapeNotFound(top_level_keys(tree), detail)
