"""
Shape extractor: every known fixture/score dialect reduces to week groups;
unknown trees raise ShapeNotFound with the keys that were present.
"""

from __future__ import annotations

import pytest

from core.errors import ShapeNotFound
from feed.xml_tree import parse_xml
from ingestion.shapes import FIXTURE_SHAPES, extract_fixtures, extract_standings

MATCH_A = {"@static_id": "1", "@id": "11"}
MATCH_B = {"@static_id": "2", "@id": "12"}


def test_results_tournament_week() -> None:
    tree = {
        "results": {
            "tournament": {
                "@league": "Premier League",
                "@season": "2024/2025",
                "week": [
                    {"@number": "1", "match": [MATCH_A, MATCH_B]},
                    {"@number": "2", "match": MATCH_A},
                ],
            }
        }
    }
    out = extract_fixtures(tree)
    assert out.response_path == "results.tournament.week"
    assert out.competition_name == "Premier League"
    assert out.season_hint == "2024/2025"
    assert [w.label for w in out.weeks] == ["1", "2"]
    assert out.match_count == 3


def test_results_tournament_stage_collects_nested_groups() -> None:
    tree = {
        "results": {
            "tournament": {
                "@league": "Champions League",
                "stage": [
                    {"@name": "Group Stage", "group": [{"match": MATCH_A}, {"match": [MATCH_B]}]},
                    {"@name": "Final", "matches": {"@formatted_date": "31.05.2025", "match": MATCH_A}},
                ],
            }
        }
    }
    out = extract_fixtures(tree)
    assert out.response_path == "results.tournament.stage"
    assert [w.label for w in out.weeks] == ["Group Stage", "Final"]
    assert out.weeks[0].matches == [MATCH_A, MATCH_B]
    assert out.weeks[1].formatted_date == "31.05.2025"


def test_results_tournament_flat_match_list() -> None:
    tree = {"results": {"tournament": {"@name": "FA Cup", "match": [MATCH_A, MATCH_B]}}}
    out = extract_fixtures(tree)
    assert out.response_path == "results.tournament.match"
    assert out.competition_name == "FA Cup"
    assert out.match_count == 2


@pytest.mark.parametrize("root", ["leagues", "fixtures"])
def test_league_containers_mix_weeks_and_bare_matches(root) -> None:
    tree = {root: {"league": {"@name": "Eredivisie", "week": [{"@number": "3", "match": MATCH_A}, MATCH_B]}}}
    out = extract_fixtures(tree)
    assert out.response_path == f"{root}.league"
    assert out.competition_name == "Eredivisie"
    assert [w.label for w in out.weeks] == ["3", None]
    assert out.match_count == 2


def test_scores_category_league_carries_group_competition() -> None:
    tree = {
        "scores": {
            "category": [
                {"@name": "England", "@id": "1204", "league": {"@name": "Premier League", "@id": "1204", "match": [MATCH_A]}},
                {"@name": "Spain", "@id": "1399", "league": {"@name": "LaLiga", "match": MATCH_B}},
            ]
        }
    }
    out = extract_fixtures(tree)
    assert out.response_path == "scores.category.league"
    assert [(w.competition_name, w.provider_competition_id) for w in out.weeks] == [
        ("Premier League", "1204"),
        ("LaLiga", "1399"),
    ]


def test_scores_category_matches() -> None:
    tree = {
        "scores": {
            "category": {
                "@name": "England: Premier League",
                "@id": "1204",
                "matches": {"@formatted_date": "10.08.2024", "match": [MATCH_A, MATCH_B]},
            }
        }
    }
    out = extract_fixtures(tree)
    assert out.response_path == "scores.category.matches"
    assert out.weeks[0].formatted_date == "10.08.2024"
    assert out.weeks[0].competition_name == "England: Premier League"
    assert out.match_count == 2


def test_first_matching_shape_wins() -> None:
    # Both a week and a flat match list: the week dialect is tried first.
    tree = {"results": {"tournament": {"week": {"match": MATCH_A}, "match": [MATCH_B]}}}
    assert extract_fixtures(tree).response_path == "results.tournament.week"
    assert len(FIXTURE_SHAPES) == 7


def test_unknown_shape_raises_with_top_level_keys() -> None:
    with pytest.raises(ShapeNotFound) as exc_info:
        extract_fixtures({"zeta": {}, "alpha": []})
    assert exc_info.value.top_level_keys == ["alpha", "zeta"]
    assert "Top-level keys: [alpha, zeta]" in str(exc_info.value)
    assert exc_info.value.to_dict()["kind"] == "shape_not_found"


def test_empty_tournament_is_not_a_match() -> None:
    with pytest.raises(ShapeNotFound) as exc_info:
        extract_fixtures({"results": {"tournament": {"@league": "X", "week": []}}})
    assert exc_info.value.detail["has_week"] is True


def test_extract_standings() -> None:
    tree = {
        "standings": {
            "@timestamp": "10.08.2024 18:30:00",
            "tournament": {"@league": "Premier League", "@season": "2024/2025", "@stage_id": "9", "team": {"@id": "101"}},
        }
    }
    out = extract_standings(tree)
    assert out.response_path == "standings.tournament.team"
    assert out.season == "2024/2025"
    assert out.stage_id == "9"
    assert out.timestamp == "10.08.2024 18:30:00"
    assert out.teams == [{"@id": "101"}]


def test_extract_standings_missing_rows() -> None:
    with pytest.raises(ShapeNotFound):
        extract_standings({"standings": {"tournament": {"@league": "X"}}})


def test_xml_fixtures_go_through_the_same_extractor() -> None:
    xml = """<?xml version="1.0" encoding="utf-8"?>
    <results>
      <tournament league="Premier League" season="2024/2025">
        <week number="1">
          <match static_id="1" id="11" formatted_date="10.08.2024" time="15:00" status="FT">
            <localteam id="101" name="Arsenal" score="2"/>
            <visitorteam id="102" name="Chelsea" score="1"/>
          </match>
        </week>
      </tournament>
    </results>"""
    tree = parse_xml(xml)
    out = extract_fixtures(tree)
    assert out.response_path == "results.tournament.week"
    match = out.weeks[0].matches[0]
    assert match["@static_id"] == "1"
    assert match["localteam"] == {"@id": "101", "@name": "Arsenal", "@score": "2"}


def test_xml_tree_repeated_children_and_text() -> None:
    tree = parse_xml("<root a='1'><item>x</item><item>y</item><note kind='n'>hi</note></root>")
    assert tree == {"root": {"@a": "1", "item": ["x", "y"], "note": {"@kind": "n", "#text": "hi"}}}
