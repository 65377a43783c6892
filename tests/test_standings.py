"""
Unit tests for group standings and tie-breaking.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from tournamentflow.models import Cards, Group, MatchResult, Team
from tournamentflow.standings import calculate_group_standings, calculate_standings


@pytest.fixture
def teams():
    return [Team(id=team_id, name=f"Team {team_id}") for team_id in ("a", "b", "c", "d")]


def by_id(standings):
    return {s.team_id: s for s in standings}


class TestCalculateStandings:
    """Tests for points, goals and ranks."""

    def test_win_and_draw_points(self, teams, make_match):
        matches = [
            make_match("m1", "a", "b", result=(2, 0)),
            make_match("m2", "c", "d", result=(1, 1)),
        ]
        rows = by_id(calculate_standings(teams, matches))
        assert rows["a"].points == 3 and rows["a"].won == 1
        assert rows["b"].points == 0 and rows["b"].lost == 1
        assert rows["c"].points == 1 and rows["c"].drawn == 1
        assert rows["d"].points == 1 and rows["d"].drawn == 1
        assert rows["a"].goal_difference == 2
        assert rows["b"].goals_against == 2

    def test_ranks_are_a_permutation(self, teams, make_match):
        """Ranks are 1..n with no shared positions, even when everything is level."""
        standings = calculate_standings(teams, [])
        assert [s.rank for s in standings] == [1, 2, 3, 4]
        assert [s.team_id for s in standings] == ["a", "b", "c", "d"]

    def test_incomplete_matches_are_ignored(self, teams, make_match):
        matches = [make_match("m1", "a", "b")]
        assert all(s.played == 0 for s in calculate_standings(teams, matches))

    def test_unknown_and_missing_teams_are_ignored(self, teams, make_match):
        matches = [
            make_match("m1", "a", "zz", result=(3, 0)),
            make_match("m2", "b", None, round_size=4, result=(1, 0)),
        ]
        assert all(s.played == 0 for s in calculate_standings(teams, matches))

    def test_goal_difference_breaks_points_tie(self, teams, make_match):
        matches = [
            make_match("m1", "b", "c", result=(3, 0)),
            make_match("m2", "a", "d", result=(1, 0)),
        ]
        ranked = [s.team_id for s in calculate_standings(teams, matches)]
        assert ranked[:2] == ["b", "a"]

    def test_goals_for_breaks_goal_difference_tie(self, teams, make_match):
        matches = [
            make_match("m1", "a", "c", result=(1, 0)),
            make_match("m2", "b", "d", result=(3, 2)),
        ]
        ranked = [s.team_id for s in calculate_standings(teams, matches)]
        assert ranked[:2] == ["b", "a"]

    def test_fair_play_breaks_goals_tie(self, teams, make_match):
        """A red card costs more than two yellows."""
        carded = MatchResult(1, 0, home_cards=Cards(yellow=0, red=1))
        clean = MatchResult(1, 0, home_cards=Cards(yellow=2, red=0))
        matches = [
            make_match("m1", "a", "c", result=carded),
            make_match("m2", "b", "d", result=clean),
        ]
        rows = calculate_standings(teams, matches)
        assert [s.team_id for s in rows][:2] == ["b", "a"]
        assert by_id(rows)["a"].fair_play_points == -3
        assert by_id(rows)["b"].fair_play_points == -2

    def test_team_id_is_the_final_tie_break(self, teams, make_match):
        matches = [
            make_match("m1", "d", "a", result=(1, 0)),
            make_match("m2", "c", "b", result=(1, 0)),
        ]
        ranked = [s.team_id for s in calculate_standings(teams, matches)]
        assert ranked == ["c", "d", "a", "b"]

    def test_points_add_up_per_match(self, teams, make_match):
        """Each completed match hands out either 3 or 2 points in total."""
        matches = [
            make_match("m1", "a", "b", result=(2, 2)),
            make_match("m2", "c", "d", result=(0, 1)),
            make_match("m3", "a", "c", result=(4, 1)),
        ]
        rows = calculate_standings(teams, matches)
        assert sum(s.points for s in rows) == 2 + 3 + 3
        assert sum(s.goals_for for s in rows) == sum(s.goals_against for s in rows)
        for s in rows:
            assert s.played == s.won + s.drawn + s.lost


class TestGroupStandings:

    def test_standings_per_group(self, teams, make_match):
        groups = [
            Group(id="group-0", name="A", team_ids=("a", "c"),
                  matches=(make_match("m1", "a", "c", result=(0, 2)),)),
            Group(id="group-1", name="B", team_ids=("b", "d")),
        ]
        standings = calculate_group_standings(teams, groups)
        assert [[s.team_id for s in rows] for rows in standings] == [["c", "a"], ["b", "d"]]
