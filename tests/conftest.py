"""
Shared pytest fixtures for tournament engine tests.

Running tests:
    pytest tests/                  - full suite
    pytest tests/ -m "not slow"   - skip the randomized bracket sweeps
"""
import pytest
import sys
import os
from datetime import datetime, timezone

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from tournamentflow.models import GroupStanding, Match, MatchResult, MatchStatus, Team


KICKOFF = datetime(2026, 7, 1, 18, 0, tzinfo=timezone.utc)


@pytest.fixture
def kickoff():
    """Fixed placeholder kick-off time."""
    return KICKOFF


@pytest.fixture
def seven_teams():
    """Seven teams, the smallest field that splits into two uneven groups."""
    return [Team(id=f"t{i}", name=f"Team {i}") for i in range(1, 8)]


@pytest.fixture
def make_teams():
    """Factory for n teams with ids t1..tn."""
    def _make(count):
        return [Team(id=f"t{i}", name=f"Team {i}") for i in range(1, count + 1)]
    return _make


@pytest.fixture
def make_standing():
    """Factory for a ranked standing row."""
    def _make(team_id, rank, points=0, goal_difference=0, goals_for=0):
        return GroupStanding(
            team_id=team_id,
            team_name=f"Team {team_id}",
            played=3,
            points=points,
            goal_difference=goal_difference,
            goals_for=goals_for,
            rank=rank,
        )
    return _make


@pytest.fixture
def group_standings(make_standing):
    """
    Factory for standings of ``num_groups`` groups with two ranked teams each.

    Team ids are the group letter plus the rank (A1, A2, B1, ...). Winners
    have 9 points, runners-up 6.
    """
    def _make(num_groups, per_group=2):
        standings = []
        for g in range(num_groups):
            letter = chr(ord('A') + g)
            standings.append([
                make_standing(f"{letter}{rank}", rank, points=12 - 3 * rank, goal_difference=3 - rank,
                              goals_for=6 - rank)
                for rank in range(1, per_group + 1)
            ])
        return standings
    return _make


@pytest.fixture
def make_match():
    """Factory for knockout or group matches with sensible defaults."""
    def _make(match_id, home, away, round_size=0, pairing=None, leg=None, sibling_id=None,
              result=None, group_name=None):
        status = MatchStatus.COMPLETED if result is not None else MatchStatus.SCHEDULED
        if isinstance(result, tuple):
            result = MatchResult(home_goals=result[0], away_goals=result[1])
        return Match(
            id=match_id,
            home_team_id=home,
            away_team_id=away,
            start_time=KICKOFF,
            status=status,
            result=result,
            round=round_size,
            pairing=pairing,
            leg=leg,
            sibling_id=sibling_id,
            group_name=group_name,
        )
    return _make
