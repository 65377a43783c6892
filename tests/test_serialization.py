"""
Tests for converting models to and from plain dicts.
"""
import sys
import os
from datetime import datetime, timezone

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from tournamentflow.models import Cards, MatchResult, MatchStatus, TournamentStatus
from tournamentflow.serialization import (
    match_from_dict, match_to_dict, parse_datetime, result_from_dict, result_to_dict,
    standing_from_dict, tournament_from_dict, tournament_to_dict,
)
from tournamentflow.tournament import create_tournament


class TestParseDatetime:

    def test_zulu_suffix(self):
        parsed = parse_datetime("2026-07-01T18:00:00Z")
        assert parsed == datetime(2026, 7, 1, 18, 0, tzinfo=timezone.utc)

    def test_none_is_now(self):
        assert parse_datetime(None).tzinfo is not None


class TestResults:

    def test_result_with_cards_and_penalties(self):
        data = {
            'home_goals': 1, 'away_goals': 1,
            'home_penalties': 5, 'away_penalties': 3,
            'home_cards': {'yellow': 2},
        }
        result = result_from_dict(data)
        assert result.has_penalties
        assert result.home_cards == Cards(yellow=2, red=0)
        assert result.away_cards is None
        assert result_to_dict(result)['home_cards'] == {'yellow': 2, 'red': 0}

    def test_plain_result_omits_extras(self):
        assert result_to_dict(MatchResult(2, 0)) == {'home_goals': 2, 'away_goals': 0}
        assert result_from_dict(None) is None


class TestMatches:

    def test_match_defaults(self):
        match = match_from_dict({'id': 'm1', 'home_team_id': 'a', 'away_team_id': 'b',
                                 'start_time': '2026-07-01T18:00:00+00:00'})
        assert match.status == MatchStatus.SCHEDULED
        assert match.round == 0
        assert match.result is None

    def test_completed_match(self):
        data = {
            'id': 'ko-r4-p0', 'home_team_id': 'a', 'away_team_id': 'b',
            'start_time': '2026-07-01T18:00:00Z', 'status': 'COMPLETED',
            'result': {'home_goals': 0, 'away_goals': 1}, 'round': 4, 'pairing': 0,
        }
        match = match_from_dict(data)
        assert match.is_knockout and match.is_completed
        assert match_to_dict(match)['result'] == {'home_goals': 0, 'away_goals': 1}

    def test_standing_defaults_name_to_id(self):
        standing = standing_from_dict({'team_id': 'x', 'points': '4', 'rank': 1})
        assert standing.team_name == 'x'
        assert standing.points == 4


class TestTournament:

    def test_tournament_round_trip(self, seven_teams, kickoff):
        tournament = create_tournament("Cup", seven_teams, start_time=kickoff)
        restored = tournament_from_dict(tournament_to_dict(tournament))
        assert restored == tournament
        assert restored.status == TournamentStatus.ONGOING
