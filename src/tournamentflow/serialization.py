"""
Conversion between engine models and plain dicts (JSON/YAML friendly).
"""
from datetime import datetime, timezone
from typing import Dict, Optional

from .config import config_to_dict, parse_config
from .models import (
    Cards,
    Group,
    GroupStanding,
    Match,
    MatchResult,
    MatchStatus,
    Team,
    Tournament,
    TournamentStatus,
)


def parse_datetime(value) -> datetime:
    if value is None:
        return datetime.now(timezone.utc)
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    return datetime.fromisoformat(text)


def team_from_dict(data: Dict) -> Team:
    return Team(id=str(data['id']), name=str(data['name']), logo_url=data.get('logo_url'))


def team_to_dict(team: Team) -> Dict:
    return {'id': team.id, 'name': team.name, 'logo_url': team.logo_url}


def _cards_from_dict(data: Optional[Dict]) -> Optional[Cards]:
    if not data:
        return None
    return Cards(yellow=int(data.get('yellow', 0)), red=int(data.get('red', 0)))


def _cards_to_dict(cards: Optional[Cards]) -> Optional[Dict]:
    if cards is None:
        return None
    return {'yellow': cards.yellow, 'red': cards.red}


def _optional_int(value) -> Optional[int]:
    return None if value is None else int(value)


def result_from_dict(data: Optional[Dict]) -> Optional[MatchResult]:
    if data is None:
        return None
    return MatchResult(
        home_goals=int(data['home_goals']),
        away_goals=int(data['away_goals']),
        home_penalties=_optional_int(data.get('home_penalties')),
        away_penalties=_optional_int(data.get('away_penalties')),
        home_cards=_cards_from_dict(data.get('home_cards')),
        away_cards=_cards_from_dict(data.get('away_cards')),
    )


def result_to_dict(result: Optional[MatchResult]) -> Optional[Dict]:
    if result is None:
        return None
    data = {'home_goals': result.home_goals, 'away_goals': result.away_goals}
    if result.has_penalties:
        data['home_penalties'] = result.home_penalties
        data['away_penalties'] = result.away_penalties
    if result.home_cards is not None:
        data['home_cards'] = _cards_to_dict(result.home_cards)
    if result.away_cards is not None:
        data['away_cards'] = _cards_to_dict(result.away_cards)
    return data


def match_from_dict(data: Dict) -> Match:
    return Match(
        id=str(data['id']),
        home_team_id=data.get('home_team_id'),
        away_team_id=data.get('away_team_id'),
        home_team_name=data.get('home_team_name'),
        away_team_name=data.get('away_team_name'),
        start_time=parse_datetime(data.get('start_time')),
        status=MatchStatus(data.get('status', MatchStatus.SCHEDULED.value)),
        result=result_from_dict(data.get('result')),
        round=int(data.get('round', 0)),
        group_name=data.get('group_name'),
        matchday=_optional_int(data.get('matchday')),
        pairing=_optional_int(data.get('pairing')),
        leg=_optional_int(data.get('leg')),
        sibling_id=data.get('sibling_id'),
    )


def match_to_dict(match: Match) -> Dict:
    return {
        'id': match.id,
        'home_team_id': match.home_team_id,
        'away_team_id': match.away_team_id,
        'home_team_name': match.home_team_name,
        'away_team_name': match.away_team_name,
        'start_time': match.start_time.isoformat(),
        'status': match.status.value,
        'result': result_to_dict(match.result),
        'round': match.round,
        'group_name': match.group_name,
        'matchday': match.matchday,
        'pairing': match.pairing,
        'leg': match.leg,
        'sibling_id': match.sibling_id,
    }


def group_from_dict(data: Dict) -> Group:
    return Group(
        id=str(data['id']),
        name=str(data['name']),
        team_ids=tuple(str(team_id) for team_id in data.get('team_ids', [])),
        matches=tuple(match_from_dict(m) for m in data.get('matches', [])),
    )


def group_to_dict(group: Group) -> Dict:
    return {
        'id': group.id,
        'name': group.name,
        'team_ids': list(group.team_ids),
        'matches': [match_to_dict(m) for m in group.matches],
    }


_STANDING_FIELDS = (
    'played', 'won', 'drawn', 'lost', 'goals_for', 'goals_against',
    'goal_difference', 'points', 'fair_play_points', 'rank',
)


def standing_from_dict(data: Dict) -> GroupStanding:
    standing = GroupStanding(team_id=str(data['team_id']), team_name=str(data.get('team_name', data['team_id'])))
    for field_name in _STANDING_FIELDS:
        if field_name in data:
            setattr(standing, field_name, int(data[field_name]))
    return standing


def standing_to_dict(standing: GroupStanding) -> Dict:
    data = {'team_id': standing.team_id, 'team_name': standing.team_name}
    for field_name in _STANDING_FIELDS:
        data[field_name] = getattr(standing, field_name)
    return data


def tournament_from_dict(data: Dict) -> Tournament:
    return Tournament(
        id=str(data['id']),
        name=str(data['name']),
        config=parse_config(data.get('config')),
        teams=tuple(team_from_dict(t) for t in data.get('teams', [])),
        groups=tuple(group_from_dict(g) for g in data.get('groups', [])),
        knockout_matches=tuple(match_from_dict(m) for m in data.get('knockout_matches', [])),
        status=TournamentStatus(data.get('status', TournamentStatus.DRAFT.value)),
    )


def tournament_to_dict(tournament: Tournament) -> Dict:
    return {
        'id': tournament.id,
        'name': tournament.name,
        'status': tournament.status.value,
        'config': config_to_dict(tournament.config),
        'teams': [team_to_dict(t) for t in tournament.teams],
        'groups': [group_to_dict(g) for g in tournament.groups],
        'knockout_matches': [match_to_dict(m) for m in tournament.knockout_matches],
    }
