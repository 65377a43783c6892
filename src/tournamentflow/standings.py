"""
Group standings calculated from completed match results.
"""
from typing import Dict, Iterable, List, Optional, Sequence

from .models import Cards, Group, GroupStanding, Match, Team

POINTS_FOR_WIN = 3
POINTS_FOR_DRAW = 1
YELLOW_CARD_PENALTY = 1
RED_CARD_PENALTY = 3


def _fair_play_deduction(cards: Optional[Cards]) -> int:
    if cards is None:
        return 0
    return cards.yellow * YELLOW_CARD_PENALTY + cards.red * RED_CARD_PENALTY


def _counts_for_standings(match: Match) -> bool:
    return (match.is_completed
            and match.result is not None
            and match.home_team_id is not None
            and match.away_team_id is not None)


def standing_sort_key(standing: GroupStanding):
    """
    Strict ordering: points, goal difference, goals scored, fair play
    (all descending), then team id ascending as the drawing of lots.
    """
    # Head-to-head is deliberately not part of the order.
    return (
        -standing.points,
        -standing.goal_difference,
        -standing.goals_for,
        -standing.fair_play_points,
        standing.team_id,
    )


def calculate_standings(teams: Sequence[Team], matches: Iterable[Match]) -> List[GroupStanding]:
    """
    Calculate ranked standings for one group.

    Only COMPLETED matches with a result and both teams known count; matches
    involving a team outside ``teams`` are ignored. Each counted match gives
    3 points for a win and 1 each for a draw, and deducts fair-play points for
    the cards recorded against either side.

    Returns:
        Standings sorted best first, with ranks 1..n and no shared rank.
    """
    standings: Dict[str, GroupStanding] = {
        team.id: GroupStanding(team_id=team.id, team_name=team.name) for team in teams
    }

    for match in matches:
        if not _counts_for_standings(match):
            continue
        home = standings.get(match.home_team_id)
        away = standings.get(match.away_team_id)
        if home is None or away is None:
            continue
        result = match.result

        home.played += 1
        away.played += 1

        home.goals_for += result.home_goals
        home.goals_against += result.away_goals
        home.goal_difference = home.goals_for - home.goals_against

        away.goals_for += result.away_goals
        away.goals_against += result.home_goals
        away.goal_difference = away.goals_for - away.goals_against

        if result.home_goals > result.away_goals:
            home.won += 1
            home.points += POINTS_FOR_WIN
            away.lost += 1
        elif result.home_goals < result.away_goals:
            away.won += 1
            away.points += POINTS_FOR_WIN
            home.lost += 1
        else:
            home.drawn += 1
            away.drawn += 1
            home.points += POINTS_FOR_DRAW
            away.points += POINTS_FOR_DRAW

        home.fair_play_points -= _fair_play_deduction(result.home_cards)
        away.fair_play_points -= _fair_play_deduction(result.away_cards)

    ranked = sorted(standings.values(), key=standing_sort_key)
    for index, standing in enumerate(ranked):
        standing.rank = index + 1
    return ranked


def calculate_group_standings(teams: Sequence[Team], groups: Iterable[Group]) -> List[List[GroupStanding]]:
    """Ranked standings for every group, in group order."""
    teams_by_id = {team.id: team for team in teams}
    all_standings = []
    for group in groups:
        group_teams = [teams_by_id[team_id] for team_id in group.team_ids if team_id in teams_by_id]
        all_standings.append(calculate_standings(group_teams, group.matches))
    return all_standings
