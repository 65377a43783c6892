"""
Knockout advancement: resolves finished ties and moves winners forward.

Matches are located by (round, pairing) rather than by their ids. The winner
of pairing p in round R fills pairing p // 2 of round R / 2: the home slot
for even p and the away slot for odd p, mirrored on a second leg.
"""
import logging
from collections import defaultdict
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .errors import MatchNotFoundError, MatchNotReadyError
from .models import FINAL_ROUND, Match, MatchResult

logger = logging.getLogger(__name__)

# (team id, display name) of a side that goes through.
Side = Tuple[str, Optional[str]]


def _index_pairings(matches: List[Match]) -> Dict[Tuple[int, int], List[int]]:
    positions = defaultdict(list)
    for index, match in enumerate(matches):
        if match.is_knockout and match.pairing is not None:
            positions[(match.round, match.pairing)].append(index)
    for indices in positions.values():
        indices.sort(key=lambda i: matches[i].leg or 1)
    return positions


def _present_side(match: Match) -> Optional[Side]:
    if match.home_team_id is not None:
        return match.home_team_id, match.home_team_name
    if match.away_team_id is not None:
        return match.away_team_id, match.away_team_name
    return None


def _is_bye(tie: List[Match], round_size: int, pairing: int, positions) -> bool:
    """A single-team tie whose empty slot has no feeder tie to fill it."""
    if len(tie) != 1:
        return False
    match = tie[0]
    if (match.home_team_id is None) == (match.away_team_id is None):
        return False
    empty_feeder = pairing * 2 if match.home_team_id is None else pairing * 2 + 1
    return (round_size * 2, empty_feeder) not in positions


def _single_match_winner(match: Match) -> Optional[Side]:
    # A lone team only goes through as a bye, never as the winner of a tie.
    if match.home_team_id is None or match.away_team_id is None:
        return None
    home = (match.home_team_id, match.home_team_name)
    away = (match.away_team_id, match.away_team_name)
    result = match.result
    if result.home_goals != result.away_goals:
        return home if result.home_goals > result.away_goals else away
    if result.has_penalties and result.home_penalties != result.away_penalties:
        return home if result.home_penalties > result.away_penalties else away
    # Level with no decisive shootout recorded: the home side goes through.
    return home


def _two_leg_winner(first: Match, second: Match) -> Optional[Side]:
    if first.home_team_id is None or first.away_team_id is None:
        return None
    side_a = (first.home_team_id, first.home_team_name)
    side_b = (first.away_team_id, first.away_team_name)
    aggregate_a = first.result.home_goals + second.result.away_goals
    aggregate_b = first.result.away_goals + second.result.home_goals
    if aggregate_a != aggregate_b:
        return side_a if aggregate_a > aggregate_b else side_b
    shootout = second.result
    if shootout.has_penalties and shootout.home_penalties != shootout.away_penalties:
        # Side B hosts the second leg.
        return side_b if shootout.home_penalties > shootout.away_penalties else side_a
    return side_a


def _winning_side(tie: Sequence[Match]) -> Optional[Side]:
    if not tie or not all(match.is_completed for match in tie):
        return None
    if len(tie) == 1:
        return _single_match_winner(tie[0])
    first, second = sorted(tie, key=lambda m: m.leg or 1)[:2]
    return _two_leg_winner(first, second)


def resolve_winner(tie: Sequence[Match]) -> Optional[str]:
    """
    Winner of a completed tie (one match, or both legs), or None if unresolved.

    Goals decide a single match, the aggregate decides two legs (no away
    goals rule). When level, a recorded and decisive penalty shootout
    decides; otherwise the home side (the leg-1 home side) goes through.
    """
    side = _winning_side(tie)
    return side[0] if side else None


def _place_winner(matches: List[Match], indices: List[int], home_slot: bool, side: Side):
    team_id, team_name = side
    for index in indices:
        match = matches[index]
        to_home = home_slot if match.leg != 2 else not home_slot
        if to_home:
            if match.home_team_id == team_id:
                continue
            matches[index] = replace(match, home_team_id=team_id, home_team_name=team_name)
        else:
            if match.away_team_id == team_id:
                continue
            matches[index] = replace(match, away_team_id=team_id, away_team_name=team_name)
        logger.debug("Advanced %s into %s", team_id, match.id)


def advance_bracket(matches: Iterable[Match]) -> List[Match]:
    """
    Re-derive every decided tie and push its winner into the next round.

    Rounds are walked from the largest down to the semifinals; the final has
    nowhere to advance to. Byes are completed 0-0 on the way. The input is
    not modified and running this twice gives the same result as once.
    """
    updated = list(matches)
    positions = _index_pairings(updated)
    rounds = sorted({round_size for round_size, _ in positions}, reverse=True)

    for round_size in rounds:
        if round_size <= FINAL_ROUND:
            continue
        for pairing in sorted(p for r, p in positions if r == round_size):
            indices = positions[(round_size, pairing)]
            tie = [updated[i] for i in indices]

            if _is_bye(tie, round_size, pairing, positions):
                if not tie[0].is_completed:
                    updated[indices[0]] = tie[0].completed(MatchResult(home_goals=0, away_goals=0))
                side = _present_side(tie[0])
            else:
                side = _winning_side(tie)
            if side is None:
                continue

            next_indices = positions.get((round_size // 2, pairing // 2), [])
            _place_winner(updated, next_indices, pairing % 2 == 0, side)

    return updated


def record_result(matches: Iterable[Match], match_id: str, result: MatchResult) -> List[Match]:
    """
    Complete ``match_id`` with ``result`` and re-advance the bracket.

    Raises:
        MatchNotFoundError: if no match has that id.
        MatchNotReadyError: if either slot of the match is still empty.
    """
    updated = list(matches)
    for index, match in enumerate(updated):
        if match.id == match_id:
            if match.home_team_id is None or match.away_team_id is None:
                raise MatchNotReadyError(match_id)
            updated[index] = match.completed(result)
            break
    else:
        raise MatchNotFoundError(match_id)
    return advance_bracket(updated)


def get_champion(matches: Iterable[Match]) -> Optional[str]:
    """
    Winner of the final once it has been played, else None.

    A lone qualifier's final is a bye and makes it champion.
    """
    matches = list(matches)
    positions = _index_pairings(matches)
    final = [matches[i] for i in positions.get((FINAL_ROUND, 0), [])]
    if _is_bye(final, FINAL_ROUND, 0, positions) and final[0].is_completed:
        return _present_side(final[0])[0]
    return resolve_winner(final)
