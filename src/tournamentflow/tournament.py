"""
Tournament lifecycle: creation, the move to the knockout stage and result entry.

Every function takes a Tournament and returns a new one; nothing is stored.
"""
import logging
import random
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional, Sequence

from .advancement import get_champion, record_result
from .errors import GroupStageIncompleteError, InsufficientTeamsError, MatchNotFoundError, TournamentError
from .fixtures import generate_group_stage, pending_group_matches
from .groups import MIN_TEAMS, generate_groups
from .models import MatchResult, Team, Tournament, TournamentConfig, TournamentFormat, TournamentStatus
from .seeding import generate_bracket, seed_knockout_only
from .standings import calculate_group_standings

logger = logging.getLogger(__name__)

PHASE_SETUP = 'setup'
PHASE_GROUP_STAGE = 'group_stage'
PHASE_KNOCKOUT = 'knockout'
PHASE_COMPLETE = 'complete'


def create_tournament(name: str, teams: Sequence[Team], config: Optional[TournamentConfig] = None,
                      start_time: Optional[datetime] = None, rng: Optional[random.Random] = None) -> Tournament:
    """
    Create a tournament ready to play.

    GROUP_KNOCKOUT tournaments get their groups and round-robin fixtures;
    KNOCKOUT_ONLY tournaments are seeded straight into a bracket.

    Raises:
        InsufficientTeamsError: if fewer than 2 teams are entered.
    """
    config = config or TournamentConfig(name=name)
    if len(teams) < MIN_TEAMS:
        raise InsufficientTeamsError(len(teams), MIN_TEAMS)
    if len({team.id for team in teams}) != len(teams):
        raise TournamentError("Team ids must be unique")
    start_time = start_time or datetime.now(timezone.utc)

    tournament = Tournament(
        id=str(uuid.uuid4()),
        name=name,
        config=config,
        teams=tuple(teams),
        status=TournamentStatus.ONGOING,
    )
    if config.format == TournamentFormat.KNOCKOUT_ONLY:
        bracket = seed_knockout_only(teams, config, rng or random.Random(config.seed), start_time)
        logger.info("Created knockout tournament %s with %d teams", name, len(teams))
        return replace(tournament, knockout_matches=tuple(bracket))

    groups = generate_group_stage(generate_groups(teams), start_time)
    logger.info("Created tournament %s with %d teams in %d group(s)", name, len(teams), len(groups))
    return replace(tournament, groups=tuple(groups))


def start_knockout_stage(tournament: Tournament, rng: Optional[random.Random] = None,
                         start_time: Optional[datetime] = None) -> Tournament:
    """
    Seed the knockout bracket from the final group standings.

    Raises:
        GroupStageIncompleteError: while group matches are still to be played.
        TournamentError: if the bracket already exists.
    """
    if tournament.knockout_matches:
        raise TournamentError("Knockout stage has already started")
    pending = pending_group_matches(tournament.groups)
    if pending:
        raise GroupStageIncompleteError(pending)

    standings = calculate_group_standings(tournament.teams, tournament.groups)
    bracket = generate_bracket(standings, tournament.config, rng, start_time)
    logger.info("Tournament %s: knockout stage seeded with %d matches", tournament.name, len(bracket))
    return _with_status(replace(tournament, knockout_matches=tuple(bracket)))


def record_match_result(tournament: Tournament, match_id: str, result: MatchResult) -> Tournament:
    """
    Enter a result for a group or knockout match.

    Knockout results re-advance the whole bracket.

    Raises:
        MatchNotFoundError: if the match is in neither stage.
        MatchNotReadyError: if the knockout match is still waiting for a team.
    """
    if any(match.id == match_id for match in tournament.knockout_matches):
        bracket = record_result(tournament.knockout_matches, match_id, result)
        return _with_status(replace(tournament, knockout_matches=tuple(bracket)))

    groups = list(tournament.groups)
    for index, group in enumerate(groups):
        if any(match.id == match_id for match in group.matches):
            groups[index] = group.with_matches(
                match.completed(result) if match.id == match_id else match for match in group.matches
            )
            return replace(tournament, groups=tuple(groups))
    raise MatchNotFoundError(match_id)


def _with_status(tournament: Tournament) -> Tournament:
    if get_champion(tournament.knockout_matches) is not None:
        return replace(tournament, status=TournamentStatus.COMPLETED)
    return tournament


def determine_phase(tournament: Tournament) -> str:
    """
    Current phase of the tournament.

    Returns:
        One of: 'setup', 'group_stage', 'knockout', 'complete'.
    """
    if get_champion(tournament.knockout_matches) is not None:
        return PHASE_COMPLETE
    if tournament.knockout_matches:
        return PHASE_KNOCKOUT
    if tournament.groups and any(group.matches for group in tournament.groups):
        return PHASE_GROUP_STAGE
    return PHASE_SETUP
