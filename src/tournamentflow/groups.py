"""
Group allocation: partitions the entered teams into balanced groups.
"""
import logging
import math
from typing import List, Sequence

from .errors import InsufficientTeamsError
from .models import Group, Team

logger = logging.getLogger(__name__)

MIN_TEAMS = 2


def group_count(num_teams: int) -> int:
    """
    Number of groups for a field of ``num_teams``.

    1 group below 6 teams, 2 groups for 6-11, otherwise about 4 teams per group.
    """
    if num_teams < 6:
        return 1
    if num_teams <= 11:
        return 2
    return math.ceil(num_teams / 4)


def group_name(index: int) -> str:
    """A, B, ..., Z, AA, AB, ... for 0, 1, ..., 25, 26, 27, ..."""
    name = ''
    index += 1
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        name = chr(ord('A') + remainder) + name
    return name


def generate_groups(teams: Sequence[Team]) -> List[Group]:
    """
    Distribute teams into groups.

    The team at input position i goes to group ``i mod numGroups``, so
    7 teams give Group A (4) and Group B (3).

    Raises:
        InsufficientTeamsError: if fewer than 2 teams are supplied.
    """
    if len(teams) < MIN_TEAMS:
        raise InsufficientTeamsError(len(teams), MIN_TEAMS)

    num_groups = group_count(len(teams))
    members: List[List[str]] = [[] for _ in range(num_groups)]
    for index, team in enumerate(teams):
        members[index % num_groups].append(team.id)

    groups = [
        Group(id=f"group-{i}", name=group_name(i), team_ids=tuple(team_ids))
        for i, team_ids in enumerate(members)
    ]
    logger.debug("Allocated %d teams into %d group(s): %s",
                 len(teams), num_groups, [len(g.team_ids) for g in groups])
    return groups
