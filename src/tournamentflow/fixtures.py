"""
Round-robin fixture generation for the group stage.
"""
import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from .models import GROUP_STAGE_ROUND, Group, Match

logger = logging.getLogger(__name__)


def _circle_rounds(team_ids: List[Optional[str]]):
    """
    Yield each round of the circle method as a list of (home, away) slots.

    ``team_ids`` must have even length; None marks the bye slot. The first
    slot stays fixed and the last slot moves to position 1 after every round.
    """
    slots = list(team_ids)
    num_slots = len(slots)
    half = num_slots // 2
    for _ in range(num_slots - 1):
        yield [(slots[i], slots[num_slots - 1 - i]) for i in range(half)]
        slots.insert(1, slots.pop())


def generate_fixtures(group: Group, start_time: Optional[datetime] = None) -> List[Match]:
    """
    Generate a single round-robin schedule for one group.

    Odd groups get a bye slot; pairings against it are dropped, so that team
    rests for the matchday. Every pair of teams meets exactly once.

    Args:
        group: The group whose members play each other.
        start_time: Placeholder kick-off for every fixture (defaults to now, UTC).

    Returns:
        SCHEDULED matches with round 0, the group name and a 1-based matchday.
    """
    start_time = start_time or datetime.now(timezone.utc)
    slots: List[Optional[str]] = list(group.team_ids)
    if len(slots) < 2:
        return []
    if len(slots) % 2 != 0:
        slots.append(None)

    matches = []
    for round_index, pairings in enumerate(_circle_rounds(slots)):
        for position, (home, away) in enumerate(pairings):
            if home is None or away is None:
                continue
            matches.append(Match(
                id=f"match-{group.id}-{round_index}-{position}",
                home_team_id=home,
                away_team_id=away,
                start_time=start_time,
                round=GROUP_STAGE_ROUND,
                group_name=group.name,
                matchday=round_index + 1,
            ))

    logger.debug("Group %s: %d teams, %d fixtures", group.name, len(group.team_ids), len(matches))
    return matches


def generate_group_stage(groups: Iterable[Group], start_time: Optional[datetime] = None) -> List[Group]:
    """Return the groups with their round-robin fixtures attached."""
    start_time = start_time or datetime.now(timezone.utc)
    return [group.with_matches(generate_fixtures(group, start_time)) for group in groups]


def is_group_stage_complete(groups: Iterable[Group]) -> bool:
    """True once every group match has been played."""
    return all(match.is_completed for group in groups for match in group.matches)


def pending_group_matches(groups: Iterable[Group]) -> int:
    return sum(1 for group in groups for match in group.matches if not match.is_completed)
