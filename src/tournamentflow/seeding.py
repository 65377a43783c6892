"""
Knockout bracket seeding from group standings.

Qualifiers are taken from the top of each group, the bracket is padded to a
power of two with byes for the best-placed qualifiers, the rest are paired
group winners against runners-up from other groups, and the pairings are laid
out so that two teams from the same group end up in opposite halves.
"""
import logging
import random
from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from .advancement import advance_bracket
from .models import (
    BYE_LABEL,
    FINAL_ROUND,
    GroupStanding,
    KnockoutFormat,
    Match,
    MatchResult,
    MatchStatus,
    Team,
    TournamentConfig,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Qualifier:
    """A team that finished inside the advancement places of its group."""
    team_id: str
    team_name: str
    rank: int
    group_index: int
    points: int = 0
    goal_difference: int = 0
    goals_for: int = 0


@dataclass(frozen=True)
class BracketPairing:
    """A first-round tie. No away qualifier means the home side has a bye."""
    home: Qualifier
    away: Optional[Qualifier] = None

    @property
    def is_bye(self) -> bool:
        return self.away is None

    @property
    def qualifiers(self) -> List[Qualifier]:
        return [q for q in (self.home, self.away) if q is not None]


def get_round_name(teams_in_round: int) -> str:
    """Get the name of a round based on number of teams."""
    if teams_in_round == 2:
        return "Final"
    elif teams_in_round == 4:
        return "Semifinal"
    elif teams_in_round == 8:
        return "Quarterfinal"
    else:
        return f"Round of {teams_in_round}"


def calculate_bracket_size(num_teams: int) -> int:
    """Smallest power of two that holds ``num_teams`` (never below a final)."""
    if num_teams <= 0:
        return 0
    size = FINAL_ROUND
    while size < num_teams:
        size *= 2
    return size


def calculate_byes(num_teams: int) -> int:
    """Calculate number of byes needed."""
    return calculate_bracket_size(num_teams) - num_teams


def extract_qualifiers(standings: Sequence[Sequence[GroupStanding]], teams_per_group: int = 2) -> List[Qualifier]:
    """
    Take the top ``teams_per_group`` of every group.

    A team id is only qualified once; later duplicates are dropped.
    """
    qualifiers = []
    seen = set()
    for group_index, group_standings in enumerate(standings):
        ranked = sorted(enumerate(group_standings), key=lambda item: (item[1].rank or item[0] + 1, item[0]))
        for position, standing in ranked[:teams_per_group]:
            if standing.team_id in seen:
                logger.warning("Team %s qualified more than once, ignoring duplicate from group %d",
                               standing.team_id, group_index)
                continue
            seen.add(standing.team_id)
            qualifiers.append(Qualifier(
                team_id=standing.team_id,
                team_name=standing.team_name,
                rank=standing.rank or position + 1,
                group_index=group_index,
                points=standing.points,
                goal_difference=standing.goal_difference,
                goals_for=standing.goals_for,
            ))
    return qualifiers


def _seeding_key(qualifier: Qualifier):
    # Best group finish first, then the strongest group record.
    return (
        qualifier.rank,
        -qualifier.points,
        -qualifier.goal_difference,
        -qualifier.goals_for,
        qualifier.group_index,
        qualifier.team_id,
    )


def _pair_balanced(qualifiers: List[Qualifier], rng: random.Random) -> Optional[List[BracketPairing]]:
    """
    Red/blue split for a full bracket with exactly a winner and a runner-up
    per group. Returns None when the field does not have that shape.
    """
    by_group = defaultdict(dict)
    for qualifier in qualifiers:
        by_group[qualifier.group_index][qualifier.rank] = qualifier
    group_indices = sorted(by_group)
    if len(group_indices) < 2 or len(group_indices) % 2 != 0:
        return None
    if any(sorted(by_group[g]) != [1, 2] for g in group_indices):
        return None
    if sum(len(by_group[g]) for g in group_indices) != len(qualifiers):
        return None

    rng.shuffle(group_indices)
    half = len(group_indices) // 2
    red, blue = group_indices[:half], group_indices[half:]

    pairings = []
    for red_group, blue_group in zip(red, blue):
        pairings.append(BracketPairing(by_group[red_group][1], by_group[blue_group][2]))
        pairings.append(BracketPairing(by_group[blue_group][1], by_group[red_group][2]))
    return pairings


def _pick_opponent(home: Qualifier, remaining: List[Qualifier]) -> Optional[int]:
    """Index of the weakest valid opponent: other group, preferably other rank."""
    candidates = range(len(remaining) - 1, -1, -1)
    for index in candidates:
        other = remaining[index]
        if other.group_index != home.group_index and other.rank != home.rank:
            return index
    for index in candidates:
        if remaining[index].group_index != home.group_index:
            return index
    return None


def _swap_repair(home: Qualifier, remaining: List[Qualifier], pairings: List[BracketPairing]) -> bool:
    """
    Everyone left is from ``home``'s group: trade the weakest of them for the
    away side of an existing pairing that can take them.
    """
    candidate = remaining[-1]
    for index in range(len(pairings) - 1, -1, -1):
        pairing = pairings[index]
        if pairing.is_bye:
            continue
        if pairing.away.group_index != home.group_index and pairing.home.group_index != candidate.group_index:
            pairings[index] = BracketPairing(pairing.home, candidate)
            remaining.pop()
            pairings.append(BracketPairing(home, pairing.away))
            return True
    return False


def _pair_greedy(qualifiers: List[Qualifier]) -> List[BracketPairing]:
    remaining = sorted(qualifiers, key=_seeding_key)
    pairings: List[BracketPairing] = []
    while remaining:
        home = remaining.pop(0)
        if not remaining:
            pairings.append(BracketPairing(home))
            break
        index = _pick_opponent(home, remaining)
        if index is None:
            if _swap_repair(home, remaining, pairings):
                continue
            logger.warning("No opponent outside group %d for %s, allowing a same-group tie",
                           home.group_index, home.team_id)
            index = len(remaining) - 1
        pairings.append(BracketPairing(home, remaining.pop(index)))
    return pairings


def _conflicts(items: List[BracketPairing]) -> int:
    """Number of same-group team pairs inside ``items``."""
    counts = Counter(q.group_index for item in items for q in item.qualifiers)
    return sum(count * (count - 1) // 2 for count in counts.values())


def _improve_split(left: List[BracketPairing], right: List[BracketPairing]):
    best = _conflicts(left) + _conflicts(right)
    improved = True
    while improved and best > 0:
        improved = False
        for i in range(len(left)):
            for j in range(len(right)):
                left[i], right[j] = right[j], left[i]
                score = _conflicts(left) + _conflicts(right)
                if score < best:
                    best = score
                    improved = True
                    break
                left[i], right[j] = right[j], left[i]
            if improved:
                break
    return left, right


def _split_in_half(items: List[BracketPairing], rng: random.Random):
    half_size = len(items) // 2
    left: List[BracketPairing] = []
    right: List[BracketPairing] = []
    left_groups: Counter = Counter()
    right_groups: Counter = Counter()

    # Two-team pairings constrain more, place them before byes.
    for item in sorted(items, key=lambda p: -len(p.qualifiers)):
        groups = [q.group_index for q in item.qualifiers]
        left_conflicts = sum(left_groups[g] for g in groups)
        right_conflicts = sum(right_groups[g] for g in groups)
        if len(left) >= half_size:
            go_left = False
        elif len(right) >= half_size:
            go_left = True
        elif left_conflicts != right_conflicts:
            go_left = left_conflicts < right_conflicts
        else:
            go_left = rng.random() < 0.5
        if go_left:
            left.append(item)
            left_groups.update(groups)
        else:
            right.append(item)
            right_groups.update(groups)

    return _improve_split(left, right)


def place_pairings(pairings: List[BracketPairing], rng: random.Random) -> List[BracketPairing]:
    """
    Order pairings into bracket positions.

    Positions are split recursively into halves, each split minimising the
    same-group teams that share a half, so group-mates meet as late as the
    bracket allows.
    """
    if len(pairings) <= 1:
        return list(pairings)
    left, right = _split_in_half(list(pairings), rng)
    if _conflicts(left) or _conflicts(right):
        logger.debug("Could not fully separate groups across %d positions", len(pairings))
    return place_pairings(left, rng) + place_pairings(right, rng)


def _halves_conflict(placed: List[BracketPairing]) -> bool:
    if len(placed) < 2:
        return False
    half = len(placed) // 2
    return _conflicts(placed[:half]) + _conflicts(placed[half:]) > 0


def _split_qualifiers(ordered: List[Qualifier], bye_ids, half_slots: int, rng: random.Random):
    """
    Put the two qualifiers of every group on opposite halves, filling each
    half with exactly ``half_slots`` slots (a bye holder takes two).

    Sides are chosen group by group with a backtracking search over the
    running slot count of the first half, so a balanced split is found
    whenever one exists.

    Returns None when a group has more than two qualifiers or no balanced
    split exists.
    """
    by_group = defaultdict(list)
    for qualifier in ordered:
        by_group[qualifier.group_index].append(qualifier)
    groups = list(by_group.values())
    if any(len(members) > 2 for members in groups):
        return None

    def weight(members):
        return sum(2 if q.team_id in bye_ids else 1 for q in members)

    choices = [None] * len(groups)
    dead_ends = set()

    def search(index, left_load, right_load):
        if left_load > half_slots or right_load > half_slots:
            return False
        if index == len(groups):
            return left_load == right_load == half_slots
        if (index, left_load) in dead_ends:
            return False
        members = groups[index]
        if len(members) == 2:
            options = [([members[0]], [members[1]]), ([members[1]], [members[0]])]
        else:
            options = [(members, []), ([], members)]
        rng.shuffle(options)
        for left, right in options:
            choices[index] = (left, right)
            if search(index + 1, left_load + weight(left), right_load + weight(right)):
                return True
        dead_ends.add((index, left_load))
        return False

    if not search(0, 0, 0):
        return None
    sides = ([], [])
    for left, right in choices:
        sides[0].extend(left)
        sides[1].extend(right)
    return sides


def _pair_by_halves(ordered: List[Qualifier], bye_count: int, bracket_size: int,
                    rng: random.Random) -> Optional[List[BracketPairing]]:
    """Split group-mates across halves first, then pair inside each half."""
    if bracket_size < 4:
        return None
    bye_ids = {q.team_id for q in ordered[:bye_count]}
    sides = _split_qualifiers(ordered, bye_ids, bracket_size // 2, rng)
    if sides is None:
        return None

    placed = []
    for side in sides:
        side = sorted(side, key=_seeding_key)
        byes = [BracketPairing(q) for q in side if q.team_id in bye_ids]
        pairings = _pair_greedy([q for q in side if q.team_id not in bye_ids])
        placed.extend(place_pairings(pairings + byes, rng))
    return placed


def _placeholder_label(round_size: int, feeder_pairing: int) -> str:
    return f"Winner {get_round_name(round_size * 2)} {feeder_pairing + 1}"


def _tie_matches(round_size: int, pairing: int, home_id: Optional[str], away_id: Optional[str],
                 home_name: Optional[str], away_name: Optional[str],
                 knockout_format: KnockoutFormat, start_time: datetime) -> List[Match]:
    """One match, or two legs with swapped sides and sibling references."""
    match_id = f"ko-r{round_size}-p{pairing}"
    two_legged = knockout_format == KnockoutFormat.HOME_AND_AWAY
    if not two_legged or round_size == FINAL_ROUND:
        return [Match(
            id=match_id,
            home_team_id=home_id,
            away_team_id=away_id,
            home_team_name=home_name,
            away_team_name=away_name,
            start_time=start_time,
            round=round_size,
            pairing=pairing,
            # A two-legged competition still plays a one-off final.
            leg=1 if two_legged else None,
        )]

    first_id, second_id = f"{match_id}-l1", f"{match_id}-l2"
    return [
        Match(
            id=first_id,
            home_team_id=home_id,
            away_team_id=away_id,
            home_team_name=home_name,
            away_team_name=away_name,
            start_time=start_time,
            round=round_size,
            pairing=pairing,
            leg=1,
            sibling_id=second_id,
        ),
        Match(
            id=second_id,
            home_team_id=away_id,
            away_team_id=home_id,
            home_team_name=away_name,
            away_team_name=home_name,
            start_time=start_time,
            round=round_size,
            pairing=pairing,
            leg=2,
            sibling_id=first_id,
        ),
    ]


def _emit_matches(placed: List[BracketPairing], bracket_size: int,
                  knockout_format: KnockoutFormat, start_time: datetime) -> List[Match]:
    matches = []
    for pairing_index, pairing in enumerate(placed):
        if pairing.is_bye:
            matches.append(Match(
                id=f"ko-r{bracket_size}-p{pairing_index}",
                home_team_id=pairing.home.team_id,
                away_team_id=None,
                home_team_name=pairing.home.team_name,
                away_team_name=BYE_LABEL,
                start_time=start_time,
                status=MatchStatus.COMPLETED,
                result=MatchResult(home_goals=0, away_goals=0),
                round=bracket_size,
                pairing=pairing_index,
            ))
            continue
        matches.extend(_tie_matches(
            bracket_size, pairing_index,
            pairing.home.team_id, pairing.away.team_id,
            pairing.home.team_name, pairing.away.team_name,
            knockout_format, start_time,
        ))

    round_size = bracket_size // 2
    while round_size >= FINAL_ROUND:
        for pairing_index in range(round_size // 2):
            matches.extend(_tie_matches(
                round_size, pairing_index, None, None,
                _placeholder_label(round_size, pairing_index * 2),
                _placeholder_label(round_size, pairing_index * 2 + 1),
                knockout_format, start_time,
            ))
        round_size //= 2
    return matches


def build_bracket(qualifiers: List[Qualifier], knockout_format: KnockoutFormat = KnockoutFormat.SINGLE,
                  rng: Optional[random.Random] = None, start_time: Optional[datetime] = None) -> List[Match]:
    """
    Build every knockout match for ``qualifiers``, with byes already advanced.

    Returns an empty list when there is nobody to seed.
    """
    if not qualifiers:
        return []
    rng = rng or random.Random()
    start_time = start_time or datetime.now(timezone.utc)

    bracket_size = calculate_bracket_size(len(qualifiers))
    bye_count = bracket_size - len(qualifiers)
    ordered = sorted(qualifiers, key=_seeding_key)
    byes = [BracketPairing(q) for q in ordered[:bye_count]]
    pool = ordered[bye_count:]

    pairings = _pair_balanced(pool, rng) if bye_count == 0 else None
    if pairings is None:
        pairings = _pair_greedy(pool)

    placed = place_pairings(pairings + byes, rng)
    if _halves_conflict(placed):
        regrouped = _pair_by_halves(ordered, bye_count, bracket_size, rng)
        if regrouped is not None:
            logger.debug("Re-paired %d qualifiers half by half to separate groups", len(qualifiers))
            placed = regrouped
        else:
            logger.warning("Group-mates share a bracket half in a bracket of %d", bracket_size)
    logger.debug("Bracket of %d for %d qualifiers (%d byes, %s)",
                 bracket_size, len(qualifiers), bye_count, knockout_format.value)
    return advance_bracket(_emit_matches(placed, bracket_size, knockout_format, start_time))


def generate_bracket(standings: Sequence[Sequence[GroupStanding]], config: Optional[TournamentConfig] = None,
                     rng: Optional[random.Random] = None, start_time: Optional[datetime] = None) -> List[Match]:
    """
    Generate the knockout stage from ranked group standings.

    Args:
        standings: One ranked standings list per group.
        config: Supplies teams per group and the knockout format.
        rng: Random source for side splits and placement ties; defaults to
            ``random.Random(config.seed)``.
        start_time: Placeholder kick-off for every match.
    """
    config = config or TournamentConfig()
    rng = rng or random.Random(config.seed)
    qualifiers = extract_qualifiers(standings, config.advancement.teams_per_group)
    return build_bracket(qualifiers, config.knockout_format, rng, start_time)


def seed_knockout_only(teams: Sequence[Team], config: Optional[TournamentConfig] = None,
                       rng: Optional[random.Random] = None, start_time: Optional[datetime] = None) -> List[Match]:
    """Seed a straight knockout: every team is a group winner of its own, in entry order."""
    config = config or TournamentConfig()
    rng = rng or random.Random(config.seed)
    qualifiers = [
        Qualifier(team_id=team.id, team_name=team.name, rank=1, group_index=index)
        for index, team in enumerate(teams)
    ]
    return build_bracket(qualifiers, config.knockout_format, rng, start_time)
