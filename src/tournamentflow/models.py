"""
Data models for teams, groups, matches and standings.

Teams, groups and matches are frozen value objects. Anything that "changes"
a match (result entry, bracket advancement) builds a new instance with
dataclasses.replace, so callers never see their input mutated.
"""
import enum
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional, Tuple


class MatchStatus(enum.Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class TournamentFormat(enum.Enum):
    GROUP_KNOCKOUT = "GROUP_KNOCKOUT"
    KNOCKOUT_ONLY = "KNOCKOUT_ONLY"


class KnockoutFormat(enum.Enum):
    SINGLE = "SINGLE"
    HOME_AND_AWAY = "HOME_AND_AWAY"


class TournamentStatus(enum.Enum):
    DRAFT = "DRAFT"
    ONGOING = "ONGOING"
    COMPLETED = "COMPLETED"


GROUP_STAGE_ROUND = 0
FINAL_ROUND = 2
BYE_LABEL = "BYE"


@dataclass(frozen=True)
class Team:
    id: str
    name: str
    logo_url: Optional[str] = None


@dataclass(frozen=True)
class Cards:
    yellow: int = 0
    red: int = 0


@dataclass(frozen=True)
class MatchResult:
    home_goals: int
    away_goals: int
    home_penalties: Optional[int] = None
    away_penalties: Optional[int] = None
    home_cards: Optional[Cards] = None
    away_cards: Optional[Cards] = None

    @property
    def has_penalties(self) -> bool:
        return self.home_penalties is not None and self.away_penalties is not None


@dataclass(frozen=True)
class Match:
    """
    A group or knockout fixture.

    Knockout matches are located structurally: ``round`` is the number of
    teams that start the round, ``pairing`` the 0-based index of the tie in
    that round, and ``leg``/``sibling_id`` tie the two legs of a
    home-and-away pairing together.
    """
    id: str
    home_team_id: Optional[str]
    away_team_id: Optional[str]
    start_time: datetime
    status: MatchStatus = MatchStatus.SCHEDULED
    result: Optional[MatchResult] = None
    round: int = GROUP_STAGE_ROUND
    home_team_name: Optional[str] = None
    away_team_name: Optional[str] = None
    group_name: Optional[str] = None
    matchday: Optional[int] = None
    pairing: Optional[int] = None
    leg: Optional[int] = None
    sibling_id: Optional[str] = None

    def __post_init__(self):
        if self.round < 0:
            raise ValueError(f"Match {self.id}: round must be >= 0, got {self.round}")
        if self.status == MatchStatus.COMPLETED and self.result is None:
            raise ValueError(f"Match {self.id}: a completed match needs a result")
        if self.status != MatchStatus.COMPLETED and self.result is not None:
            raise ValueError(f"Match {self.id}: only completed matches carry a result")
        if self.leg is not None and self.leg not in (1, 2):
            raise ValueError(f"Match {self.id}: leg must be 1 or 2, got {self.leg}")

    @property
    def is_knockout(self) -> bool:
        return self.round > GROUP_STAGE_ROUND

    @property
    def is_completed(self) -> bool:
        return self.status == MatchStatus.COMPLETED

    @property
    def team_ids(self) -> Tuple[Optional[str], Optional[str]]:
        return self.home_team_id, self.away_team_id

    def completed(self, result: MatchResult) -> 'Match':
        """Return a copy of this match marked COMPLETED with ``result``."""
        return replace(self, status=MatchStatus.COMPLETED, result=result)


@dataclass(frozen=True)
class Group:
    id: str
    name: str
    team_ids: Tuple[str, ...] = ()
    matches: Tuple[Match, ...] = ()

    def with_matches(self, matches) -> 'Group':
        return replace(self, matches=tuple(matches))


@dataclass
class GroupStanding:
    """Team standing within a group. Derived, never stored."""
    team_id: str
    team_name: str
    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    goals_for: int = 0
    goals_against: int = 0
    goal_difference: int = 0
    points: int = 0
    fair_play_points: int = 0
    rank: int = 0


@dataclass(frozen=True)
class AdvancementRules:
    teams_per_group: int = 2
    # Accepted for compatibility; qualifier extraction does not consume it.
    best_third_placed: bool = False


@dataclass(frozen=True)
class TournamentConfig:
    name: str = "Tournament"
    format: TournamentFormat = TournamentFormat.GROUP_KNOCKOUT
    knockout_format: KnockoutFormat = KnockoutFormat.SINGLE
    # Accepted for the calendar layer; placeholder kick-offs do not use it.
    match_duration_minutes: int = 90
    advancement: AdvancementRules = field(default_factory=AdvancementRules)
    seed: Optional[int] = None


@dataclass(frozen=True)
class Tournament:
    id: str
    name: str
    config: TournamentConfig = field(default_factory=TournamentConfig)
    teams: Tuple[Team, ...] = ()
    groups: Tuple[Group, ...] = ()
    knockout_matches: Tuple[Match, ...] = ()
    status: TournamentStatus = TournamentStatus.DRAFT
