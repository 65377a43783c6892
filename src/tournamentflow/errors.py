"""
Exceptions raised by the tournament engine.

Everything derives from ValueError: these are all rejections of caller input.
Partial tournament state (unplayed matches, empty slots) is never an error.
"""


class TournamentError(ValueError):
    """Base class for engine input errors."""


class InsufficientTeamsError(TournamentError):
    def __init__(self, team_count: int, minimum: int = 2):
        self.team_count = team_count
        self.minimum = minimum
        super().__init__(f"At least {minimum} teams are required, got {team_count}")


class GroupStageIncompleteError(TournamentError):
    def __init__(self, pending: int):
        self.pending = pending
        super().__init__(f"Group stage is not complete: {pending} match(es) still to play")


class MatchNotFoundError(TournamentError):
    def __init__(self, match_id: str):
        self.match_id = match_id
        super().__init__(f"Match not found: {match_id}")


class ConfigError(TournamentError):
    """Invalid tournament configuration."""


class MatchNotReadyError(TournamentError):
    def __init__(self, match_id: str):
        self.match_id = match_id
        super().__init__(f"Match {match_id} is still waiting for a team")
