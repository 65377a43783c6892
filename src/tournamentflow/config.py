"""
Tournament configuration: defaults, YAML loading and validation.
"""
import logging
import os
from typing import Dict, Optional

import yaml

from .errors import ConfigError
from .models import AdvancementRules, KnockoutFormat, TournamentConfig, TournamentFormat

logger = logging.getLogger(__name__)

# Request payloads arrive with the collaborator's camelCase names.
_KEY_ALIASES = {
    'knockoutFormat': 'knockout_format',
    'matchDurationMinutes': 'match_duration_minutes',
    'teamsPerGroup': 'teams_per_group',
    'bestThirdPlaced': 'best_third_placed',
}


def get_default_config() -> Dict:
    """Return default configuration."""
    return {
        'name': 'Tournament',
        'format': TournamentFormat.GROUP_KNOCKOUT.value,
        'knockout_format': KnockoutFormat.SINGLE.value,
        'match_duration_minutes': 90,
        'advancement': {
            'teams_per_group': 2,
            'best_third_placed': False,
        },
        'seed': None,
    }


def _normalize_keys(data: Dict) -> Dict:
    normalized = {}
    for key, value in data.items():
        key = _KEY_ALIASES.get(key, key)
        if isinstance(value, dict):
            value = _normalize_keys(value)
        normalized[key] = value
    return normalized


def _parse_enum(enum_cls, value, key):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).upper())
    except ValueError:
        allowed = ', '.join(member.value for member in enum_cls)
        raise ConfigError(f"Invalid {key} '{value}', expected one of: {allowed}") from None


def parse_config(data: Optional[Dict] = None) -> TournamentConfig:
    """
    Build a TournamentConfig from a plain dict, filling gaps from the defaults.

    Raises:
        ConfigError: for unknown format names or a non-positive teams_per_group.
    """
    merged = get_default_config()
    if data:
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration must be a mapping, got {type(data).__name__}")
        data = _normalize_keys(data)
        overrides = data.get('advancement') or {}
        if not isinstance(overrides, dict):
            raise ConfigError("advancement must be a mapping")
        advancement = dict(merged['advancement'])
        advancement.update(overrides)
        merged.update(data)
        merged['advancement'] = advancement

    advancement = merged['advancement']
    try:
        teams_per_group = int(advancement.get('teams_per_group', 2))
        match_duration = int(merged['match_duration_minutes'])
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid numeric configuration value: {e}") from None
    if teams_per_group < 1:
        raise ConfigError(f"teams_per_group must be at least 1, got {teams_per_group}")
    if match_duration < 1:
        raise ConfigError(f"match_duration_minutes must be positive, got {match_duration}")

    seed = merged.get('seed')
    if seed is not None:
        try:
            seed = int(seed)
        except (TypeError, ValueError):
            raise ConfigError(f"seed must be an integer, got {seed!r}") from None

    return TournamentConfig(
        name=str(merged.get('name') or 'Tournament'),
        format=_parse_enum(TournamentFormat, merged['format'], 'format'),
        knockout_format=_parse_enum(KnockoutFormat, merged['knockout_format'], 'knockout_format'),
        match_duration_minutes=match_duration,
        advancement=AdvancementRules(
            teams_per_group=teams_per_group,
            best_third_placed=bool(advancement.get('best_third_placed', False)),
        ),
        seed=seed,
    )


def load_config(path: str) -> TournamentConfig:
    """Load configuration from a YAML file, merging with defaults."""
    if not os.path.exists(path):
        logger.debug("No configuration at %s, using defaults", path)
        return parse_config()
    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse {path}: {e}") from e
    return parse_config(data)


def config_to_dict(config: TournamentConfig) -> Dict:
    return {
        'name': config.name,
        'format': config.format.value,
        'knockout_format': config.knockout_format.value,
        'match_duration_minutes': config.match_duration_minutes,
        'advancement': {
            'teams_per_group': config.advancement.teams_per_group,
            'best_third_placed': config.advancement.best_third_placed,
        },
        'seed': config.seed,
    }
