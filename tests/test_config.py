"""
Tests for configuration defaults, YAML loading and validation.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from tournamentflow.config import config_to_dict, get_default_config, load_config, parse_config
from tournamentflow.errors import ConfigError
from tournamentflow.models import KnockoutFormat, TournamentFormat


class TestParseConfig:
    """Tests for parse_config."""

    def test_defaults(self):
        config = parse_config()
        assert config.name == "Tournament"
        assert config.format == TournamentFormat.GROUP_KNOCKOUT
        assert config.knockout_format == KnockoutFormat.SINGLE
        assert config.match_duration_minutes == 90
        assert config.advancement.teams_per_group == 2
        assert config.advancement.best_third_placed is False
        assert config.seed is None

    def test_overrides_merge_with_defaults(self):
        config = parse_config({'knockout_format': 'home_and_away', 'advancement': {'teams_per_group': 1}})
        assert config.knockout_format == KnockoutFormat.HOME_AND_AWAY
        assert config.advancement.teams_per_group == 1
        assert config.format == TournamentFormat.GROUP_KNOCKOUT

    def test_camel_case_keys(self):
        config = parse_config({
            'knockoutFormat': 'HOME_AND_AWAY',
            'matchDurationMinutes': 40,
            'advancement': {'teamsPerGroup': 3, 'bestThirdPlaced': True},
        })
        assert config.knockout_format == KnockoutFormat.HOME_AND_AWAY
        assert config.match_duration_minutes == 40
        assert config.advancement.teams_per_group == 3
        assert config.advancement.best_third_placed is True

    def test_seed_is_an_int(self):
        assert parse_config({'seed': '42'}).seed == 42

    @pytest.mark.parametrize("data", [
        {'format': 'LEAGUE'},
        {'knockout_format': 'BEST_OF_THREE'},
        {'advancement': {'teams_per_group': 0}},
        {'advancement': 'top two'},
        {'match_duration_minutes': 'long'},
        {'match_duration_minutes': 0},
        {'seed': 'abc'},
        ['not', 'a', 'mapping'],
    ])
    def test_invalid_values(self, data):
        with pytest.raises(ConfigError):
            parse_config(data)

    def test_round_trip_through_dict(self):
        config = parse_config({'name': 'Cup', 'seed': 3, 'format': 'KNOCKOUT_ONLY'})
        assert parse_config(config_to_dict(config)) == config

    def test_default_dict_is_fresh(self):
        defaults = get_default_config()
        defaults['advancement']['teams_per_group'] = 5
        assert get_default_config()['advancement']['teams_per_group'] == 2


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_file_uses_defaults(self, tmp_path):
        assert load_config(str(tmp_path / "nope.yaml")) == parse_config()

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "tournament.yaml"
        path.write_text("")
        assert load_config(str(path)) == parse_config()

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "tournament.yaml"
        path.write_text(
            "name: Winter Cup\n"
            "format: KNOCKOUT_ONLY\n"
            "advancement:\n"
            "  teams_per_group: 1\n"
            "seed: 9\n"
        )
        config = load_config(str(path))
        assert config.name == "Winter Cup"
        assert config.format == TournamentFormat.KNOCKOUT_ONLY
        assert config.advancement.teams_per_group == 1
        assert config.seed == 9

    def test_broken_yaml(self, tmp_path):
        path = tmp_path / "tournament.yaml"
        path.write_text("name: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_shipped_config(self):
        path = os.path.join(os.path.dirname(__file__), '..', 'data', 'tournament.yaml')
        config = load_config(path)
        assert config.name == "Summer Cup 2026"
        assert config.seed == 2026
