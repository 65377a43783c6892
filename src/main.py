# Entry point: builds a tournament from YAML data files and prints the group stage

import logging
import os
import sys

import yaml

from tournamentflow.config import load_config
from tournamentflow.errors import TournamentError
from tournamentflow.models import Team, TournamentFormat
from tournamentflow.seeding import get_round_name
from tournamentflow.tournament import create_tournament


def load_teams(file_path):
    """
    Load teams from YAML.

    Accepts a list of names or of {id, name, logo_url} mappings, either at the
    top level or under a ``teams`` key. Bare names get ids t1, t2, ...
    """
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file) or []
    if isinstance(data, dict):
        data = data.get('teams', [])

    teams = []
    for index, entry in enumerate(data):
        if isinstance(entry, dict):
            teams.append(Team(id=str(entry.get('id', f't{index + 1}')), name=str(entry['name']),
                              logo_url=entry.get('logo_url')))
        else:
            teams.append(Team(id=f't{index + 1}', name=str(entry)))
    return teams


def print_tournament(tournament):
    names = {team.id: team.name for team in tournament.teams}
    first_group = True
    for group in tournament.groups:
        if not first_group:
            print()
        print(f"# Group {group.name}: {', '.join(names[t] for t in group.team_ids)}")
        for match in group.matches:
            print(f"  Matchday {match.matchday}: {names[match.home_team_id]} vs {names[match.away_team_id]}")
        first_group = False

    for match in tournament.knockout_matches:
        home = names.get(match.home_team_id) or match.home_team_name or 'TBD'
        away = names.get(match.away_team_id) or match.away_team_name or 'TBD'
        leg = f" (leg {match.leg})" if match.leg else ''
        print(f"  {get_round_name(match.round)} {match.pairing + 1}{leg}: {home} vs {away}")


def main():
    script_dir = os.path.dirname(__file__)
    base_dir = os.path.dirname(script_dir)

    teams_file = sys.argv[1] if len(sys.argv) > 1 else os.path.join(base_dir, 'data', 'teams.yaml')
    config_file = sys.argv[2] if len(sys.argv) > 2 else os.path.join(base_dir, 'data', 'tournament.yaml')

    logging.basicConfig(level=os.environ.get('TOURNAMENTFLOW_LOG_LEVEL', 'WARNING'))

    teams = load_teams(teams_file)
    if not teams:
        print(f"No teams loaded. Check {teams_file}")
        return 1

    try:
        config = load_config(config_file)
        tournament = create_tournament(config.name, teams, config)
    except TournamentError as e:
        print(f"Cannot create tournament: {e}")
        return 1
    kind = 'knockout' if config.format == TournamentFormat.KNOCKOUT_ONLY else 'group stage'
    print(f"{tournament.name}: {len(teams)} teams, {kind}\n")
    print_tournament(tournament)
    return 0


if __name__ == '__main__':
    sys.exit(main())
