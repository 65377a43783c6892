"""
Flask web application exposing the tournament engine as JSON endpoints.

Every endpoint is stateless: the caller sends the full data it holds and gets
back the engine's output to store or render.
"""
import random
from functools import wraps

from flask import Flask, jsonify, request

from tournamentflow.advancement import advance_bracket, get_champion
from tournamentflow.config import parse_config
from tournamentflow.errors import TournamentError
from tournamentflow.fixtures import generate_fixtures
from tournamentflow.groups import generate_groups
from tournamentflow.seeding import generate_bracket
from tournamentflow.serialization import (
    group_from_dict,
    group_to_dict,
    match_from_dict,
    match_to_dict,
    parse_datetime,
    result_from_dict,
    standing_from_dict,
    standing_to_dict,
    team_from_dict,
    tournament_from_dict,
    tournament_to_dict,
)
from tournamentflow.standings import calculate_standings
from tournamentflow.tournament import create_tournament, determine_phase, record_match_result, start_knockout_stage

app = Flask(__name__)


def json_endpoint(f):
    """Parse the JSON body and turn engine/payload errors into 400 responses."""
    @wraps(f)
    def decorated(*args, **kwargs):
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return jsonify({'error': 'Expected a JSON object body'}), 400
        try:
            return f(payload, *args, **kwargs)
        except TournamentError as e:
            app.logger.info(f'{request.path} rejected: {e}')
            return jsonify({'error': str(e)}), 400
        except (KeyError, TypeError, ValueError) as e:
            app.logger.warning(f'{request.path} malformed payload: {e!r}')
            return jsonify({'error': f'Malformed payload: {e}'}), 400
    return decorated


def _rng(payload, config=None):
    seed = payload.get('seed', config.seed if config else None)
    return random.Random(seed)


def _tournament_response(tournament):
    return jsonify({'tournament': tournament_to_dict(tournament), 'phase': determine_phase(tournament)})


@app.route('/api/groups', methods=['POST'])
@json_endpoint
def api_groups(payload):
    teams = [team_from_dict(t) for t in payload['teams']]
    return jsonify({'groups': [group_to_dict(g) for g in generate_groups(teams)]})


@app.route('/api/fixtures', methods=['POST'])
@json_endpoint
def api_fixtures(payload):
    group = group_from_dict(payload['group'])
    start_time = parse_datetime(payload.get('start_time'))
    return jsonify({'matches': [match_to_dict(m) for m in generate_fixtures(group, start_time)]})


@app.route('/api/standings', methods=['POST'])
@json_endpoint
def api_standings(payload):
    teams = [team_from_dict(t) for t in payload['teams']]
    matches = [match_from_dict(m) for m in payload.get('matches', [])]
    return jsonify({'standings': [standing_to_dict(s) for s in calculate_standings(teams, matches)]})


@app.route('/api/bracket', methods=['POST'])
@json_endpoint
def api_bracket(payload):
    config = parse_config(payload.get('config'))
    standings = [[standing_from_dict(s) for s in group] for group in payload['standings']]
    start_time = parse_datetime(payload.get('start_time'))
    matches = generate_bracket(standings, config, _rng(payload, config), start_time)
    app.logger.debug(f'Generated bracket with {len(matches)} matches')
    return jsonify({'matches': [match_to_dict(m) for m in matches]})


@app.route('/api/advance', methods=['POST'])
@json_endpoint
def api_advance(payload):
    matches = advance_bracket(match_from_dict(m) for m in payload['matches'])
    return jsonify({'matches': [match_to_dict(m) for m in matches], 'champion': get_champion(matches)})


@app.route('/api/tournaments', methods=['POST'])
@json_endpoint
def api_create_tournament(payload):
    name = str(payload['name']).strip()
    if not name:
        return jsonify({'error': 'Tournament name is required'}), 400
    config_data = dict(payload.get('config') or {})
    config_data.setdefault('name', name)
    config = parse_config(config_data)
    teams = [team_from_dict(t) for t in payload['teams']]
    tournament = create_tournament(name, teams, config, rng=_rng(payload, config))
    app.logger.info(f'Created tournament {name} with {len(teams)} teams')
    return _tournament_response(tournament), 201


@app.route('/api/tournaments/knockout', methods=['POST'])
@json_endpoint
def api_start_knockout(payload):
    tournament = tournament_from_dict(payload['tournament'])
    tournament = start_knockout_stage(tournament, _rng(payload, tournament.config))
    return _tournament_response(tournament)


@app.route('/api/tournaments/result', methods=['POST'])
@json_endpoint
def api_record_result(payload):
    tournament = tournament_from_dict(payload['tournament'])
    result = result_from_dict(payload['result'])
    if result is None:
        return jsonify({'error': 'A result is required'}), 400
    tournament = record_match_result(tournament, str(payload['match_id']), result)
    return _tournament_response(tournament)


if __name__ == '__main__':
    app.run(debug=True)
