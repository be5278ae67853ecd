from flask import Blueprint, jsonify, request, current_app
import random
import threading
import time
import uuid
from typing import Dict, Optional

from craftdle import get_catalog
from craftdle.store import SqlRecordStore
from craftdle.services.games.errors import (
    CatalogError,
    GraphUnreachableError,
    ItemNotFoundError,
    NoValidContentError,
    RecordStoreError,
    RiddleSolvedError,
)
from craftdle.services.games.records import (
    check_tutorial_script,
    compute_stats,
    compute_streak,
    gamemodes_with_last_unsolved,
    load_game_history,
    persist_game,
    record_guess,
)
from craftdle.services.games.riddle import create_riddle


riddles = Blueprint('riddles', __name__)

# Riddles in play, keyed by riddle id. Each entry carries its own lock so
# concurrent guesses on one riddle are applied one at a time.
_active_riddles: Dict[str, dict] = {}
_registry_lock = threading.Lock()


def _rng() -> random.Random:
    seed = current_app.config.get('RIDDLE_SEED')
    return random.Random(seed) if seed is not None else random.Random()


def _optional_int(value) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _get_entry(riddle_id: str) -> Optional[dict]:
    with _registry_lock:
        return _active_riddles.get(riddle_id)


def _close(riddle_id: str) -> None:
    with _registry_lock:
        _active_riddles.pop(riddle_id, None)


def _expire_stale(max_age: float) -> None:
    """Drop riddles opened more than ``max_age`` seconds ago and never finished."""
    cutoff = time.monotonic() - max_age
    with _registry_lock:
        stale = [riddle_id for riddle_id, entry in _active_riddles.items() if entry['opened'] < cutoff]
        for riddle_id in stale:
            del _active_riddles[riddle_id]
    if stale:
        current_app.logger.info(f"[riddle-expired] count={len(stale)}")


def _store_guess(entry: dict, tip=None) -> Optional[int]:
    """Store the game on its first guess; later guesses add their tip and the solve."""
    player_id = entry['player_id']
    if player_id is None:
        return None
    store = SqlRecordStore()
    if entry['game_id'] is None:
        entry['game_id'] = persist_game(store, entry['riddle'], player_id)
    else:
        record_guess(store, entry['game_id'], entry['riddle'], tip)
    return entry['game_id']


@riddles.route('/create', methods=['POST'])
def create():
    data = request.get_json(silent=True) or {}
    gamemode = _optional_int(data.get('gamemode'))
    if gamemode is None:
        return jsonify({'error': 'A numeric gamemode is required'}), 400
    player_id = _optional_int(data.get('player_id'))

    cfg = current_app.config
    try:
        riddle = create_riddle(
            get_catalog(current_app),
            gamemode,
            rng=_rng(),
            graph_target_size=int(cfg.get('GRAPH_TARGET_SIZE', 20)),
            graph_max_passes=int(cfg.get('GRAPH_MAX_PASSES', 50)),
        )
    except NoValidContentError as exc:
        return jsonify({'error': str(exc)}), 400
    except (GraphUnreachableError, ItemNotFoundError, CatalogError) as exc:
        current_app.logger.error(f"[riddle-create-failed] mode={gamemode} error={exc}")
        return jsonify({'error': str(exc)}), 500

    _expire_stale(float(cfg.get('RIDDLE_MAX_AGE', 86400)))
    riddle_id = uuid.uuid4().hex
    with _registry_lock:
        _active_riddles[riddle_id] = {
            'riddle': riddle,
            'player_id': player_id,
            'game_id': None,
            'opened': time.monotonic(),
            'lock': threading.Lock(),
        }
    current_app.logger.info(f"[riddle-open] riddle={riddle_id} mode={gamemode} player={player_id}")

    payload = riddle.to_dict()
    payload['riddle_id'] = riddle_id
    return jsonify(payload), 201


@riddles.route('/<string:riddle_id>/state', methods=['GET'])
def get_state(riddle_id):
    entry = _get_entry(riddle_id)
    if entry is None:
        return jsonify({'error': 'Riddle not found'}), 404
    with entry['lock']:
        payload = entry['riddle'].to_dict()
    payload['riddle_id'] = riddle_id
    return jsonify(payload)


@riddles.route('/<string:riddle_id>/guess', methods=['POST'])
def submit_guess(riddle_id):
    entry = _get_entry(riddle_id)
    if entry is None:
        return jsonify({'error': 'Riddle not found'}), 404
    data = request.get_json(silent=True) or {}
    group = data.get('group')
    if not group:
        return jsonify({'error': 'A recipe group is required'}), 400

    with entry['lock']:
        riddle = entry['riddle']
        tips_before = len(riddle.tips)
        try:
            correct = riddle.guess(group, data.get('table'))
        except RiddleSolvedError as exc:
            return jsonify({'error': str(exc)}), 409
        except ValueError as exc:
            return jsonify({'error': str(exc)}), 400
        tip = riddle.tips[-1] if len(riddle.tips) > tips_before else None
        try:
            game_id = _store_guess(entry, tip)
        except RecordStoreError as exc:
            current_app.logger.error(f"[persist-failed] riddle={riddle_id} error={exc}")
            return jsonify({'error': 'The guess could not be saved'}), 500
        if correct:
            _close(riddle_id)
        payload = riddle.to_dict()

    payload['correct'] = correct
    payload['game_id'] = game_id
    payload['riddle_id'] = riddle_id
    return jsonify(payload)


@riddles.route('/<string:riddle_id>/give-up', methods=['POST'])
def give_up(riddle_id):
    entry = _get_entry(riddle_id)
    if entry is None:
        return jsonify({'error': 'Riddle not found'}), 404
    with entry['lock']:
        riddle = entry['riddle']
        game_id = entry['game_id']
        if game_id is None and entry['player_id'] is not None:
            try:
                game_id = persist_game(SqlRecordStore(), riddle, entry['player_id'])
            except RecordStoreError as exc:
                current_app.logger.error(f"[persist-failed] riddle={riddle_id} error={exc}")
                return jsonify({'error': 'The game could not be saved'}), 500
        _close(riddle_id)
        payload = riddle.to_dict()
    payload['game_id'] = game_id
    payload['solution'] = riddle.recipe_group
    return jsonify(payload)


@riddles.route('/players/<int:player_id>/stats', methods=['GET'])
def player_stats(player_id):
    stats = compute_stats(SqlRecordStore(), player_id)
    return jsonify([stat.to_dict() for stat in stats])


@riddles.route('/players/<int:player_id>/streak', methods=['GET'])
def player_streak(player_id):
    return jsonify({'streak': compute_streak(SqlRecordStore(), player_id)})


@riddles.route('/players/<int:player_id>/gamemodes', methods=['GET'])
def player_gamemodes(player_id):
    return jsonify(gamemodes_with_last_unsolved(SqlRecordStore(), player_id))


@riddles.route('/games/<int:game_id>', methods=['GET'])
def game_history(game_id):
    history = load_game_history(SqlRecordStore(), game_id)
    if history is None:
        return jsonify({'error': 'Game not found'}), 404
    return jsonify(history)


@riddles.route('/tutorial/check', methods=['POST'])
def tutorial_check():
    data = request.get_json(silent=True) or {}
    guess_index = _optional_int(data.get('guess_index'))
    if not data.get('group') or guess_index is None:
        return jsonify({'error': 'group and guess_index are required'}), 400
    return jsonify({'correct': check_tutorial_script(data['group'], guess_index)})
