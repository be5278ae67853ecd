import threading
import time

from craftdle.api.riddles import _active_riddles
from craftdle.models import Game, Gamemode


def _answer(riddle_id):
    return _active_riddles[riddle_id]['riddle'].recipe_group


def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'Craftdle' in res.get_json()['message']


def test_create_classic_riddle(client):
    res = client.post('/api/riddles/create', json={'gamemode': 2})
    assert res.status_code == 201
    data = res.get_json()
    assert data['riddle_id']
    assert data['hints'] == [None, None, None, None]
    assert data['hearts'] is None
    assert data['result'] is False
    assert len(data['items']) == 35
    assert 'rail0' in data['recipes']


def test_create_hardcore_riddle(client):
    data = client.post('/api/riddles/create', json={'gamemode': 7}).get_json()
    assert data['hearts'] == 10
    assert data['hints'] is None


def test_create_resource_riddle(client):
    data = client.post('/api/riddles/create', json={'gamemode': 6}).get_json()
    assert 20 <= len(data['items']) < 35


def test_create_rejects_bad_modes(client):
    assert client.post('/api/riddles/create', json={'gamemode': 99}).status_code == 400
    assert client.post('/api/riddles/create', json={}).status_code == 400
    assert client.post('/api/riddles/create', json={'gamemode': 'daily'}).status_code == 400


def test_wrong_guesses_reveal_hints(client):
    riddle_id = client.post('/api/riddles/create', json={'gamemode': 2}).get_json()['riddle_id']
    for _ in range(5):
        res = client.post(f'/api/riddles/{riddle_id}/guess', json={'group': 'nothing0'})
        assert res.status_code == 200
        assert res.get_json()['correct'] is False
    state = client.get(f'/api/riddles/{riddle_id}/state').get_json()
    assert state['hints'][0] is not None
    assert state['hints'][1:] == [None, None, None]


def test_guess_validation(client):
    riddle_id = client.post('/api/riddles/create', json={'gamemode': 2}).get_json()['riddle_id']
    assert client.post(f'/api/riddles/{riddle_id}/guess', json={}).status_code == 400
    assert client.post(f'/api/riddles/{riddle_id}/guess', json={'group': 'rail0', 'table': ['stick']}).status_code == 400
    assert client.post('/api/riddles/unknown/guess', json={'group': 'rail0'}).status_code == 404
    assert client.get('/api/riddles/unknown/state').status_code == 404


def test_solving_persists_the_game(client):
    created = client.post('/api/riddles/create', json={'gamemode': 3, 'player_id': 42}).get_json()
    riddle_id = created['riddle_id']
    answer = _answer(riddle_id)

    wrong = client.post(f'/api/riddles/{riddle_id}/guess',
                        json={'group': 'nothing0', 'table': [None, 'stick'] + [None] * 7}).get_json()
    assert wrong['correct'] is False
    assert len(wrong['tips']) == 1
    # the first guess stores the game, still unsolved
    game_id = wrong['game_id']
    assert client.get(f'/api/riddles/games/{game_id}').get_json()['is_solved'] is False

    solved = client.post(f'/api/riddles/{riddle_id}/guess', json={'group': answer}).get_json()
    assert solved['correct'] is True
    assert solved['result'] is True
    assert solved['game_id'] == game_id

    history = client.get(f'/api/riddles/games/{game_id}').get_json()
    assert history['riddle'] == answer
    assert history['is_solved'] is True
    assert history['gamemode_name'] == 'Daily'
    assert len(history['hints']) == 4
    assert history['tips'][0]['table'][1]['item'] == 'stick'

    # finished riddles leave play
    assert client.post(f'/api/riddles/{riddle_id}/guess', json={'group': answer}).status_code == 404

    stats = client.get('/api/riddles/players/42/stats').get_json()
    assert stats == [{'gamemode': 3, 'gamemode_name': 'Daily', 'played': 1, 'solved': 1, 'fastest_solve': 1}]
    assert client.get('/api/riddles/players/42/streak').get_json() == {'streak': 1}


def test_give_up_persists_unsolved_game(client):
    riddle_id = client.post('/api/riddles/create', json={'gamemode': 6, 'player_id': 5}).get_json()['riddle_id']
    answer = _answer(riddle_id)
    data = client.post(f'/api/riddles/{riddle_id}/give-up').get_json()
    assert data['solution'] == answer
    assert data['result'] is False

    history = client.get(f"/api/riddles/games/{data['game_id']}").get_json()
    assert history['is_solved'] is False
    assert len(history['items']) == len(data['items'])
    assert client.get(f'/api/riddles/{riddle_id}/state').status_code == 404


def test_give_up_after_guessing_keeps_one_game(client):
    riddle_id = client.post('/api/riddles/create', json={'gamemode': 2, 'player_id': 8}).get_json()['riddle_id']
    first = client.post(f'/api/riddles/{riddle_id}/guess', json={'group': 'nothing0'}).get_json()
    second = client.post(f'/api/riddles/{riddle_id}/guess',
                         json={'group': 'nothing0', 'table': ['stick'] + [None] * 8}).get_json()
    assert second['game_id'] == first['game_id']

    data = client.post(f'/api/riddles/{riddle_id}/give-up').get_json()
    assert data['game_id'] == first['game_id']
    assert Game.query.filter_by(player=8).count() == 1
    history = client.get(f"/api/riddles/games/{data['game_id']}").get_json()
    assert history['is_solved'] is False
    assert history['tip_count'] == 1


def test_anonymous_riddles_are_not_stored(client):
    riddle_id = client.post('/api/riddles/create', json={'gamemode': 2}).get_json()['riddle_id']
    data = client.post(f'/api/riddles/{riddle_id}/guess', json={'group': _answer(riddle_id)}).get_json()
    assert data['correct'] is True
    assert data['game_id'] is None


def test_unknown_game_and_empty_player(client):
    assert client.get('/api/riddles/games/999').status_code == 404
    assert client.get('/api/riddles/players/1000/stats').get_json() == []
    assert client.get('/api/riddles/players/1000/streak').get_json() == {'streak': 0}


def test_tutorial_check(client):
    assert client.post('/api/riddles/tutorial/check', json={'group': 'rail0', 'guess_index': 2}).get_json() == {'correct': True}
    assert client.post('/api/riddles/tutorial/check', json={'group': 'rail0', 'guess_index': 0}).get_json() == {'correct': False}
    assert client.post('/api/riddles/tutorial/check', json={'group': 'rail0'}).status_code == 400


def test_db_reset_command(flask_app):
    runner = flask_app.test_cli_runner()
    result = runner.invoke(args=['db-reset'])
    assert result.exit_code == 0
    assert 'seeded with 35 items' in result.output
    assert Gamemode.query.count() == 7


def test_player_gamemodes_point_at_last_unsolved_game(client):
    abandoned = client.post('/api/riddles/create', json={'gamemode': 2, 'player_id': 21}).get_json()['riddle_id']
    game_id = client.post(f'/api/riddles/{abandoned}/give-up').get_json()['game_id']
    won = client.post('/api/riddles/create', json={'gamemode': 3, 'player_id': 21}).get_json()['riddle_id']
    client.post(f'/api/riddles/{won}/guess', json={'group': _answer(won)})

    modes = client.get('/api/riddles/players/21/gamemodes').get_json()
    assert [mode['id'] for mode in modes] == [1, 2, 3, 4, 5, 6, 7]
    assert modes[1] == {'id': 2, 'name': 'Classic', 'last_unsolved_game': game_id}
    assert all(mode['last_unsolved_game'] is None for mode in modes if mode['id'] != 2)


def test_stale_riddles_expire_on_create(client):
    _active_riddles['forgotten'] = {
        'riddle': None,
        'player_id': None,
        'game_id': None,
        'opened': time.monotonic() - 7200,
        'lock': threading.Lock(),
    }
    fresh = client.post('/api/riddles/create', json={'gamemode': 2}).get_json()['riddle_id']
    assert 'forgotten' not in _active_riddles
    assert fresh in _active_riddles
