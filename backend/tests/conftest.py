import os
import sys
import random
import pytest

# Ensure the backend root (containing the `craftdle` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from config import Config
from craftdle import create_app, db, get_catalog
from craftdle.services.games.catalog import JsonCatalog, StaticCatalog, load_catalog_data


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CATALOG_PATH = Config.CATALOG_PATH
    GRAPH_TARGET_SIZE = 20
    GRAPH_MAX_PASSES = 50
    RIDDLE_SEED = None
    RIDDLE_MAX_AGE = 3600


PLANKS = ['oak_planks', 'spruce_planks']

# Small corpus: Stick, Wooden/Iron Axe, Torch and Rail chain into exactly four
# distinct materials; TNT and Book are islands sharing nothing with the rest.
SMALL_CATALOG = {
    'recipes': {
        'planks0': [
            {'name': 'Oak Planks', 'shapeless': True, 'required': [['oak_log']], 'enabledGamemodes': [1, 2, 7]},
        ],
        'stick0': [
            {'name': 'Stick', 'shapeless': False, 'required': [PLANKS],
             'recipe': [None, PLANKS, None, None, PLANKS, None, None, None, None],
             'enabledGamemodes': [1, 2, 6, 7]},
        ],
        'axe0': [
            {'name': 'Wooden Axe', 'shapeless': False, 'required': [PLANKS, ['stick']],
             'recipe': [[PLANKS, PLANKS, None], [PLANKS, 'stick', None], [None, 'stick', None]],
             'enabledGamemodes': [1, 2, 6]},
            {'name': 'Iron Axe', 'shapeless': False, 'required': [['iron_ingot'], ['stick']],
             'recipe': [['iron_ingot', 'iron_ingot', None], ['iron_ingot', 'stick', None], [None, 'stick', None]],
             'enabledGamemodes': [2]},
        ],
        'torch0': [
            {'name': 'Torch', 'shapeless': False, 'required': [['coal', 'charcoal'], ['stick']],
             'recipe': [[None, ['coal', 'charcoal'], None], [None, 'stick', None], [None, None, None]],
             'enabledGamemodes': [2, 6]},
        ],
        'rail0': [
            {'name': 'Rail', 'shapeless': False, 'required': [['iron_ingot'], ['stick']],
             'recipe': [['iron_ingot', None, 'iron_ingot'], ['iron_ingot', 'stick', 'iron_ingot'],
                        ['iron_ingot', None, 'iron_ingot']],
             'enabledGamemodes': [2, 6]},
        ],
        'tnt0': [
            {'name': 'TNT', 'shapeless': True, 'required': [['gunpowder'], ['sand', 'red_sand']],
             'enabledGamemodes': [2]},
        ],
        'book0': [
            {'name': 'Book', 'shapeless': True, 'required': [['paper'], ['paper'], ['paper'], ['leather']],
             'enabledGamemodes': [3]},
        ],
    },
    'items': [
        {'id': item_id, 'name': item_id.replace('_', ' ').title(), 'src': f'items/{item_id}.png'}
        for item_id in [
            'oak_log', 'oak_planks', 'spruce_planks', 'stick', 'coal', 'charcoal', 'iron_ingot',
            'gunpowder', 'sand', 'red_sand', 'paper', 'leather',
        ]
    ],
}


@pytest.fixture()
def rng():
    return random.Random(1234)


@pytest.fixture()
def catalog():
    return StaticCatalog(*load_catalog_data(SMALL_CATALOG))


@pytest.fixture()
def recipes(catalog):
    return catalog.get_recipes()


@pytest.fixture()
def bundled_catalog():
    return JsonCatalog(Config.CATALOG_PATH)


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        from craftdle.models import CatalogItem, DEFAULT_GAMEMODES, Gamemode
        db.create_all()
        for mode_id, name in DEFAULT_GAMEMODES:
            db.session.add(Gamemode(id=mode_id, name=name))
        for item in get_catalog(application).get_items():
            db.session.add(CatalogItem(item_id=item.item_id, name=item.name, src=item.src))
        db.session.commit()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()
