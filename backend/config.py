import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


def _optional_int(name):
    value = os.environ.get(name)
    return int(value) if value not in (None, '') else None


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///' + os.path.join(BASE_DIR, 'craftdle.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Recipe/item corpus (JSON)
    CATALOG_PATH = os.environ.get('CATALOG_PATH') or os.path.join(BASE_DIR, 'craftdle', 'data', 'catalog.json')
    # Resource mode inventory size and expansion bound
    GRAPH_TARGET_SIZE = int(os.environ.get('GRAPH_TARGET_SIZE', '20'))
    GRAPH_MAX_PASSES = int(os.environ.get('GRAPH_MAX_PASSES', '50'))
    # Optional: fixed seed for reproducible riddles. Unset means system randomness.
    RIDDLE_SEED = _optional_int('RIDDLE_SEED')
    # Unfinished riddles are dropped from memory after this many seconds
    RIDDLE_MAX_AGE = int(os.environ.get('RIDDLE_MAX_AGE', '86400'))
