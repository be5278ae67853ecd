"""Craftdle rules: recipe catalog, riddles, hints, tip grading and records.

Nothing in here imports Flask. Storage goes through the RecordStore
contract in records.py, which craftdle.store implements on SQLAlchemy.
"""

from .catalog import CatalogProvider, Item, JsonCatalog, Recipe, ShapedRecipe, ShapelessRecipe, StaticCatalog
from .errors import (
    CatalogError,
    GraphUnreachableError,
    ItemNotFoundError,
    NoValidContentError,
    PersistencePartialFailureError,
    RecordStoreError,
    RiddleError,
    RiddleSolvedError,
)
from .riddle import Riddle, create_riddle
