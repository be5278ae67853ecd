"""Recipe and item catalog.

Recipes come in two shapes. A shapeless recipe only lists the material
slots it needs; a shaped recipe places its slots on a 3x3 crafting grid.
Both expose ``slots``, the tuple of material alternatives every other
service works from, so nothing outside this module branches on the shape.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from .errors import CatalogError

Slot = Tuple[str, ...]
RecipeCorpus = Dict[str, List['Recipe']]

GRID_CELLS = 9


@dataclass(frozen=True)
class Item:
    item_id: str
    name: str
    src: str = ''
    db_id: Optional[int] = None

    def to_dict(self):
        return {
            'id': self.item_id,
            'name': self.name,
            'src': self.src,
        }


@dataclass(frozen=True)
class Recipe:
    name: str
    required: Tuple[Slot, ...]
    enabled_gamemodes: FrozenSet[int]

    shapeless = True

    @property
    def slots(self) -> Tuple[Slot, ...]:
        raise NotImplementedError

    def materials(self) -> set:
        return {material for slot in self.slots for material in slot}

    def overlaps(self, materials) -> bool:
        """True when any alternative of any slot is already in ``materials``."""
        return any(alt in materials for slot in self.slots for alt in slot)

    def supports(self, gamemode: int) -> bool:
        return gamemode in self.enabled_gamemodes

    def to_dict(self):
        return {
            'name': self.name,
            'shapeless': self.shapeless,
            'required': [list(slot) for slot in self.required],
            'enabledGamemodes': sorted(self.enabled_gamemodes),
        }


@dataclass(frozen=True)
class ShapelessRecipe(Recipe):
    @property
    def slots(self) -> Tuple[Slot, ...]:
        return self.required


@dataclass(frozen=True)
class ShapedRecipe(Recipe):
    grid: Tuple[Optional[Slot], ...] = ()

    shapeless = False

    @property
    def slots(self) -> Tuple[Slot, ...]:
        return tuple(cell for cell in self.grid if cell)

    def to_dict(self):
        data = super().to_dict()
        data['recipe'] = [list(cell) if cell else None for cell in self.grid]
        return data


class CatalogProvider:
    """Read-only access to the recipe corpus and the item corpus."""

    def get_recipes(self) -> RecipeCorpus:
        raise NotImplementedError

    def get_items(self) -> List[Item]:
        raise NotImplementedError


class StaticCatalog(CatalogProvider):
    def __init__(self, recipes: RecipeCorpus, items: List[Item]):
        _validate(recipes, items)
        self._recipes = recipes
        self._items = items

    def get_recipes(self) -> RecipeCorpus:
        return self._recipes

    def get_items(self) -> List[Item]:
        return self._items


class JsonCatalog(CatalogProvider):
    """Catalog backed by a JSON document, parsed once on first access."""

    def __init__(self, path):
        self.path = Path(path) if path else None
        self._cache: Optional[Tuple[RecipeCorpus, List[Item]]] = None

    def _load(self) -> Tuple[RecipeCorpus, List[Item]]:
        if self._cache is None:
            if self.path is None or not self.path.is_file():
                raise CatalogError(f'Catalog file not found: {self.path}')
            try:
                data = json.loads(self.path.read_text(encoding='utf-8'))
            except ValueError as exc:
                raise CatalogError(f'Catalog file {self.path} is not valid JSON: {exc}') from exc
            self._cache = load_catalog_data(data)
        return self._cache

    def get_recipes(self) -> RecipeCorpus:
        return self._load()[0]

    def get_items(self) -> List[Item]:
        return self._load()[1]


def load_catalog_data(data: Dict[str, Any]) -> Tuple[RecipeCorpus, List[Item]]:
    if not isinstance(data, dict):
        raise CatalogError('Catalog document must be an object')
    raw_groups = data.get('recipes') or {}
    if not isinstance(raw_groups, dict):
        raise CatalogError('Catalog "recipes" must map group names to recipe lists')
    recipes: RecipeCorpus = {}
    for group_name, raw_recipes in raw_groups.items():
        recipes[group_name] = [parse_recipe(raw, group_name) for raw in raw_recipes]
    items = [parse_item(raw) for raw in data.get('items') or []]
    _validate(recipes, items)
    return recipes, items


def parse_item(raw: Dict[str, Any]) -> Item:
    try:
        return Item(
            item_id=str(raw['id']),
            name=str(raw.get('name') or raw['id']),
            src=str(raw.get('src') or ''),
            db_id=raw.get('dbId'),
        )
    except (KeyError, TypeError, AttributeError) as exc:
        raise CatalogError(f'Malformed catalog item: {raw!r}') from exc


def parse_recipe(raw: Dict[str, Any], group_name: str = '') -> Recipe:
    if not isinstance(raw, dict) or not raw.get('name'):
        raise CatalogError(f'Recipe in group {group_name!r} has no name')
    name = raw['name']
    gamemodes = frozenset(int(mode) for mode in raw.get('enabledGamemodes') or [])
    required = tuple(_slot(value, name) for value in raw.get('required') or [])
    grid = raw.get('recipe')
    shapeless = bool(raw.get('shapeless', grid is None))

    if shapeless:
        if not required:
            raise CatalogError(f'Shapeless recipe {name!r} has no required materials')
        return ShapelessRecipe(name=name, required=required, enabled_gamemodes=gamemodes)

    cells = _flatten_grid(grid, name)
    recipe = ShapedRecipe(name=name, required=required, enabled_gamemodes=gamemodes, grid=cells)
    if not recipe.slots:
        raise CatalogError(f'Shaped recipe {name!r} has an empty grid')
    return recipe


def _slot(value, recipe_name: str) -> Slot:
    if isinstance(value, str):
        return (value,)
    if isinstance(value, (list, tuple)) and value and all(isinstance(v, str) for v in value):
        return tuple(value)
    raise CatalogError(f'Recipe {recipe_name!r} has a malformed slot: {value!r}')


def _flatten_grid(grid, recipe_name: str) -> Tuple[Optional[Slot], ...]:
    if not isinstance(grid, list):
        raise CatalogError(f'Shaped recipe {recipe_name!r} has no grid')
    if len(grid) == 3 and all(isinstance(row, list) and len(row) == 3 for row in grid):
        flat = [cell for row in grid for cell in row]
    else:
        flat = list(grid)
    if len(flat) != GRID_CELLS:
        raise CatalogError(f'Shaped recipe {recipe_name!r} grid must have {GRID_CELLS} cells')
    return tuple(_slot(cell, recipe_name) if cell else None for cell in flat)


def _validate(recipes: RecipeCorpus, items: List[Item]) -> None:
    if not recipes or not any(recipes.values()):
        raise CatalogError('Recipe catalog is empty')
    if not items:
        raise CatalogError('Item catalog is empty')
