import logging
import random
from datetime import datetime
from typing import List, Optional, Sequence

from .catalog import CatalogProvider, Item, Recipe, RecipeCorpus
from .errors import GraphUnreachableError, NoValidContentError, RiddleSolvedError
from .hints import generate_hints
from .material_graph import GRAPH_MAX_PASSES, GRAPH_TARGET_SIZE, build_inventory_graph
from .tips import Tip, check_tip

logger = logging.getLogger(__name__)

RESOURCE_MODE = 6
HARDCORE_MODE = 7
HEARTS = 10
HINT_REVEAL_STEP = 5
GRAPH_RETRIES = 1


class Riddle:
    """One puzzle instance: the hidden recipe plus everything the player sees.

    The riddle owns a snapshot of the catalog data it was built from, so
    serializing it never goes back to the catalog.
    """

    def __init__(self, gamemode: int, recipe_group: str, recipe: List[Recipe],
                 template_recipe: Recipe, inventory: List[Item], recipes: RecipeCorpus,
                 hints: Optional[List[str]] = None):
        self.gamemode = gamemode
        self.recipe_group = recipe_group
        self.recipe = recipe
        self.template_recipe = template_recipe
        self.inventory = inventory
        self.recipes = recipes
        self.hints = hints
        self.number_of_guesses = 0
        self.guessed_recipes: List[str] = []
        self.tips: List[Tip] = []
        self.solved = False

    @property
    def hearts(self) -> Optional[int]:
        return HEARTS if self.gamemode == HARDCORE_MODE else None

    def masked_hints(self) -> Optional[List[Optional[str]]]:
        if self.hints is None:
            return None
        return [
            hint if (index + 1) * HINT_REVEAL_STEP <= self.number_of_guesses else None
            for index, hint in enumerate(self.hints)
        ]

    def guess(self, group: str, table: Optional[Sequence] = None,
              date: Optional[datetime] = None) -> bool:
        """Register a guess of recipe group ``group``; returns whether it solved the riddle."""
        if self.solved:
            raise RiddleSolvedError(f'Riddle for {self.recipe_group!r} is already solved')
        # grade first so a malformed table leaves the riddle untouched
        tip = check_tip(self.recipe, group, table, date) if table is not None else None
        self.number_of_guesses += 1
        self.guessed_recipes.append(group)
        if tip is not None:
            self.tips.append(tip)
        if group == self.recipe_group:
            self.solved = True
        return self.solved

    def to_dict(self):
        return {
            'items': [item.to_dict() for item in self.inventory],
            'recipes': {
                group: [recipe.to_dict() for recipe in group_recipes]
                for group, group_recipes in self.recipes.items()
            },
            'tips': [tip.to_dict() for tip in self.tips],
            'hints': self.masked_hints(),
            'hearts': self.hearts,
            'result': self.solved,
        }


def valid_groups(recipes: RecipeCorpus, gamemode: int) -> List[str]:
    return [
        name for name, group in recipes.items()
        if any(recipe.supports(gamemode) for recipe in group)
    ]


def create_riddle(catalog: CatalogProvider, gamemode: int, new_game: bool = True,
                  rng: Optional[random.Random] = None,
                  graph_target_size: int = GRAPH_TARGET_SIZE,
                  graph_max_passes: int = GRAPH_MAX_PASSES) -> Riddle:
    if not new_game:
        raise NotImplementedError('Resuming a stored game is not supported')
    rng = rng or random.Random()
    gamemode = int(gamemode)
    recipes = catalog.get_recipes()
    items = catalog.get_items()

    groups = valid_groups(recipes, gamemode)
    if not groups:
        raise NoValidContentError(gamemode)
    group_name = rng.choice(groups)
    group = recipes[group_name]
    template = rng.choice([recipe for recipe in group if recipe.supports(gamemode)])

    if gamemode == RESOURCE_MODE:
        attempt = 0
        while True:
            try:
                inventory = build_inventory_graph(recipes, items, template, rng,
                                                  graph_target_size, graph_max_passes)
                break
            except GraphUnreachableError as exc:
                if attempt >= GRAPH_RETRIES:
                    raise
                attempt += 1
                logger.warning(f"[graph-retry] group={group_name} attempt={attempt} reason={exc}")
    else:
        inventory = list(items)

    hints = None
    if gamemode != HARDCORE_MODE:
        hints = generate_hints(template, group_name, recipes, rng)

    logger.info(
        f"[riddle-create] mode={gamemode} group={group_name} recipe={template.name} inventory={len(inventory)}"
    )
    return Riddle(
        gamemode=gamemode,
        recipe_group=group_name,
        recipe=list(group),
        template_recipe=template,
        inventory=inventory,
        recipes=dict(recipes),
        hints=hints,
    )
