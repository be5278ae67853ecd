"""Material graph: the bounded inventory handed out in Resource mode.

Starting from one concrete material per slot of the seed recipe, the set
grows by chaining through every recipe that already shares a material with
it, until it holds ``target_size`` materials.
"""

import logging
import random
from typing import Iterable, List, Optional, Set

from .catalog import Item, Recipe, RecipeCorpus
from .errors import GraphUnreachableError, ItemNotFoundError

logger = logging.getLogger(__name__)

GRAPH_TARGET_SIZE = 20
GRAPH_MAX_PASSES = 50


def seed_materials(recipe: Recipe, rng: random.Random) -> Set[str]:
    return {rng.choice(slot) for slot in recipe.slots}


def new_materials(recipe: Recipe, materials: Set[str], rng: random.Random) -> List[str]:
    """One random alternative for every slot of ``recipe`` not yet covered."""
    picked = []
    for slot in recipe.slots:
        if not any(alt in materials for alt in slot):
            picked.append(rng.choice(slot))
    return picked


def expand_materials(recipes: RecipeCorpus, materials: Iterable[str], rng: random.Random,
                     target_size: int = GRAPH_TARGET_SIZE,
                     max_passes: int = GRAPH_MAX_PASSES,
                     seed_name: str = '') -> Set[str]:
    graph = set(materials)
    passes = 0
    while len(graph) < target_size:
        if passes >= max_passes:
            raise GraphUnreachableError(seed_name, len(graph), target_size, passes)
        passes += 1
        size_before = len(graph)

        group_names = list(recipes)
        rng.shuffle(group_names)
        for group_name in group_names:
            for recipe in recipes[group_name]:
                if recipe.overlaps(graph):
                    graph.update(new_materials(recipe, graph, rng))
                if len(graph) >= target_size:
                    break
            if len(graph) >= target_size:
                break

        # a pass without growth will repeat forever: every overlapping recipe is saturated
        if len(graph) == size_before:
            raise GraphUnreachableError(seed_name, len(graph), target_size, passes)
    logger.debug(f"[graph-expand] seed={seed_name} size={len(graph)} passes={passes}")
    return graph


def materialize(items: List[Item], materials: Set[str]) -> List[Item]:
    known = {item.item_id for item in items}
    missing = [material for material in materials if material not in known]
    if missing:
        raise ItemNotFoundError(missing)
    inventory = []
    seen = set()
    for item in items:
        if item.item_id in materials and item.item_id not in seen:
            inventory.append(item)
            seen.add(item.item_id)
    return inventory


def build_inventory_graph(recipes: RecipeCorpus, items: List[Item], seed_recipe: Recipe,
                          rng: Optional[random.Random] = None,
                          target_size: int = GRAPH_TARGET_SIZE,
                          max_passes: int = GRAPH_MAX_PASSES) -> List[Item]:
    """Expand ``seed_recipe`` into an inventory of at least ``target_size`` items.

    Raises GraphUnreachableError when overlap chaining stalls or needs more
    than ``max_passes`` passes over the corpus, and ItemNotFoundError when a
    reached material has no catalog item.
    """
    rng = rng or random.Random()
    graph = seed_materials(seed_recipe, rng)
    graph = expand_materials(recipes, graph, rng, target_size, max_passes, seed_recipe.name)
    return materialize(items, graph)
