import random
from typing import List, Optional

from .catalog import Recipe, RecipeCorpus

HINT_COUNT = 4
NO_SHARED_RECIPE = 'Materials used in this recipe are not included in any other recipe!'


def count_required_slots(recipe: Recipe) -> int:
    return len(recipe.slots)


def find_shared_recipe(target: Recipe, target_group: str, recipes: RecipeCorpus,
                       rng: random.Random) -> Optional[str]:
    """Name of the first recipe outside ``target_group`` sharing a material with ``target``.

    Groups are visited in random order, recipes in catalog order.
    """
    materials = target.materials()
    group_names = [name for name in recipes if name != target_group]
    rng.shuffle(group_names)
    for group_name in group_names:
        for recipe in recipes[group_name]:
            if recipe.overlaps(materials):
                return recipe.name
    return None


def pick_random_material(recipe: Recipe, rng: random.Random) -> str:
    slot = rng.choice(recipe.slots)
    return rng.choice(slot)


def generate_hints(target: Recipe, target_group: str, recipes: RecipeCorpus,
                   rng: Optional[random.Random] = None) -> List[str]:
    rng = rng or random.Random()
    shared = find_shared_recipe(target, target_group, recipes, rng)
    return [
        f'This recipe requires minimum {count_required_slots(target)} slots.',
        f'At least 1 material is shared with this recipe: {shared}' if shared else NO_SHARED_RECIPE,
        f'Random material from this recipe: {pick_random_material(target, rng)}',
        f'The item you need to think about is {target.name}',
    ]
