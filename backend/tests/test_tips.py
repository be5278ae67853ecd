from datetime import datetime

import pytest

from craftdle.services.games.catalog import ShapelessRecipe
from craftdle.services.games.tips import CORRECT, SEMI_CORRECT, WRONG, check_tip


def _statuses(tip):
    return [slot.status if slot else None for slot in tip.table]


def test_shaped_recipe_grades_by_position(recipes):
    torch = recipes['torch0']
    tip = check_tip(torch, 'torch0', [None, 'coal', None, None, 'stick', None, None, None, None])
    assert _statuses(tip) == [None, CORRECT, None, None, CORRECT, None, None, None, None]

    swapped = check_tip(torch, 'torch0', [None, 'stick', None, None, None, None, 'iron_ingot', 'coal', None])
    assert _statuses(swapped)[1] == SEMI_CORRECT
    assert _statuses(swapped)[7] == SEMI_CORRECT
    assert _statuses(swapped)[6] == WRONG


def test_shaped_recipe_may_sit_anywhere_on_the_table(recipes):
    torch = recipes['torch0']
    moved_left = check_tip(torch, 'torch0', ['charcoal', None, None, 'stick', None, None, None, None, None])
    assert moved_left.count(CORRECT) == 2

    moved_down = check_tip(torch, 'torch0', [None, None, None, None, 'coal', None, None, 'stick', None])
    assert _statuses(moved_down) == [None, None, None, None, CORRECT, None, None, CORRECT, None]


def test_full_grid_recipe_cannot_shift(recipes):
    rail = recipes['rail0']
    table = [None, 'iron_ingot', None, None, None, None, None, None, None]
    assert _statuses(check_tip(rail, 'rail0', table))[1] == SEMI_CORRECT


def test_shapeless_recipe_consumes_slots(recipes):
    book = recipes['book0']
    tip = check_tip(book, 'book0', ['leather', None, 'paper', None, 'paper', None, 'paper', None, None])
    assert tip.count(CORRECT) == 4

    too_much_paper = check_tip(book, 'book0', ['paper', 'paper', 'paper', 'paper', None, None, None, None, None])
    assert _statuses(too_much_paper)[:4] == [CORRECT, CORRECT, CORRECT, SEMI_CORRECT]


def test_shapeless_slots_are_matched_as_a_whole():
    recipe = ShapelessRecipe('Mixed', (('a', 'b'), ('a',)), frozenset({2}))
    tip = check_tip([recipe], 'mixed0', ['a', 'b', None, None, None, None, None, None, None])
    assert _statuses(tip)[:2] == [CORRECT, CORRECT]

    crowded = check_tip([recipe], 'mixed0', ['b', 'b', 'a', None, None, None, None, None, None])
    assert _statuses(crowded)[:3] == [CORRECT, SEMI_CORRECT, CORRECT]


def test_best_matching_recipe_of_the_group_wins(recipes):
    axes = recipes['axe0']
    table = ['iron_ingot', 'iron_ingot', None, 'iron_ingot', 'stick', None, None, 'stick', None]
    tip = check_tip(axes, 'axe0', table)
    assert tip.count(CORRECT) == 5


def test_tip_serialization(recipes):
    when = datetime(2024, 5, 1, 12, 30)
    tip = check_tip(recipes['torch0'], 'rail0', [None, 'coal', None, None, None, None, None, None, None], when)
    data = tip.to_dict()
    assert data['item'] == 'rail0'
    assert data['date'] == '2024-05-01T12:30:00'
    assert data['table'][1] == {'item': 'coal', 'status': CORRECT}
    assert data['table'][0] is None


@pytest.mark.parametrize('table', [[], ['stick'] * 8, [None] * 8 + [3]])
def test_malformed_tables_are_rejected(recipes, table):
    with pytest.raises(ValueError):
        check_tip(recipes['torch0'], 'torch0', table)
