"""Tips: a player's crafting-table guess, graded cell by cell."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from .catalog import GRID_CELLS, Recipe

GRID_SIDE = 3

CORRECT = 'correct'
SEMI_CORRECT = 'semi-correct'
WRONG = 'wrong'

# stored status codes
STATUS_CODES = {CORRECT: 1, SEMI_CORRECT: 2, WRONG: 3}
STATUS_NAMES = {code: name for name, code in STATUS_CODES.items()}


@dataclass(frozen=True)
class TableSlot:
    content: str
    status: str

    def to_dict(self):
        return {'item': self.content, 'status': self.status}


@dataclass
class Tip:
    item: str
    table: List[Optional[TableSlot]]
    date: datetime = field(default_factory=datetime.now)

    def count(self, status: str) -> int:
        return sum(1 for slot in self.table if slot and slot.status == status)

    def to_dict(self):
        return {
            'item': self.item,
            'table': [slot.to_dict() if slot else None for slot in self.table],
            'date': self.date.isoformat(),
        }


def normalize_table(table: Sequence) -> List[Optional[str]]:
    if table is None or len(table) != GRID_CELLS:
        raise ValueError(f'A crafting table needs exactly {GRID_CELLS} cells')
    cells = []
    for cell in table:
        if cell is None or cell == '':
            cells.append(None)
        elif isinstance(cell, str):
            cells.append(cell)
        else:
            raise ValueError(f'Crafting table cell must be a material id or null, got {cell!r}')
    return cells


def _score(graded):
    return (
        sum(1 for slot in graded if slot and slot.status == CORRECT),
        sum(1 for slot in graded if slot and slot.status == SEMI_CORRECT),
    )


def _placements(grid):
    """The recipe's pattern at every position it fits on the grid, authored position first."""
    yield list(grid)
    filled = [index for index, cell in enumerate(grid) if cell]
    if not filled:
        return
    rows = [index // GRID_SIDE for index in filled]
    cols = [index % GRID_SIDE for index in filled]
    for dr in range(-min(rows), GRID_SIDE - max(rows)):
        for dc in range(-min(cols), GRID_SIDE - max(cols)):
            if dr == 0 and dc == 0:
                continue
            shifted = [None] * GRID_CELLS
            for index in filled:
                shifted[index + dr * GRID_SIDE + dc] = grid[index]
            yield shifted


def _grade_placement(placement, materials, cells):
    graded = []
    for index, content in enumerate(cells):
        if content is None:
            graded.append(None)
            continue
        expected = placement[index]
        if expected and content in expected:
            graded.append(TableSlot(content, CORRECT))
        elif content in materials:
            graded.append(TableSlot(content, SEMI_CORRECT))
        else:
            graded.append(TableSlot(content, WRONG))
    return graded


def _grade_shaped(recipe, cells):
    # a shape may be crafted anywhere on the table, so try every offset
    materials = recipe.materials()
    best = None
    for placement in _placements(recipe.grid):
        graded = _grade_placement(placement, materials, cells)
        if best is None or _score(graded) > _score(best):
            best = graded
    return best


def _match_slots(cells, slots):
    """Indexes of the cells in a maximum matching of filled cells onto slots."""
    owners = {}

    def assign(cell, seen):
        for number, slot in enumerate(slots):
            if number in seen or cells[cell] not in slot:
                continue
            seen.add(number)
            if number not in owners or assign(owners[number], seen):
                owners[number] = cell
                return True
        return False

    for index, content in enumerate(cells):
        if content is not None:
            assign(index, set())
    return set(owners.values())


def _grade_shapeless(recipe, cells):
    materials = recipe.materials()
    matched = _match_slots(cells, recipe.slots)
    graded = []
    for index, content in enumerate(cells):
        if content is None:
            graded.append(None)
        elif index in matched:
            graded.append(TableSlot(content, CORRECT))
        elif content in materials:
            # right material, but every slot needing it is already filled
            graded.append(TableSlot(content, SEMI_CORRECT))
        else:
            graded.append(TableSlot(content, WRONG))
    return graded


def grade_table(recipe: Recipe, cells: List[Optional[str]]) -> List[Optional[TableSlot]]:
    if recipe.shapeless:
        return _grade_shapeless(recipe, cells)
    return _grade_shaped(recipe, cells)


def check_tip(recipes: Sequence[Recipe], item: str, table: Sequence,
              date: Optional[datetime] = None) -> Tip:
    """Grade ``table`` against every recipe of the target group and keep the closest match."""
    cells = normalize_table(table)
    best = None
    for recipe in recipes:
        tip = Tip(item=item, table=grade_table(recipe, cells), date=date or datetime.now())
        score = (tip.count(CORRECT), tip.count(SEMI_CORRECT))
        if best is None or score > best[0]:
            best = (score, tip)
    if best is None:
        raise ValueError('Cannot grade a tip without recipes')
    return best[1]
