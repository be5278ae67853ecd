"""Error taxonomy for riddle generation and game record keeping."""

from typing import Iterable, List, Tuple


class RiddleError(Exception):
    """Base class for every failure raised by the game services."""


class CatalogError(RiddleError):
    """The recipe/item catalog is missing, empty or malformed."""


class NoValidContentError(RiddleError):
    def __init__(self, gamemode: int):
        self.gamemode = gamemode
        super().__init__(f'No recipe group supports gamemode {gamemode}')


class GraphUnreachableError(RiddleError):
    """Material expansion could not reach the target inventory size."""

    def __init__(self, seed_recipe: str, size: int, target_size: int, passes: int):
        self.seed_recipe = seed_recipe
        self.size = size
        self.target_size = target_size
        self.passes = passes
        super().__init__(
            f'Material graph seeded from {seed_recipe!r} stalled at {size}/{target_size} '
            f'materials after {passes} passes'
        )


class ItemNotFoundError(RiddleError):
    def __init__(self, material_ids: Iterable[str]):
        self.material_ids = sorted(material_ids)
        super().__init__(f'No catalog item for material(s): {", ".join(self.material_ids)}')


class RiddleSolvedError(RiddleError):
    """A guess was submitted for a riddle that is already solved."""


class RecordStoreError(RiddleError):
    """A single write or read against the game record store failed."""


class PersistencePartialFailureError(RiddleError):
    """Some child records failed after the parent game record was written.

    The parent record is authoritative, so this error is reported and logged
    rather than raised to the caller.
    """

    def __init__(self, game_id: int, failures: List[Tuple[str, int, Exception]]):
        self.game_id = game_id
        self.failures = failures
        kinds = ', '.join(f'{kind}#{index}' for kind, index, _ in failures)
        super().__init__(f'Game {game_id} saved with {len(failures)} failed child write(s): {kinds}')
