"""Game records: persisting finished games and deriving player stats."""

import logging
from dataclasses import dataclass
from datetime import date as date_cls, datetime, timedelta
from typing import Dict, List, Optional

from .catalog import Item
from .errors import PersistencePartialFailureError, RecordStoreError
from .riddle import HARDCORE_MODE, RESOURCE_MODE, Riddle
from .tips import STATUS_CODES, Tip

logger = logging.getLogger(__name__)

DAILY_MODE_NAME = 'Daily'
TUTORIAL_SCRIPT = ('planks0', 'armorStand0', 'rail0', 'piston0', 'axe0')


@dataclass
class GameSummary:
    id: int
    gamemode_id: int
    gamemode_name: Optional[str]
    player_id: int
    riddle: str
    date: datetime
    is_solved: bool
    tip_count: int = 0

    def to_dict(self):
        return {
            'id': self.id,
            'gamemode': self.gamemode_id,
            'gamemode_name': self.gamemode_name,
            'player': self.player_id,
            'riddle': self.riddle,
            'date': self.date.isoformat(),
            'is_solved': self.is_solved,
            'tip_count': self.tip_count,
        }


@dataclass
class ModeStat:
    gamemode_id: int
    gamemode_name: Optional[str]
    played: int = 0
    solved: int = 0
    fastest_solve: Optional[int] = None

    def to_dict(self):
        return {
            'gamemode': self.gamemode_id,
            'gamemode_name': self.gamemode_name,
            'played': self.played,
            'solved': self.solved,
            'fastest_solve': self.fastest_solve,
        }


class RecordStore:
    """Storage contract for game records. Implementations raise RecordStoreError."""

    def create_game_record(self, gamemode: int, player_id: int, riddle: str,
                           date: datetime, is_solved: bool) -> int:
        raise NotImplementedError

    def create_hint_record(self, game_id: int, number: int, content: str) -> int:
        raise NotImplementedError

    def create_inventory_record(self, game_id: int, item: Item) -> int:
        raise NotImplementedError

    def create_tip_record(self, game_id: int, item: str, date: datetime) -> int:
        raise NotImplementedError

    def create_crafting_slot_record(self, tip_id: int, position: int, content: str, status: int) -> int:
        raise NotImplementedError

    def mark_game_solved(self, game_id: int) -> None:
        raise NotImplementedError

    def find_games_by_player(self, player_id: int) -> List[GameSummary]:
        raise NotImplementedError

    def find_gamemodes(self) -> List[dict]:
        raise NotImplementedError

    def find_game_by_id(self, game_id: int) -> Optional[GameSummary]:
        raise NotImplementedError

    def find_inventory_by_game(self, game_id: int) -> List[Item]:
        raise NotImplementedError

    def find_hints_by_game(self, game_id: int) -> List[str]:
        raise NotImplementedError

    def find_tips_by_game(self, game_id: int) -> List[Tip]:
        raise NotImplementedError


def save_tip(store: RecordStore, game_id: int, tip: Tip) -> int:
    """Write a tip and one crafting-table slot row per filled cell.

    A failing slot write is logged and skipped; the tip row itself must succeed.
    """
    tip_id = store.create_tip_record(game_id, tip.item, tip.date)
    for position, slot in enumerate(tip.table):
        if not slot:
            continue
        try:
            store.create_crafting_slot_record(tip_id, position, slot.content, STATUS_CODES[slot.status])
        except RecordStoreError as exc:
            logger.warning(f"[tip-slot-failed] game={game_id} tip={tip_id} position={position} error={exc}")
    return tip_id


def persist_game(store: RecordStore, riddle: Riddle, player_id: int,
                 date: Optional[datetime] = None) -> int:
    """Store a game with its hints, inventory snapshot and tips.

    The game row is written first and is authoritative: if it fails the error
    propagates. Child writes are independent; failures are collected into a
    PersistencePartialFailureError that is logged, not raised.
    """
    game_id = store.create_game_record(
        gamemode=riddle.gamemode,
        player_id=player_id,
        riddle=riddle.recipe_group,
        date=date or datetime.now(),
        is_solved=riddle.solved,
    )
    failures = []

    if riddle.gamemode != HARDCORE_MODE:
        for number, hint in enumerate(riddle.hints or []):
            try:
                store.create_hint_record(game_id, number, hint)
            except RecordStoreError as exc:
                failures.append(('hint', number, exc))

    if riddle.gamemode == RESOURCE_MODE:
        for index, item in enumerate(riddle.inventory):
            try:
                store.create_inventory_record(game_id, item)
            except RecordStoreError as exc:
                failures.append(('inventory', index, exc))

    for index, tip in enumerate(riddle.tips):
        try:
            save_tip(store, game_id, tip)
        except RecordStoreError as exc:
            failures.append(('tip', index, exc))

    if failures:
        error = PersistencePartialFailureError(game_id, failures)
        logger.warning(f"[persist-partial] player={player_id} {error}")
    logger.info(
        f"[persist-game] game={game_id} player={player_id} mode={riddle.gamemode} solved={riddle.solved}"
    )
    return game_id


def record_guess(store: RecordStore, game_id: int, riddle: Riddle, tip: Optional[Tip] = None) -> None:
    """Add one more guess to a game that is already stored.

    The tip is best-effort like the children in persist_game. Marking the
    game solved is not: a failure there propagates.
    """
    if tip is not None:
        try:
            save_tip(store, game_id, tip)
        except RecordStoreError as exc:
            logger.warning(f"[tip-failed] game={game_id} error={exc}")
    if riddle.solved:
        store.mark_game_solved(game_id)
        logger.info(f"[game-solved] game={game_id} guesses={riddle.number_of_guesses}")


def compute_stats(store: RecordStore, player_id: int) -> List[ModeStat]:
    stats: Dict[int, ModeStat] = {}
    for game in store.find_games_by_player(player_id):
        stat = stats.get(game.gamemode_id)
        if stat is None:
            stat = stats[game.gamemode_id] = ModeStat(game.gamemode_id, game.gamemode_name)
        stat.played += 1
        if not game.is_solved:
            continue
        stat.solved += 1
        if game.tip_count > 0 and (stat.fastest_solve is None or game.tip_count < stat.fastest_solve):
            stat.fastest_solve = game.tip_count
    return [stats[key] for key in sorted(stats)]


def compute_streak(store: RecordStore, player_id: int, today: Optional[date_cls] = None) -> int:
    """Consecutive days with a solved Daily game, ending today or yesterday."""
    today = today or date_cls.today()
    games = [
        game for game in store.find_games_by_player(player_id)
        if game.is_solved and game.gamemode_name == DAILY_MODE_NAME
    ]
    # games dated after today (clock skew) cannot extend the streak
    days = sorted({game.date.date() for game in games if game.date.date() <= today}, reverse=True)
    if not days:
        return 0

    expected = days[0]
    if expected < today - timedelta(days=1):
        return 0
    streak = 0
    for day in days:
        if day != expected:
            break
        streak += 1
        expected -= timedelta(days=1)
    return streak


def check_tutorial_script(group: str, guess_index: int) -> bool:
    if not 0 <= guess_index < len(TUTORIAL_SCRIPT):
        return False
    return group == TUTORIAL_SCRIPT[guess_index]


def load_game_history(store: RecordStore, game_id: int) -> Optional[dict]:
    game = store.find_game_by_id(game_id)
    if game is None:
        return None
    payload = game.to_dict()
    payload['hints'] = store.find_hints_by_game(game_id)
    payload['items'] = [item.to_dict() for item in store.find_inventory_by_game(game_id)]
    payload['tips'] = [tip.to_dict() for tip in store.find_tips_by_game(game_id)]
    return payload


def gamemodes_with_last_unsolved(store: RecordStore, player_id: int) -> List[dict]:
    """Every game mode, with the id of the player's most recent unsolved game in it."""
    last_unsolved: Dict[int, int] = {}
    for game in store.find_games_by_player(player_id):
        if not game.is_solved:
            # newest first, so the first one seen per mode wins
            last_unsolved.setdefault(game.gamemode_id, game.id)
    modes = []
    for mode in store.find_gamemodes():
        entry = dict(mode)
        entry['last_unsolved_game'] = last_unsolved.get(mode['id'])
        modes.append(entry)
    return modes
