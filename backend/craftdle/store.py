"""Flask-SQLAlchemy implementation of the game record store."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from craftdle import db
from craftdle.models import CatalogItem, CraftingTableSlot, Game, Gamemode, Hint, InventoryItem
from craftdle.models import Tip as TipRow
from craftdle.services.games.catalog import Item
from craftdle.services.games.errors import RecordStoreError
from craftdle.services.games.records import GameSummary, RecordStore
from craftdle.services.games.tips import STATUS_NAMES, TableSlot, Tip


class SqlRecordStore(RecordStore):

    def _add(self, row) -> int:
        try:
            db.session.add(row)
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise RecordStoreError(f'Failed to write {row.__tablename__} record: {exc}') from exc
        return row.id

    def create_game_record(self, gamemode, player_id, riddle, date, is_solved):
        return self._add(Game(type=gamemode, player=player_id, riddle=riddle, date=date, is_solved=is_solved))

    def create_hint_record(self, game_id, number, content):
        return self._add(Hint(game_id=game_id, number=number, content=content))

    def create_inventory_record(self, game_id, item: Item):
        db_id = item.db_id
        if db_id is None:
            row = CatalogItem.query.filter_by(item_id=item.item_id).first()
            if row is None:
                raise RecordStoreError(f'Item {item.item_id!r} is not stored in the item table')
            db_id = row.id
        return self._add(InventoryItem(game_id=game_id, item_id=db_id))

    def create_tip_record(self, game_id, item, date):
        return self._add(TipRow(game_id=game_id, item=item, date=date))

    def create_crafting_slot_record(self, tip_id, position, content, status):
        return self._add(CraftingTableSlot(tip_id=tip_id, position=position, content=content, status=status))

    def mark_game_solved(self, game_id):
        game = db.session.get(Game, game_id)
        if game is None:
            raise RecordStoreError(f'Game {game_id} not found')
        game.is_solved = True
        self._add(game)

    def _summary(self, game: Game) -> GameSummary:
        return GameSummary(
            id=game.id,
            gamemode_id=game.type,
            gamemode_name=game.gamemode.name if game.gamemode else None,
            player_id=game.player,
            riddle=game.riddle,
            date=game.date,
            is_solved=bool(game.is_solved),
            tip_count=game.tips.count(),
        )

    def find_games_by_player(self, player_id) -> List[GameSummary]:
        games = Game.query.filter_by(player=player_id).order_by(Game.date.desc()).all()
        return [self._summary(game) for game in games]

    def find_gamemodes(self) -> List[dict]:
        return [mode.to_dict() for mode in Gamemode.query.order_by(Gamemode.id).all()]

    def find_game_by_id(self, game_id) -> Optional[GameSummary]:
        game = db.session.get(Game, game_id)
        return self._summary(game) if game else None

    def find_inventory_by_game(self, game_id) -> List[Item]:
        rows = InventoryItem.query.filter_by(game_id=game_id).order_by(InventoryItem.id).all()
        inventory = []
        for row in rows:
            if row.item is None:
                raise RecordStoreError(f'Inventory row {row.id} points at a missing item')
            inventory.append(row.item.to_item())
        return inventory

    def find_hints_by_game(self, game_id) -> List[str]:
        hints = Hint.query.filter_by(game_id=game_id).order_by(Hint.number).all()
        return [hint.content for hint in hints]

    def find_tips_by_game(self, game_id) -> List[Tip]:
        tips = []
        for row in TipRow.query.filter_by(game_id=game_id).order_by(TipRow.date, TipRow.id).all():
            table = [None] * 9
            for slot in row.slots:
                if 0 <= slot.position < 9:
                    table[slot.position] = TableSlot(slot.content, STATUS_NAMES.get(slot.status, 'wrong'))
            tips.append(Tip(item=row.item, table=table, date=row.date or datetime.now()))
        return tips
