from datetime import datetime

from craftdle import db
from craftdle.services.games.catalog import Item

DEFAULT_GAMEMODES = [
    (1, 'Tutorial'),
    (2, 'Classic'),
    (3, 'Daily'),
    (4, 'All in One'),
    (5, 'Pocket'),
    (6, 'Resource'),
    (7, 'Hardcore'),
]


class Gamemode(db.Model):
    __tablename__ = 'gamemode'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), unique=True, nullable=False)

    def to_dict(self):
        return {'id': self.id, 'name': self.name}


class CatalogItem(db.Model):
    __tablename__ = 'item'
    id = db.Column(db.Integer, primary_key=True)
    item_id = db.Column(db.String(128), unique=True, nullable=False, index=True)
    name = db.Column(db.String(128), nullable=False)
    src = db.Column(db.String(256), nullable=True)

    def to_item(self) -> Item:
        return Item(item_id=self.item_id, name=self.name, src=self.src or '', db_id=self.id)


class Game(db.Model):
    __tablename__ = 'game'
    id = db.Column(db.Integer, primary_key=True)
    type = db.Column(db.Integer, db.ForeignKey('gamemode.id'), nullable=False)
    player = db.Column(db.Integer, nullable=False, index=True)
    riddle = db.Column(db.String(128), nullable=False)  # recipe group name
    date = db.Column(db.DateTime, nullable=False, default=datetime.now)
    is_solved = db.Column(db.Boolean, default=False, nullable=False)

    gamemode = db.relationship('Gamemode')
    hints = db.relationship('Hint', backref='game', lazy='dynamic')
    inventory = db.relationship('InventoryItem', backref='game', lazy='dynamic')
    tips = db.relationship('Tip', backref='game', lazy='dynamic')


class Hint(db.Model):
    __tablename__ = 'hint'
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id'), nullable=False)
    number = db.Column(db.Integer, nullable=False)
    content = db.Column(db.Text, nullable=False)


class InventoryItem(db.Model):
    __tablename__ = 'inventory_item'
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id'), nullable=False)
    item_id = db.Column(db.Integer, db.ForeignKey('item.id'), nullable=False)

    item = db.relationship('CatalogItem')


class Tip(db.Model):
    __tablename__ = 'tip'
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id'), nullable=False)
    date = db.Column(db.DateTime, nullable=False, default=datetime.now)
    item = db.Column(db.String(128), nullable=False)  # guessed recipe group
    slots = db.relationship('CraftingTableSlot', backref='tip', order_by='CraftingTableSlot.position')


class CraftingTableSlot(db.Model):
    __tablename__ = 'crafting_table_slot'
    id = db.Column(db.Integer, primary_key=True)
    tip_id = db.Column(db.Integer, db.ForeignKey('tip.id'), nullable=False)
    position = db.Column(db.Integer, nullable=False)
    content = db.Column(db.String(128), nullable=False)
    status = db.Column(db.Integer, nullable=False)  # 1 correct, 2 semi-correct, 3 wrong
