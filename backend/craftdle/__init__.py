from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
import click
from config import Config

db = SQLAlchemy()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
]


def get_catalog(flask_app):
    return flask_app.extensions['craftdle.catalog']


def create_app(config_class=Config, catalog=None):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # The catalog is immutable and shared by every request
    if catalog is None:
        from craftdle.services.games.catalog import JsonCatalog
        catalog = JsonCatalog(flask_app.config.get('CATALOG_PATH'))
    flask_app.extensions['craftdle.catalog'] = catalog

    # Import and register blueprints here
    from craftdle.main import main
    flask_app.register_blueprint(main)

    from craftdle.api.riddles import riddles
    flask_app.register_blueprint(riddles, url_prefix='/api/riddles')

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from craftdle.models import CatalogItem, DEFAULT_GAMEMODES, Gamemode
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            for mode_id, name in DEFAULT_GAMEMODES:
                db.session.add(Gamemode(id=mode_id, name=name))
            items = get_catalog(flask_app).get_items()
            for item in items:
                db.session.add(CatalogItem(item_id=item.item_id, name=item.name, src=item.src))

            db.session.commit()
            print(f'Database has been reset and seeded with {len(items)} items!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
