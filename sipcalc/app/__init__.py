"""Application factory and app-wide configuration."""

from dataclasses import dataclass
from typing import Optional

from flask import Flask
from flask_cors import CORS

from sipcalc.app.api.routes import EXTENSION_KEY, api_bp
from sipcalc.config import MEMORY_DATABASE, Settings
from sipcalc.core.storage import (
    CalculationHistory,
    KeyValueStore,
    MemoryKeyValueStore,
    Preferences,
    SqliteKeyValueStore,
)
from sipcalc.logger import setup_logger


@dataclass
class Services:
    settings: Settings
    history: CalculationHistory
    preferences: Preferences


def build_store(settings: Settings) -> KeyValueStore:
    if settings.database_path == MEMORY_DATABASE:
        return MemoryKeyValueStore()
    return SqliteKeyValueStore(settings.database_path)


def create_app(settings: Optional[Settings] = None) -> Flask:
    """Build the Flask app instance."""
    settings = settings or Settings.from_env()
    logger = setup_logger("sipcalc", level=settings.log_level, log_file=settings.log_file)

    app = Flask(__name__)

    CORS(
        app,
        resources={r"/api/*": {"origins": list(settings.cors_origins)}},
        supports_credentials=True,
    )

    store = build_store(settings)
    app.extensions[EXTENSION_KEY] = Services(
        settings=settings,
        history=CalculationHistory(store, limit=settings.history_limit),
        preferences=Preferences(store, default_currency=settings.default_currency),
    )

    app.register_blueprint(api_bp, url_prefix="/api")
    logger.info("Projection API ready (store: %s)", settings.database_path)
    return app
