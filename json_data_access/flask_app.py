"""Flask application factory and bootstrap.

This module provides the create_app() factory function that loads the
configuration, builds the data access plugin and registers the blueprints.
"""
from __future__ import annotations
import logging
from typing import Optional

from flask import Flask

from json_data_access.config import AppConfig, load_settings
from json_data_access.core.plugin import JsonDataAccessPlugin, create_plugin


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(config: Optional[AppConfig] = None, plugin: Optional[JsonDataAccessPlugin] = None) -> Flask:
    """Create and configure Flask application.
    
    Args:
        config: Application configuration (defaults to load_settings())
        plugin: Pre-built plugin, mainly for tests (defaults to create_plugin(config))
    """
    cfg = config or (plugin.config if plugin else load_settings())
    _configure_logging(cfg.log_level)
    
    app = Flask(__name__)
    app.config["APP_CONFIG"] = cfg
    app.json.sort_keys = False
    app.extensions["json_data_access"] = plugin or create_plugin(cfg)
    
    # Register blueprints
    from json_data_access.api import data_access, errors, health
    
    app.register_blueprint(health.bp)
    app.register_blueprint(data_access.bp)
    
    # Register error handlers
    errors.register_error_handlers(app)
    
    logger = logging.getLogger(__name__)
    logger.info("[flask_app] JSON data-source id=%s backend=%s", cfg.plugin_id, cfg.web_service.base_url)
    if not cfg.api_token:
        logger.warning("[flask_app] No API token configured - data access endpoints are unauthenticated")
    
    return app


def _configure_logging(level_name: str) -> None:
    """Configure root logging once; later calls only adjust the level."""
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.INFO
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    root.setLevel(level)
