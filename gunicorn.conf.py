"""Gunicorn configuration for the data access API.

Run with:
    gunicorn -c gunicorn.conf.py "json_data_access.flask_app:create_app()"

Secret Loading (post_fork hook):
    The API token is read by json_data_access.config.settings from
    /run/secrets/json_dap_api_token, falling back to JSON_DAP_API_TOKEN.
    The hook only reports which source the worker will see.
"""
import os

bind = os.environ.get("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.environ.get("GUNICORN_WORKERS", "2"))
timeout = int(os.environ.get("GUNICORN_TIMEOUT", "30"))


def post_fork(server, worker):
    """Called just after a worker has been forked."""
    from pathlib import Path
    secret_file = Path("/run/secrets") / "json_dap_api_token"
    if secret_file.is_file():
        worker.log.info("API token available in /run/secrets")
    elif os.environ.get("JSON_DAP_API_TOKEN"):
        worker.log.info("API token taken from JSON_DAP_API_TOKEN")
    else:
        worker.log.warning("No API token configured - data access endpoints are unauthenticated")
    
    config_path = os.environ.get("JSON_DAP_CONFIG")
    if not config_path:
        worker.log.warning("JSON_DAP_CONFIG not set - using built-in defaults")
    elif not Path(config_path).is_file():
        worker.log.error(f"JSON_DAP_CONFIG points to a missing file: {config_path}")
