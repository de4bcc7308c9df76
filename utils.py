# utils.py
"""
Utility functions for the iron filings application.

This module loads and checks config.json and configures logging for a run.
Neither concern belongs to the physics or rendering code, but both shape how
a run starts up.
"""
import logging
import logging.handlers
import json
import os
from typing import Dict, Any

# --- Data Contracts ---
#
# REQUIRED_SECTIONS: the top-level objects every config.json must carry.
#
# load_config(path: str) -> Dict[str, Any]:
#   - Outputs: The parsed JSON document.
#   - Raises: FileNotFoundError, json.JSONDecodeError (logged, then re-raised).
#     ValueError if the document is not an object or a required section is
#     missing or not an object.
#
# setup_logging(config: Dict[str, Any]) -> None:
#   - Inputs:
#     - config: The loaded config; its "logging" section may hold "level",
#       "format" and "log_file".
#   - Side Effects: Configures the root logger with a console handler and a
#     rotating file handler, replacing any handlers already attached. Creates
#     the log directory if needed. Keeps Numba's compiler loggers at WARNING
#     or above so DEBUG runs are not flooded by JIT internals.

REQUIRED_SECTIONS = ('simulation_parameters', 'run_control', 'visualization', 'logging')

DEFAULT_LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
DEFAULT_LOG_FILE = 'logs/iron_filings.log'


def load_config(path: str) -> Dict[str, Any]:
    """
    Loads config.json and checks that every section the entry point reads
    is present. Values inside the sections are validated by the components
    that consume them.
    """
    logging.info(f"Loading configuration from {path}...")
    try:
        with open(path, 'r') as f:
            config = json.load(f)
    except FileNotFoundError:
        logging.error(f"Configuration file not found at {path}.")
        raise
    except json.JSONDecodeError:
        logging.error(f"Error decoding JSON from {path}.")
        raise

    if not isinstance(config, dict):
        msg = f"Configuration error: {path} must hold a JSON object, got {type(config).__name__}."
        logging.error(msg)
        raise ValueError(msg)

    missing = [name for name in REQUIRED_SECTIONS if not isinstance(config.get(name), dict)]
    if missing:
        msg = (
            f"Configuration error: {path} is missing or has non-object sections: "
            f"{', '.join(missing)}. Expected sections: {', '.join(REQUIRED_SECTIONS)}."
        )
        logging.error(msg)
        raise ValueError(msg)

    logging.info(
        f"Configuration loaded: {len(config['simulation_parameters'])} simulation parameters, "
        f"headless={config['run_control'].get('headless', False)}."
    )
    return config


def setup_logging(config: Dict[str, Any]) -> None:
    """
    Routes all log output to the console and a rotating file.
    """
    log_config = config.get('logging', {})
    log_level = log_config.get('level', 'INFO').upper()
    log_file_path = log_config.get('log_file', DEFAULT_LOG_FILE)

    log_dir = os.path.dirname(log_file_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()

    formatter = logging.Formatter(log_config.get('format', DEFAULT_LOG_FORMAT))
    # File rotates at 1MB, keeping 5 backups.
    handlers = [
        logging.StreamHandler(),
        logging.handlers.RotatingFileHandler(log_file_path, maxBytes=1024*1024, backupCount=5),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # Numba logs every compiler pass at DEBUG.
    numba_level = max(root.level, logging.WARNING)
    logging.getLogger('numba').setLevel(numba_level)

    logging.info(f"Logging initialized at {log_level}, writing to {log_file_path}.")
