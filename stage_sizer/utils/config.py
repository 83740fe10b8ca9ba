"""Configuration module."""
import copy
import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler

logger = logging.getLogger("stage_sizer")

CONFIG_FILENAME = "config.json"


def setup_logging(level=logging.INFO, log_file=None):
    """Set up console logging and, optionally, a rotating debug log file.

    Args:
        level: Console log level
        log_file: Path of a detailed log file, or None for console only
    """
    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
    )
    console_formatter = logging.Formatter(
        '%(levelname)s - %(message)s'
    )

    # Console handler - for basic output
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(console_formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers = []
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=5*1024*1024,  # 5MB
            backupCount=3,
            mode='w'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(detailed_formatter)
        root_logger.addHandler(file_handler)


# Default configuration
CONFIG = {
    "optimization": {
        "analytical": {
            "dv_margin": 0.02,
            "tolerance_mps": 1.0
        },
        "brute_force": {
            "propellant_steps": 20,
            "min_propellant_kg": 10_000.0,
            "max_propellant_kg": 5_000_000.0,
            "top_engines": 3,
            "refine_fraction": 0.30,
            "refine_steps": 15,
            "refine_alternatives": 2,
            "max_workers": None,  # None -> psutil.cpu_count()
            "show_progress": False
        },
        "monte_carlo": {
            "iterations": 1000,
            "seed": None,
            "max_workers": None,
            "show_progress": False
        }
    },
    "constraints": {
        "min_liftoff_twr": 1.2,
        "min_stage_twr": 0.5,
        "max_stages": 3,
        "structural_ratio": 0.08,
        "max_engines_per_stage": 9
    }
}


def _merge(base, overrides):
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def load_config(path=None):
    """Load configuration, merging a user config.json over the defaults.

    Args:
        path: Config file path; defaults to config.json in the working directory

    Returns:
        dict: Merged configuration
    """
    config = copy.deepcopy(CONFIG)
    config_path = path or os.path.join(os.getcwd(), CONFIG_FILENAME)
    if not os.path.exists(config_path):
        if path is not None:
            logger.warning(f"Config file {config_path} not found, using defaults")
        return config
    try:
        with open(config_path, 'r') as f:
            user_config = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Error loading config: {e}")
        raise
    logger.info(f"Loaded configuration from {config_path}")
    return _merge(config, user_config)


def get_solver_config(config, solver_name):
    """Return the settings block for one solver, falling back to the defaults."""
    defaults = CONFIG["optimization"].get(solver_name, {})
    if config is None:
        return dict(defaults)
    settings = dict(defaults)
    settings.update(config.get("optimization", {}).get(solver_name, {}))
    return settings
