"""
Shared helper functions and utilities.

Logging setup and configuration loading for the command-line tools. The
geometry modules themselves never read files; they receive plain values.
"""

import copy
import json
import logging
import os


DEFAULT_CONFIG = {
    # Unit the marker table was drawn in: 'mm', 'in', anything else = meters
    'drawing_unit': 'mm',

    # Marker table keyed by id: {"id": int, "position": [x, y], "size": float}
    'markers': {},

    # Raise on the first invalid marker instead of skipping it
    'strict': False,

    # Dock pose used to carry plate-frame corners into the world frame
    'apply_dock_pose': False,
    'dock_pose': {
        'position': [0.0, 0.0, 0.0],
        'orientation': [0.0, 0.0, 0.0, 1.0],  # Quaternion (x, y, z, w)
    },
}


def setup_logging(level=logging.INFO):
    """Set up logging configuration.

    Args:
        level: Logging level (default: INFO)
    """
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    logger = logging.getLogger(__name__)
    logger.debug("Logging initialized")


def get_config(config_path=None):
    """Load configuration from file or return defaults.

    Args:
        config_path: Path to JSON configuration file (optional)

    Returns:
        dict: Configuration dictionary
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path and os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                loaded_config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logging.warning(f"Failed to load config from {config_path}: {e}")
        else:
            config.update(loaded_config)
            logging.info(f"Configuration loaded from {config_path}")
    elif config_path:
        logging.warning(f"Config file {config_path} not found, using defaults")

    return config


def save_config(config, config_path):
    """Save configuration to file.

    Args:
        config: Configuration dictionary
        config_path: Path to save configuration file

    Returns:
        bool: True if save successful, False otherwise
    """
    try:
        with open(config_path, 'w') as f:
            json.dump(config, f, indent=4)
        logging.info(f"Configuration saved to {config_path}")
        return True
    except (OSError, TypeError) as e:
        logging.error(f"Failed to save config to {config_path}: {e}")
        return False


def validate_config(config):
    """Validate configuration parameters.

    Args:
        config: Configuration dictionary

    Returns:
        bool: True if valid, False otherwise
    """
    required_keys = ['drawing_unit', 'markers']

    for key in required_keys:
        if key not in config:
            logging.error(f"Missing required config key: {key}")
            return False

    if not isinstance(config['markers'], dict):
        logging.error("Marker table must be a mapping keyed by marker id")
        return False

    if config.get('apply_dock_pose'):
        pose = config.get('dock_pose') or {}
        if 'position' not in pose or 'orientation' not in pose:
            logging.error("Dock pose needs both 'position' and 'orientation'")
            return False

    logging.info("Configuration validated successfully")
    return True
