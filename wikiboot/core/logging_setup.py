# wikiboot/core/logging_setup.py
import json
import logging
import logging.config
import os
from pathlib import Path
from typing import Mapping, Optional

import yaml

logger = logging.getLogger(__name__)

LOGGING_CONFIG_ENV = "WIKIBOOT_LOGGING_CONFIG"

PROFILE_DIR = Path(__file__).parent
NORMAL_PROFILE = "logging.yaml"
VERBOSE_PROFILE = "verbose-logging.yaml"


def profile_path(verbose: bool) -> Path:
    return PROFILE_DIR / (VERBOSE_PROFILE if verbose else NORMAL_PROFILE)


def _apply_profile(path: Path) -> None:
    with open(path, 'r', encoding='utf-8') as f:
        profile = yaml.safe_load(f)
    logging.config.dictConfig(profile)


def configure_logging(verbose: bool, externally_configured: bool = False) -> None:
    """
    Applies one of the two bundled logging profiles.

    Args:
        verbose: Select the verbose profile instead of the normal one
        externally_configured: Logging was already set up outside this
            process's bootstrap; leave it untouched
    """
    if externally_configured:
        logger.debug("Logging configured externally, not applying a built-in profile")
        return

    path = profile_path(verbose)
    try:
        _apply_profile(path)
    except Exception as e:
        logger.critical(f"Log configuration failed ({path}): {e}", exc_info=True)
        return
    logger.debug(f"Configured {'verbose' if verbose else 'normal'} logging")


def apply_external_logging_config(environ: Optional[Mapping[str, str]] = None) -> bool:
    """
    Applies the logging configuration named by WIKIBOOT_LOGGING_CONFIG.

    Called only at the process entry point. Returns True when external
    configuration was requested, even if applying it failed, so the built-in
    profiles do not replace it.
    """
    env = environ if environ is not None else os.environ
    config_file = env.get(LOGGING_CONFIG_ENV)
    if not config_file:
        return False

    try:
        suffix = Path(config_file).suffix.lower()
        if suffix in ('.yaml', '.yml'):
            with open(config_file, 'r', encoding='utf-8') as f:
                logging.config.dictConfig(yaml.safe_load(f))
        elif suffix == '.json':
            with open(config_file, 'r', encoding='utf-8') as f:
                logging.config.dictConfig(json.load(f))
        else:
            logging.config.fileConfig(config_file, disable_existing_loggers=False)
    except Exception as e:
        logger.critical(f"External log configuration failed ({config_file}): {e}", exc_info=True)
    return True
