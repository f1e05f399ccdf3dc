"""Filesets Core - Shared utilities.

Constants, configuration, structured logging and input validation used
throughout the filesets package.

Import specific names from submodules:
    from filesets.core.config import ConfigManager
    from filesets.core.logging import Logger
    from filesets.core import constants
    from filesets.core import validators
"""

from filesets.core import config, constants, logging, validators

__all__ = [
    "config",
    "constants",
    "logging",
    "validators",
]
