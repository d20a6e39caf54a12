"""Core: settings and shared constants.

Single place for configuration loaded from the environment.
"""

from helpdesk.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
