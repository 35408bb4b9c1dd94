"""Bot configuration record and its in-memory store."""

from cmdpanel.core.config.models import Configuration, GameParser
from cmdpanel.core.config.store import ConfigStore

__all__ = ["Configuration", "ConfigStore", "GameParser"]
