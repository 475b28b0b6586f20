"""
Utility Modules

Configuration loading, timestamps, stable IDs and the parsed result store.
"""

from src.utils.config import load_config, Config
from src.utils.ids import stable_id
from src.utils.store import ParsedDataStore
from src.utils.timestamps import normalize_timestamp

__all__ = ["load_config", "Config", "stable_id", "ParsedDataStore", "normalize_timestamp"]
