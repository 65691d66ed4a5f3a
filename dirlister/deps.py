from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from .config import settings
from .services.path_resolver import load_root


@lru_cache(maxsize=1)
def get_storage_root() -> Path:
    return load_root(settings.storage_root)
