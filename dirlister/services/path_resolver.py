from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .outcome import Rejected, Resolution, Resolved

logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    pass


def load_root(path: str) -> Path:
    try:
        return Path(path).resolve(strict=True)
    except (OSError, RuntimeError, ValueError) as exc:
        raise ConfigurationError(f'Storage root cannot be resolved: {path}') from exc


def canonicalize(root: Path, relative_path: str) -> Optional[Path]:
    """Join ``relative_path`` onto ``root`` and resolve it against the filesystem.

    Returns ``None`` when the target does not exist, a component is not a
    directory, resolution loops, or the path contains a NUL byte. No
    containment check is made here.
    """
    if not relative_path:
        return root
    try:
        return (root / relative_path.lstrip('/')).resolve(strict=True)
    except (OSError, RuntimeError, ValueError):
        return None


def is_within_root(root: Path, candidate: Optional[Path]) -> bool:
    # Plain string prefix: a sibling such as "<root>foo" also passes.
    if candidate is None:
        return False
    return str(candidate).startswith(str(root))


def resolve(root: Path, relative_path: str) -> Resolution:
    if not relative_path:
        return Resolved(root)

    if '..' in relative_path:
        return Rejected('parent reference in path')

    if '\x00' in relative_path:
        return Rejected('NUL byte in path')

    candidate = canonicalize(root, relative_path)
    if candidate is None:
        return Rejected('path does not exist')

    if not is_within_root(root, candidate):
        logger.info('Resolved path escapes storage root: %r', relative_path)
        return Rejected('path escapes storage root')

    return Resolved(candidate)
