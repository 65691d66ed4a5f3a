from __future__ import annotations

import enum
import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .outcome import Degraded, Ok, Outcome, Rejected
from .path_resolver import canonicalize, is_within_root, resolve

logger = logging.getLogger(__name__)

ENTRY_POINT = 'main.py'

EXCLUDED_NAMES = frozenset(
    {
        '.git',
        '.svn',
        '.htaccess',
        '.env',
        '.DS_Store',
        'Thumbs.db',
        '.gitignore',
        '.gitkeep',
        '.vscode',
        'node_modules',
        'vendor',
        '.idea',
        ENTRY_POINT,
    }
)

SIZE_UNITS = ('B', 'KB', 'MB', 'GB', 'TB')


def format_size(size: float) -> str:
    """Render a byte count with 1024-based units, e.g. ``1.46 MB``."""
    index = 0
    while size >= 1024 and index < len(SIZE_UNITS) - 1:
        size /= 1024
        index += 1
    text = f'{round(size, 2):.2f}'.rstrip('0').rstrip('.')
    return f'{text} {SIZE_UNITS[index]}'


@dataclass(frozen=True)
class Entry:
    name: str
    relative_path: str
    is_directory: bool
    size_bytes: int
    modified: int
    permissions: str

    @property
    def formatted_size(self) -> str:
        return format_size(self.size_bytes)


@dataclass(frozen=True)
class Breadcrumb:
    name: str
    path: str


class ListingState(enum.Enum):
    INIT = 'init'
    PATH_VALIDATED = 'path_validated'
    LISTED = 'listed'
    EMPTY_OR_UNREADABLE = 'empty_or_unreadable'


def _file_size(path: str) -> int:
    return os.stat(path).st_size


def directory_size(path: Path) -> Outcome[int]:
    """Sum the sizes of every file below ``path``.

    Symlinked directories are not descended into. Any error met during the
    walk discards the running total: the whole directory reports 0.
    """
    total = 0
    pending = [os.fspath(path)]
    try:
        while pending:
            with os.scandir(pending.pop()) as children:
                for child in children:
                    if child.is_dir():
                        if not child.is_symlink():
                            pending.append(child.path)
                        continue
                    total += _file_size(child.path)
    except OSError as exc:
        return Degraded(0, f'{type(exc).__name__}: {exc}')
    return Ok(total)


def _unwrap(outcome: Outcome, what: str):
    if isinstance(outcome, Degraded):
        logger.debug('%s degraded: %s', what, outcome.reason)
    return outcome.value


class DirectoryEngine:
    def __init__(self, root: Path, requested_path: str = '', root_label: str = 'storage'):
        self.root = root
        self.root_label = root_label
        self.state = ListingState.INIT
        self.current_path = requested_path or ''

        resolution = resolve(self.root, self.current_path)
        if isinstance(resolution, Rejected):
            logger.info('Unsafe path %r reset to storage root (%s)', self.current_path, resolution.reason)
            self.current_path = ''
        self.state = ListingState.PATH_VALIDATED

    def _contained(self, relative_path: str) -> bool:
        return is_within_root(self.root, canonicalize(self.root, relative_path))

    def _relative(self, name: str) -> str:
        return f'{self.current_path}/{name}' if self.current_path else name

    def current_directory(self) -> Path:
        real = canonicalize(self.root, self.current_path)
        if real is None or not is_within_root(self.root, real):
            return self.root
        return real

    def _scan(self, directory: Path) -> Outcome[list[str]]:
        if not directory.is_dir() or not os.access(directory, os.R_OK):
            return Degraded([], 'not a readable directory')
        try:
            return Ok([child.name for child in directory.iterdir()])
        except OSError as exc:
            return Degraded([], f'{type(exc).__name__}: {exc}')

    def _build_entry(self, directory: Path, name: str) -> Optional[Entry]:
        relative_path = self._relative(name)
        if not self._contained(relative_path):
            logger.debug('Skipping %r: resolves outside storage root', relative_path)
            return None

        full_path = directory / name
        try:
            info = full_path.stat()
        except OSError as exc:
            logger.debug('Skipping %r: %s', relative_path, exc)
            return None

        is_directory = stat.S_ISDIR(info.st_mode)
        if is_directory:
            size = _unwrap(directory_size(full_path), f'size of {relative_path!r}')
        else:
            size = info.st_size if stat.S_ISREG(info.st_mode) else 0

        return Entry(
            name=name,
            relative_path=relative_path,
            is_directory=is_directory,
            size_bytes=size,
            modified=int(info.st_mtime),
            permissions=f'{stat.S_IMODE(info.st_mode):04o}',
        )

    def list_entries(self) -> list[Entry]:
        directory = self.current_directory()
        scanned = self._scan(directory)
        names = _unwrap(scanned, f'listing of {self.current_path!r}')

        entries: list[Entry] = []
        for name in names:
            if name == '.' or name in EXCLUDED_NAMES:
                continue
            entry = self._build_entry(directory, name)
            if entry is not None:
                entries.append(entry)

        entries.sort(key=lambda e: (not e.is_directory, e.name.lower(), e.name))
        self.state = ListingState.LISTED if isinstance(scanned, Ok) else ListingState.EMPTY_OR_UNREADABLE
        return entries

    def breadcrumbs(self) -> list[Breadcrumb]:
        crumbs = [Breadcrumb(name=self.root_label, path='')]
        if not self.current_path:
            return crumbs

        accumulated = ''
        for part in self.current_path.split('/'):
            accumulated = f'{accumulated}/{part}' if accumulated else part
            if not self._contained(accumulated):
                break
            crumbs.append(Breadcrumb(name=part, path=accumulated))
        return crumbs

    def parent_path(self) -> str:
        if not self.current_path:
            return ''

        parent = '/'.join(self.current_path.split('/')[:-1])
        if parent and not self._contained(parent):
            return ''
        return parent
