"""Source Scanner - Enumerates candidate source files under a project root."""

import logging
import os
import posixpath
from typing import Iterable, Iterator, List

from ..config import EXCLUDE_DIRS, SOURCE_EXTENSIONS

logger = logging.getLogger(__name__)


class SourceScanner:
    """Walks a directory tree and yields root-relative POSIX paths of source files.

    Each call to ``walk`` returns a fresh generator, so a scan can be restarted
    at any time. Entries are visited in sorted order to keep builds reproducible.
    """

    def __init__(self, extensions: Iterable[str] = SOURCE_EXTENSIONS,
                 exclude_dirs: Iterable[str] = EXCLUDE_DIRS):
        self.extensions = tuple(extensions)
        self.exclude_dirs = frozenset(exclude_dirs)

    def walk(self, root: str) -> Iterator[str]:
        """Yield source files under ``root``.

        Failing to list ``root`` itself raises ``OSError`` on first iteration;
        unreadable subdirectories are skipped.
        """
        entries = self._list_dir(root)
        yield from self._walk_entries("", entries)

    def is_source_file(self, name: str) -> bool:
        return name.endswith(self.extensions)

    def _walk_entries(self, relative_dir: str,
                      entries: List[os.DirEntry]) -> Iterator[str]:
        for entry in entries:
            relative_path = posixpath.join(relative_dir, entry.name) if relative_dir else entry.name

            if self._is_dir(entry):
                if entry.name in self.exclude_dirs:
                    continue
                try:
                    children = self._list_dir(entry.path)
                except OSError as e:
                    logger.debug("Skipping unreadable directory %s: %s", entry.path, e)
                    continue
                yield from self._walk_entries(relative_path, children)

            elif self.is_source_file(entry.name):
                yield relative_path

    @staticmethod
    def _list_dir(path: str) -> List[os.DirEntry]:
        with os.scandir(path) as it:
            return sorted(it, key=lambda entry: entry.name)

    @staticmethod
    def _is_dir(entry: os.DirEntry) -> bool:
        try:
            return entry.is_dir(follow_symlinks=False)
        except OSError:
            return False
