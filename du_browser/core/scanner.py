"""Directory scanning functionality for disk usage reports."""

import os
import logging
from typing import FrozenSet, Iterator, List, Optional, Tuple

from .cache import PathCache
from .models import Report, ReportEntry, report_total


class _Frame:
    """A directory whose listing is still being sized."""

    __slots__ = ("name", "path", "sub_path", "listing", "report", "visited")

    def __init__(self, name: str, path: str, sub_path: str,
                 listing: Iterator[Tuple[str, bool, int]], visited: FrozenSet[Tuple[int, int]]):
        self.name = name
        self.path = path
        self.sub_path = sub_path
        self.listing = listing
        self.report: Report = []
        self.visited = visited


class DirectoryScanner:
    """Sizes directory trees, reading through a PathCache."""

    def __init__(self, cache: Optional[PathCache] = None, follow_symlinks: bool = False):
        """Initialize directory scanner.

        Args:
            cache: Cache consulted before listing a directory. None disables caching.
            follow_symlinks: Descend into symlinked directories. A visited set of
                device/inode pairs stops the walk from entering a cycle.
        """
        self.cache = cache
        self.follow_symlinks = follow_symlinks
        self.logger = logging.getLogger(__name__)

    def walk(self, base_path: str, sub_path: str = "") -> Report:
        """Compute the report for ``base_path/sub_path``.

        Directories that cannot be opened or listed are logged and reported
        as empty, so a scan never fails from the caller's point of view.
        The walk keeps its own stack, so tree depth is not limited by the
        interpreter's recursion limit.

        Args:
            base_path: Root directory of the scan.
            sub_path: Path relative to ``base_path`` to report on.

        Returns:
            Entries sorted by size descending with ratios computed.
        """
        done, frame = self._enter(base_path, sub_path, "", frozenset())
        if frame is None:
            return done

        stack = [frame]
        while stack:
            frame = stack[-1]
            item = next(frame.listing, None)

            if item is None:
                stack.pop()
                report = self._finish(frame)
                if not stack:
                    return report
                stack[-1].report.append(ReportEntry(name=frame.name, size=report_total(report),
                                                    is_directory=True, children=report))
                continue

            name, is_directory, size = item
            if not is_directory:
                frame.report.append(ReportEntry(name=name, size=size))
                continue

            children, child = self._enter(base_path, os.path.join(frame.sub_path, name),
                                          name, frame.visited)
            if child is None:
                frame.report.append(ReportEntry(name=name, size=report_total(children),
                                                is_directory=True, children=children))
            else:
                stack.append(child)

        return []

    def _enter(self, base_path: str, sub_path: str, name: str,
               visited: FrozenSet[Tuple[int, int]]) -> Tuple[Report, Optional[_Frame]]:
        """Start on one directory.

        Returns:
            A finished report and None when the directory is cached or
            unreadable, otherwise an empty report and a frame to size.
        """
        path = os.path.abspath(os.path.join(base_path, sub_path))

        if self.cache is not None:
            cached = self.cache.get(path)
            if cached is not None:
                self.logger.debug(f"Cache hit for {path}")
                return cached, None

        if self.follow_symlinks:
            identity = self._identity(path)
            if identity is None:
                return [], None
            if identity in visited:
                self.logger.warning(f"Skipping already visited directory {path}")
                return [], None
            visited = visited | {identity}

        listing = self._list_directory(path)
        if listing is None:
            return [], None

        return [], _Frame(name, path, sub_path, iter(listing), visited)

    def _finish(self, frame: _Frame) -> Report:
        report = frame.report
        # Listing is name-ordered, and the sort is stable, so ties stay deterministic.
        report.sort(key=lambda entry: entry.size, reverse=True)
        compute_ratios(report)

        if self.cache is not None:
            self.cache.set(frame.path, report)

        return report

    def _list_directory(self, path: str) -> Optional[List[Tuple[str, bool, int]]]:
        """List immediate entries of ``path`` as (name, is_directory, size).

        Returns None when the directory cannot be opened or enumerated.
        """
        try:
            scanner = os.scandir(path)
        except (OSError, ValueError) as e:
            self.logger.warning(f"Failed to open {path!r}: {e}")
            return None

        entries = []
        with scanner:
            try:
                for entry in scanner:
                    try:
                        is_directory = entry.is_dir(follow_symlinks=self.follow_symlinks)
                        size = 0 if is_directory else entry.stat(follow_symlinks=False).st_size
                    except OSError as e:
                        # Skip entries that vanish or can't be stat'ed
                        self.logger.debug(f"Skipping {entry.path}: {e}")
                        continue
                    entries.append((entry.name, is_directory, size))
            except OSError as e:
                self.logger.warning(f"Failed to read directory {path}: {e}")
                return None

        entries.sort(key=lambda item: item[0])
        return entries

    def _identity(self, path: str) -> Optional[Tuple[int, int]]:
        try:
            st = os.stat(path)
        except (OSError, ValueError) as e:
            self.logger.warning(f"Failed to stat {path!r}: {e}")
            return None
        return st.st_dev, st.st_ino


def compute_ratios(report: Report) -> None:
    """Set each entry's ratio to its share of the report total (0 for an empty total)."""
    total = report_total(report)
    for entry in report:
        entry.ratio = entry.size / total if total else 0.0
