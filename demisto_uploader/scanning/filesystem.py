import logging
import os
from pathlib import Path
from typing import Iterator

from ..models import WalkEntry


def top_level_name(root: Path, path: Path, is_dir: bool = False) -> str:
    """
    Name of the case an entry belongs to: the first component below root.
    Files lying directly under root belong to a case named after root.
    """
    parts = Path(path).relative_to(root).parts
    if len(parts) > 1 or (parts and is_dir):
        return parts[0]
    return Path(root).resolve().name


class TreeWalker:
    def iter_entries(self, root: Path) -> Iterator[WalkEntry]:
        """
        Depth-first pre-order walker using os.scandir.

        Every directory is yielded before its children; children are visited
        in name order. Symlinks are reported but never followed. The root
        itself is not yielded.
        """
        root = Path(root)
        stack = list(reversed(self._children(root)))
        while stack:
            path = stack.pop()
            try:
                info = os.lstat(path)
            except OSError as e:
                logging.warning(f"Skipping {path} - {e}")
                continue

            entry = WalkEntry(path, info)
            yield entry

            if entry.is_dir:
                # Push children reversed so we process A before Z
                stack.extend(reversed(self._children(path)))

    def _children(self, directory: Path) -> list[Path]:
        try:
            with os.scandir(directory) as it:
                names = [e.name for e in it]
        except OSError as e:
            logging.warning(f"Skipping {directory} - {e}")
            return []

        # Byte order, for a stable traversal
        names.sort()
        return [directory / name for name in names]
