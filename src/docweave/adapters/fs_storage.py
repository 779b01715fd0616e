import os
from pathlib import Path
from typing import Iterable

from ..core.ports import StorageStrategy


class FsStorage(StorageStrategy):
    """Files below `root`, addressed by '/'-separated relative paths."""

    def __init__(self, root: Path):
        self.root = root

    def _path(self, path: str) -> Path:
        return self.root.joinpath(*[p for p in path.split("/") if p])

    def exists(self, path: str) -> bool:
        return self._path(path).exists()

    def read_text(self, path: str) -> str:
        return self._path(path).read_text(encoding="utf-8")

    def write_text(self, path: str, contents: str) -> None:
        # all-or-nothing: write next to the target, then swap
        target = self._path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = target.with_name(target.name + ".tmp")
        tmp_path.write_text(contents, encoding="utf-8")
        tmp_path.replace(target)

    def mtime(self, path: str) -> float | None:
        try:
            return self._path(path).stat().st_mtime
        except FileNotFoundError:
            return None

    def list_tree(self, path: str) -> Iterable[tuple[str, bool]]:
        """Yield ``(relative path, is_directory)`` below `path`, sorted, top-down."""
        base = self._path(path)
        if not base.is_dir():
            return
        for dirpath, dirnames, filenames in os.walk(base):
            dirnames.sort()
            rel = Path(dirpath).relative_to(base).as_posix()
            prefix = "" if rel == "." else rel + "/"
            for name in dirnames:
                yield prefix + name, True
            for name in sorted(filenames):
                yield prefix + name, False
