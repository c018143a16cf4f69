"""Local filesystem store for workspace and output files."""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class LocalFileStore:
    """
    Persists text blobs on the local filesystem.

    All paths are plain pathlib.Path objects; relative paths resolve
    against the current working directory.

    Example:
        store = LocalFileStore()
        store.write_text(Path("docs/guide/index.md"), "# Guide\\n")
        for path in store.list_files(Path("docs"), ".md"):
            print(path)
    """

    encoding = "utf-8"

    def make_dirs(self, path: Path) -> Path:
        """Create a directory and any missing parents."""
        path.mkdir(parents=True, exist_ok=True)
        return path

    def remove_tree(self, path: Path) -> bool:
        """
        Recursively delete a directory.

        Tolerates the directory, or any part of it, already being gone.

        Args:
            path: Directory to delete

        Returns:
            True if something was removed
        """
        if not path.exists() and not path.is_symlink():
            return False

        self._remove(path)
        logger.debug(f"Removed {path}")
        return True

    def _remove(self, path: Path) -> None:
        # Depth-first; entries deleted concurrently are ignored
        if path.is_dir() and not path.is_symlink():
            try:
                children = list(path.iterdir())
            except FileNotFoundError:
                return
            for child in children:
                self._remove(child)
            try:
                path.rmdir()
            except FileNotFoundError:
                pass
        else:
            path.unlink(missing_ok=True)

    def list_files(self, root: Path, extension: str) -> list[Path]:
        """
        Recursively list files with the given extension, sorted by path.

        Args:
            root: Directory to search
            extension: Suffix including the dot (e.g. ".html")

        Returns:
            Sorted list of matching files (empty if root is missing)
        """
        if not root.is_dir():
            return []
        extension = extension.lower()
        return sorted(p for p in root.rglob("*") if p.is_file() and p.suffix.lower() == extension)

    def read_text(self, path: Path) -> str:
        """Read a UTF-8 text file, replacing undecodable bytes."""
        return path.read_text(encoding=self.encoding, errors="replace")

    def write_text(self, path: Path, content: str) -> Path:
        """Write text, creating parent directories as needed."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding=self.encoding)
        return path
