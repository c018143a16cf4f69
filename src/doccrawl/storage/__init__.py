"""Filesystem persistence for doccrawl."""

from .file_store import LocalFileStore

__all__ = ["LocalFileStore"]
