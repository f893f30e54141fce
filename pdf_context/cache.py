"""
Extraction caches.

PDFCache maps a key derived from (path, size, mtime, options) to a
CacheEntry stored as `<cache_dir>/<md5>.json`. ProjectContextCache keeps
raw extracted text per project, so the same file can hold independent
extractions under different projects.

Entries are only replaced when the key changes (the document changed) or the
cache is cleared; there is no eviction. Read failures behave as misses and
write failures are logged, so a broken cache never breaks an extraction.
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from pydantic import ValidationError

from .exceptions import CacheError, format_error_chain
from .models import CacheEntry, ProcessingOptions
from .storage import LocalFileSystem

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = ".pdf-context/pdf-cache"
DEFAULT_PROJECT_CACHE_DIR = ".pdf-context/project-cache"


def _md5(text: str) -> str:
    return hashlib.md5(text.encode("utf-8")).hexdigest()


def _with_options(base: str, options: Optional[ProcessingOptions]) -> str:
    if options is None or options.is_empty():
        return base
    return f"{base}:{options.cache_fragment()}"


class PDFCache:
    """
    Per-file extraction cache.

    Usage:
        cache = PDFCache(LocalFileSystem("vault"))
        key = cache.cache_key(file.path, file.size, file.mtime, options)
        entry = cache.get(key)
        if entry is None:
            cache.set(key, CacheEntry(response=text, elapsed_time_ms=12.5))
    """

    def __init__(self, fs: LocalFileSystem, cache_dir: str = DEFAULT_CACHE_DIR):
        self.fs = fs
        self.cache_dir = cache_dir
        self._locks: dict[str, threading.Lock] = {}
        self._lock_users: dict[str, int] = {}
        self._locks_guard = threading.Lock()

    @staticmethod
    def cache_key(
        path: str,
        size: int,
        mtime: int,
        options: Optional[ProcessingOptions] = None,
    ) -> str:
        key = _md5(_with_options(f"{path}:{size}:{mtime}", options))
        logger.debug(f"Generated cache key for PDF: {path} -> {key}")
        return key

    def cache_path(self, key: str) -> str:
        return f"{self.cache_dir}/{key}.json"

    def get(self, key: str) -> Optional[CacheEntry]:
        try:
            return self._read(key)
        except CacheError as e:
            logger.error(f"Error reading from PDF cache:\n{format_error_chain(e)}")
            return None

    def set(self, key: str, entry: CacheEntry) -> None:
        try:
            self._write(key, entry)
        except CacheError as e:
            logger.error(f"Error writing to PDF cache:\n{format_error_chain(e)}")

    def clear(self) -> None:
        try:
            files = self.fs.list(self.cache_dir)
            logger.info(f"Clearing PDF cache, removing {len(files)} files")
            for path in files:
                self.fs.remove(path)
        except OSError as e:
            logger.error(f"Error clearing PDF cache: {e}")

    @contextmanager
    def key_lock(self, key: str) -> Iterator[None]:
        """
        Serialise computations of the same key.

        The lock is dropped once no caller holds or waits for it.
        """
        with self._locks_guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._locks_guard:
                self._lock_users[key] -= 1
                if not self._lock_users[key]:
                    del self._lock_users[key]
                    del self._locks[key]

    def active_locks(self) -> int:
        with self._locks_guard:
            return len(self._locks)

    def _read(self, key: str) -> Optional[CacheEntry]:
        path = self.cache_path(key)
        try:
            if not self.fs.exists(path):
                logger.info(f"Cache miss for key: {key}")
                return None
            entry = CacheEntry.model_validate_json(self.fs.read(path))
        except (OSError, ValidationError) as e:
            raise CacheError(key, "Cache read failed", e) from e
        logger.info(f"Cache hit for key: {key}")
        return entry

    def _write(self, key: str, entry: CacheEntry) -> None:
        try:
            self.fs.mkdir(self.cache_dir)
            self.fs.write(self.cache_path(key), entry.model_dump_json(exclude_none=True))
        except OSError as e:
            raise CacheError(key, "Cache write failed", e) from e
        logger.info(f"Cached PDF response for key: {key}")


class ProjectContextCache:
    """
    Per-project cache of extracted text.

    Keys are `path[:JSON(options)]`; entries live under a directory per
    project: `<cache_dir>/<md5(project)>/<md5(key)>.json`.
    """

    def __init__(self, fs: LocalFileSystem, cache_dir: str = DEFAULT_PROJECT_CACHE_DIR):
        self.fs = fs
        self.cache_dir = cache_dir

    @staticmethod
    def cache_key(path: str, options: Optional[ProcessingOptions] = None) -> str:
        return _with_options(path, options)

    def project_dir(self, project_id: str) -> str:
        return f"{self.cache_dir}/{_md5(project_id)}"

    def cache_path(self, project_id: str, key: str) -> str:
        return f"{self.project_dir(project_id)}/{_md5(key)}.json"

    def get_file_context(self, project_id: str, key: str) -> Optional[str]:
        path = self.cache_path(project_id, key)
        try:
            if not self.fs.exists(path):
                return None
            return json.loads(self.fs.read_text(path))["content"]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Error reading project cache for {project_id}: {e}")
            return None

    def set_file_context(self, project_id: str, key: str, content: str) -> None:
        try:
            self.fs.mkdir(self.project_dir(project_id))
            self.fs.write(
                self.cache_path(project_id, key),
                json.dumps({"key": key, "content": content}, ensure_ascii=False),
            )
        except OSError as e:
            logger.error(f"Error writing project cache for {project_id}: {e}")

    def clear_project(self, project_id: str) -> None:
        self._clear_dir(self.project_dir(project_id))

    def clear(self) -> None:
        for directory in self.fs.list_dirs(self.cache_dir):
            self._clear_dir(directory)

    def _clear_dir(self, directory: str) -> None:
        try:
            files = self.fs.list(directory)
            logger.info(f"Clearing project cache {directory}, removing {len(files)} files")
            for path in files:
                self.fs.remove(path)
        except OSError as e:
            logger.error(f"Error clearing project cache {directory}: {e}")
