from __future__ import annotations

import dataclasses
import enum
import json
import logging
import os
import shutil
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, NamedTuple, Optional

from ..logging_setup import console_logger
from .errors import DecodeError, EncodeError, NotFoundError, StoreIOError, ValidationError

SUFFIX = ".json"
TMP_SUFFIX = ".tmp"
DIR_MODE = 0o755
FILE_MODE = 0o644


class PathKind(enum.Enum):
    FILE = "file"
    DIRECTORY = "directory"
    MISSING = "missing"


class Resolved(NamedTuple):
    kind: PathKind
    path: Path


def resolve(path: Path) -> Resolved:
    """Resolve a record path: the bare path first, then the path with ``.json`` appended.

    The returned path is the one that matched, so callers read or remove
    exactly what was found.
    """
    path = Path(path)
    for candidate in (path, path.with_name(path.name + SUFFIX)):
        if candidate.is_dir():
            return Resolved(PathKind.DIRECTORY, candidate)
        if candidate.is_file():
            return Resolved(PathKind.FILE, candidate)
    return Resolved(PathKind.MISSING, path)


class CollectionLocks:
    """One lock per collection name, created on first use and kept for the life of the store."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    def get(self, collection: str) -> threading.Lock:
        # guard is held for the lookup only, never for the file operation
        with self._guard:
            lock = self._locks.get(collection)
            if lock is None:
                lock = self._locks[collection] = threading.Lock()
            return lock

    def __contains__(self, collection: str) -> bool:
        with self._guard:
            return collection in self._locks

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


def _require(action: str, **names: Any) -> None:
    for label, value in names.items():
        if not isinstance(value, str) or not value:
            raise ValidationError(f"Missing {label} - unable to {action}")
        # "users/team" names a sub-collection; empty, "." and ".." segments would leave the collection
        if any(part in ("", ".", "..") for part in value.replace("\\", "/").split("/")):
            raise ValidationError(f"Invalid {label} {value!r} - unable to {action}")


def _default(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _write_atomic(tmp: Path, final: Path, payload: bytes) -> None:
    fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, final)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"{path} is not UTF-8 text: {e}") from e


class JsonStore:
    """JSON-on-disk collections: one directory per collection, one file per resource."""

    def __init__(self, data_dir: Path, logger: Optional[logging.Logger] = None):
        self.data_dir = Path(os.path.normpath(os.fspath(data_dir)))
        self.logger = logger or console_logger()
        self.locks = CollectionLocks()

        if self.data_dir.is_dir():
            self.logger.debug("Using '%s' (database already exists)", self.data_dir)
            return

        self.logger.debug("Creating the database at '%s'...", self.data_dir)
        try:
            self.data_dir.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
        except OSError as e:
            raise StoreIOError(f"Unable to create database at {self.data_dir}: {e}") from e

    def _collection_dir(self, collection: str) -> Path:
        return self.data_dir / collection

    def _record_path(self, collection: str, resource: str) -> Path:
        path = self._collection_dir(collection) / resource
        root = self.data_dir.resolve()
        target = path.resolve()
        # symlinks inside the store must not lead out of it
        if target == root or not target.is_relative_to(root):
            raise ValidationError(f"{collection}/{resource} points outside the store")
        return path

    def write(self, collection: str, resource: str, value: Any) -> Path:
        """Store ``value`` as ``<collection>/<resource>.json``.

        The document goes to a ``.tmp`` sibling first and is renamed over the
        final path, so readers see either the old or the new content.
        """
        _require("save record", collection=collection, resource=resource)
        try:
            text = json.dumps(value, indent=2, ensure_ascii=False, default=_default) + "\n"
            # lone surrogates survive dumps and only fail here
            payload = text.encode("utf-8")
        except (TypeError, ValueError) as e:
            raise EncodeError(f"Unable to serialize {collection}/{resource}: {e}") from e
        final = self._record_path(collection, resource + SUFFIX)

        with self.locks.get(collection):
            directory = final.parent
            tmp = final.with_name(final.name + TMP_SUFFIX)
            try:
                directory.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
                _write_atomic(tmp, final, payload)
            except OSError as e:
                raise StoreIOError(f"Unable to save {collection}/{resource}: {e}") from e

        self.logger.debug("Saved %s", final)
        return final

    def read(self, collection: str, resource: str, into: Optional[Callable[..., Any]] = None) -> Any:
        """Load one resource. ``resource`` may be given with or without ``.json``.

        With ``into``, the decoded value is converted: dataclasses are built
        from a dict payload as keyword arguments, any other callable gets the
        decoded value as its only argument.
        """
        _require("read record", collection=collection, resource=resource)

        found = resolve(self._record_path(collection, resource))
        if found.kind is PathKind.MISSING:
            raise NotFoundError(f"Unable to find file or directory named {collection}/{resource}")
        if found.kind is PathKind.DIRECTORY:
            raise NotFoundError(f"{collection}/{resource} is a collection, not a resource")

        try:
            text = _read_text(found.path)
        except FileNotFoundError as e:
            raise NotFoundError(f"Unable to find file or directory named {collection}/{resource}") from e
        except OSError as e:
            raise StoreIOError(f"Unable to read {found.path}: {e}") from e

        try:
            value = json.loads(text)
        except json.JSONDecodeError as e:
            raise DecodeError(f"{found.path} is not valid JSON: {e}") from e

        if into is None:
            return value
        try:
            if dataclasses.is_dataclass(into) and isinstance(value, dict):
                return into(**value)
            return into(value)
        except (TypeError, ValueError, KeyError) as e:
            raise DecodeError(f"{found.path} does not fit {getattr(into, '__name__', into)}: {e}") from e

    def read_all(self, collection: str) -> List[str]:
        """Return the raw text of every record in ``collection``, ordered by file name.

        Every entry is returned whatever its extension, except ``*.tmp``
        files: those belong to writes whose rename has not happened yet and
        may hold a partial document. Entries removed after the listing was
        taken are skipped; any other unreadable entry fails the whole call
        with StoreIOError.
        """
        _require("read collection", collection=collection)

        directory = self._collection_dir(collection)
        if not directory.is_dir():
            raise NotFoundError(f"Unable to find collection {collection}")
        try:
            names = sorted(os.listdir(directory))
        except FileNotFoundError as e:
            raise NotFoundError(f"Unable to find collection {collection}") from e
        except OSError as e:
            raise StoreIOError(f"Unable to list {directory}: {e}") from e

        records: List[str] = []
        for name in names:
            # in-flight writes; the rename has not happened yet
            if name.endswith(TMP_SUFFIX):
                continue
            path = directory / name
            try:
                records.append(path.read_text(encoding="utf-8"))
            except UnicodeDecodeError as e:
                raise StoreIOError(f"Unable to read {path}: not UTF-8 text: {e}") from e
            except FileNotFoundError:
                # deleted after the listing was taken
                continue
            except OSError as e:
                raise StoreIOError(f"Unable to read {path}: {e}") from e
        return records

    def delete(self, collection: str, resource: str) -> None:
        """Remove a resource file, or a whole sub-collection if ``resource`` names a directory."""
        _require("delete record", collection=collection, resource=resource)
        path = self._record_path(collection, resource)

        with self.locks.get(collection):
            found = resolve(path)
            if found.kind is PathKind.MISSING:
                raise NotFoundError(f"Unable to find file or directory named {collection}/{resource}")
            try:
                if found.kind is PathKind.DIRECTORY:
                    shutil.rmtree(found.path)
                else:
                    found.path.unlink()
            except OSError as e:
                raise StoreIOError(f"Unable to delete {found.path}: {e}") from e

        self.logger.debug("Deleted %s", found.path)
