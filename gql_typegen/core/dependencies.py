"""Dependency tracking for incremental generation.

Every artifact records which files, types and fragments it was derived
from, so that changing a single document only invalidates what depends on
it. Dependencies are plain string keys of the form ``"<kind>:<name>"``.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterable, Iterator, MutableMapping, Protocol

from .errors import LogicError

NO_FILE_PATH = "no-file-path"

KEY_SEPARATOR = ":"

FILE = "file"
FRAGMENT_USE = "fragment-use"


def to_dependency_key(kind: str, name: str) -> str:
    """Build a dependency key, e.g. ``file:queries/user.graphql``."""
    return f"{kind}{KEY_SEPARATOR}{name}"


def file_dependency_key(file_path: str) -> str:
    return to_dependency_key(FILE, file_path)


@dataclass(frozen=True)
class Dependency:
    """A parsed dependency key."""
    kind: str
    name: str

    @classmethod
    def from_key(cls, key: str) -> "Dependency":
        kind, _, name = key.partition(KEY_SEPARATOR)
        return cls(kind=kind, name=name)


class DependencyAware(Protocol):
    """Anything that remembers the file it came from and what it depends on."""

    source_file: str
    dependencies: tuple[str, ...]


def depends_on_file(item: DependencyAware, file_path: str) -> bool:
    return item.source_file == file_path or file_dependency_key(file_path) in item.dependencies


def purge_entries(entries: MutableMapping, file_path: str) -> int:
    """Remove every entry originating from or depending on a file.

    Returns:
        The number of removed entries.
    """
    stale = [key for key, item in entries.items() if depends_on_file(item, file_path)]
    for key in stale:
        del entries[key]
    return len(stale)


@dataclass
class _Scope:
    file_path: str
    keys: dict[str, None]


class DependencyTracker:
    """Collects dependency keys in a stack of nested scopes.

    Opening a scope while another is open nests it: when the inner scope ends,
    its keys bubble up into the outer one. Merging recorded dependencies (e.g.
    on a cache hit) copies them into every open scope.

    A disabled tracker still keeps its scopes and current file but only
    records fragment uses, which the operations file is built from.

    Example:
        tracker.start("queries/user.graphql")
        tracker.add("enum", "Role")
        keys = tracker.end()  # ("enum:Role", "file:queries/user.graphql")
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._scopes: list[_Scope] = []
        self._current_file = NO_FILE_PATH

    @property
    def current_file(self) -> str:
        return self._current_file

    def _records(self, key: str) -> bool:
        return self.enabled or Dependency.from_key(key).kind == FRAGMENT_USE

    def has_open_scope(self) -> bool:
        return bool(self._scopes)

    def reset(self):
        self._scopes = []
        self._current_file = NO_FILE_PATH

    def start(self, file_path: str | None = None):
        """Open a new scope. Without a file path it inherits the current file."""
        if file_path:
            self._current_file = file_path
        scope = _Scope(file_path=self._current_file, keys={})
        self._scopes.append(scope)
        if file_path and self.enabled:
            scope.keys[file_dependency_key(file_path)] = None

    def add(self, kind: str, name: str):
        """Record a dependency in the innermost scope."""
        if not self._scopes:
            raise LogicError(
                f"Cannot add dependency {kind}:{name} without an open scope",
                self._current_file,
            )
        key = to_dependency_key(kind, name)
        if self._records(key):
            self._scopes[-1].keys[key] = None

    def add_fragment_use(self, fragment_name: str):
        self.add(FRAGMENT_USE, fragment_name)

    def merge(self, dependencies: Iterable[str] = (), file_path: str | None = None):
        """Copy recorded dependencies into every open scope."""
        if not self._scopes:
            raise LogicError("Cannot merge dependencies without an open scope", self._current_file)
        keys = list(dependencies)
        if file_path:
            keys.append(file_dependency_key(file_path))
        keys = [key for key in keys if self._records(key)]
        for scope in self._scopes:
            for key in keys:
                scope.keys[key] = None

    def end(self) -> tuple[str, ...]:
        """Close the innermost scope and return its dependency keys."""
        if not self._scopes:
            raise LogicError("Cannot end a scope that was never started", self._current_file)
        scope = self._scopes.pop()
        if self.enabled:
            scope.keys[file_dependency_key(scope.file_path)] = None
        keys = tuple(scope.keys)
        if self._scopes:
            self._current_file = self._scopes[-1].file_path
            self.merge(keys)
        return keys

    @contextmanager
    def scope(self, file_path: str | None = None) -> Iterator[list[str]]:
        """Run a block inside a scope; the yielded list receives the keys.

        The scope is closed even if the block raises.
        """
        keys: list[str] = []
        self.start(file_path)
        try:
            yield keys
        finally:
            keys.extend(self.end())
