"""Generated artifacts and the store that deduplicates them."""

import logging
from dataclasses import dataclass
from typing import Callable, Iterator

from .dependencies import (
    FRAGMENT_USE,
    Dependency,
    DependencyTracker,
    purge_entries,
    to_dependency_key,
)

logger = logging.getLogger(__name__)

# Artifact kinds
ENUM = "enum"
INPUT_TYPE = "input-type"
FRAGMENT = "fragment"
OPERATION = "operation"
OPERATION_VARIABLES = "operation-variables"
DISCRIMINANT_LITERAL = "discriminant-literal"
DISCRIMINANT_UNION = "discriminant-union"
TYPE_HELPER = "type-helper"

ARTIFACT_KINDS = (
    TYPE_HELPER,
    ENUM,
    DISCRIMINANT_LITERAL,
    DISCRIMINANT_UNION,
    FRAGMENT,
    OPERATION,
    OPERATION_VARIABLES,
    INPUT_TYPE,
)


@dataclass
class ArtifactDraft:
    """What a build callback returns; the store fills in the rest."""
    name: str
    code: str
    graphql_name: str | None = None
    source: str | None = None
    identifier: str | None = None


@dataclass
class Artifact:
    """A generated piece of code, e.g. one type alias."""
    id: str
    kind: str
    name: str
    code: str
    source_file: str
    dependencies: tuple[str, ...]
    graphql_name: str | None = None
    source: str | None = None
    identifier: str | None = None

    def get_dependencies(self, kind: str | None = None) -> list[Dependency]:
        """Parsed dependencies, optionally only those of one kind."""
        dependencies = [Dependency.from_key(key) for key in self.dependencies]
        if kind is None:
            return dependencies
        return [d for d in dependencies if d.kind == kind]

    def fragment_dependencies(self) -> list[str]:
        """Names of all fragments used, directly or through other fragments."""
        return [d.name for d in self.get_dependencies(FRAGMENT_USE)]


class ArtifactStore:
    """Registry of generated artifacts, each generated at most once.

    Example:
        name = store.generate_once(ENUM, "Role", lambda: ArtifactDraft("Role", code))
    """

    def __init__(self, tracker: DependencyTracker):
        self.tracker = tracker
        self._artifacts: dict[tuple[str, str], Artifact] = {}

    def __len__(self) -> int:
        return len(self._artifacts)

    def __iter__(self) -> Iterator[Artifact]:
        return iter(self._artifacts.values())

    def __contains__(self, key: tuple[str, str]) -> bool:
        return key in self._artifacts

    def get(self, kind: str, key: str) -> Artifact | None:
        return self._artifacts.get((kind, key))

    def generate_once(
        self,
        kind: str,
        key: str,
        build: Callable[[], ArtifactDraft],
        file_path: str | None = None,
    ) -> str:
        """Return the name of an artifact, building it on first request.

        The artifact's dependencies are recorded in the active scopes, whether
        it was built now or earlier.

        Args:
            kind: Artifact kind, e.g. ENUM
            key: Unique key within the kind, usually the GraphQL name
            build: Callback producing the artifact
            file_path: File the artifact is defined in; defaults to the current file
        """
        existing = self._artifacts.get((kind, key))
        if existing is not None:
            self.tracker.merge(existing.dependencies, existing.source_file)
            return existing.name

        self.tracker.start(file_path)
        source_file = self.tracker.current_file
        draft = build()
        self.tracker.add(kind, draft.name)
        dependencies = self.tracker.end()

        self._artifacts[(kind, key)] = Artifact(
            id=to_dependency_key(kind, draft.name),
            kind=kind,
            name=draft.name,
            code=draft.code,
            source_file=source_file,
            dependencies=dependencies,
            graphql_name=draft.graphql_name,
            source=draft.source,
            identifier=draft.identifier,
        )
        logger.debug("Generated %s %s", kind, draft.name)
        return draft.name

    def purge(self, file_path: str) -> int:
        return purge_entries(self._artifacts, file_path)

    def clear(self):
        self._artifacts = {}
