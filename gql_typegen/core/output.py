"""Groups generated artifacts into output files."""

from graphql.utilities import strip_ignored_characters

from .artifacts import (
    ARTIFACT_KINDS,
    DISCRIMINANT_LITERAL,
    DISCRIMINANT_UNION,
    ENUM,
    FRAGMENT,
    INPUT_TYPE,
    OPERATION,
    OPERATION_VARIABLES,
    TYPE_HELPER,
    Artifact,
)
from .compiler import CollectedOperation
from .dependencies import FRAGMENT_USE, Dependency
from .emitter import Emitter
from .errors import NodeLocMissingError
from .hooks import HookRunner
from .naming import VariableNameMinifier

SECTION_LABELS = {
    TYPE_HELPER: "Type Helpers",
    ENUM: "Enums",
    DISCRIMINANT_LITERAL: "Object Types",
    DISCRIMINANT_UNION: "Interfaces & Unions",
    FRAGMENT: "Fragments",
    OPERATION: "Operations",
    OPERATION_VARIABLES: "Operation Variables",
    INPUT_TYPE: "Input Types",
}

# Kinds whose artifacts are single lines and are not separated by blank lines
COMPACT_KINDS = (TYPE_HELPER, DISCRIMINANT_LITERAL)

OPERATION_KINDS = ("query", "mutation", "subscription")

SECTION_RULE = "-" * 77

TYPES_FILENAME = "types.ts"
OPERATIONS_FILENAME = "operations.js"
OPERATION_TYPES_FILENAME = "operation-types.ts"


def _escape_template_literal(source: str) -> str:
    return source.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")


class GeneratorOutput:
    """The result of a build.

    Example:
        output = generator.build()
        Path("generated/types.ts").write_text(output.get_everything())
    """

    def __init__(
        self,
        artifacts: list[Artifact],
        operations: list[CollectedOperation],
        emitter: Emitter,
        hooks: HookRunner,
    ):
        order = {kind: position for position, kind in enumerate(ARTIFACT_KINDS)}
        self.artifacts = sorted(artifacts, key=lambda a: (order[a.kind], a.name))
        self.operations = sorted(operations, key=lambda o: (o.operation_type, o.graphql_name))
        self.emitter = emitter
        self.hooks = hooks

    def get_artifacts(self, kind: str | None = None) -> list[Artifact]:
        """All artifacts, sorted by kind and name, optionally of one kind only."""
        if kind is None:
            return list(self.artifacts)
        return [a for a in self.artifacts if a.kind == kind]

    def get_artifact(self, kind: str, name: str) -> Artifact | None:
        for artifact in self.artifacts:
            if artifact.kind == kind and artifact.name == name:
                return artifact
        return None

    def get_collected_operations(self) -> list[CollectedOperation]:
        return list(self.operations)

    def get_generated_code(self, kinds: tuple[str, ...] = ARTIFACT_KINDS) -> str:
        """Render the artifacts of the given kinds, one section per kind."""
        groups = []
        for kind in kinds:
            artifacts = self.get_artifacts(kind)
            if not artifacts:
                continue
            separator = "\n" if kind in COMPACT_KINDS else "\n\n"
            groups.append({
                "label": SECTION_LABELS[kind],
                "code": separator.join(a.code for a in artifacts),
            })
        return self.emitter.render_template("types.ts.j2", groups=groups, rule=SECTION_RULE)

    def get_everything(self) -> str:
        """All generated code in one file."""
        return self.hooks.run_post_hooks(TYPES_FILENAME, self.get_generated_code())

    def get_types(self) -> str:
        """All generated types, without enums (which are values)."""
        kinds = tuple(kind for kind in ARTIFACT_KINDS if kind != ENUM)
        return self.hooks.run_post_hooks(TYPES_FILENAME, self.get_generated_code(kinds))

    def get_operations_file(self, minify: bool = False) -> str:
        """A module exporting the source of every operation, with its fragments.

        Args:
            minify: Use short variable names for fragments instead of
                ``fragment_<Name>``

        Raises:
            NodeLocMissingError: If a document was parsed without locations
        """
        minifier = VariableNameMinifier()

        def variable(fragment_name: str) -> str:
            name = f"fragment_{fragment_name}"
            return minifier.get(name) if minify else name

        fragments = []
        for artifact in self.get_artifacts(FRAGMENT):
            if artifact.source is None:
                raise NodeLocMissingError(artifact.graphql_name, artifact.source_file)
            fragments.append({
                "variable": variable(artifact.graphql_name),
                "source": _escape_template_literal(strip_ignored_characters(artifact.source)),
            })

        operations = []
        for operation in self.operations:
            if operation.source is None:
                raise NodeLocMissingError(operation.graphql_name, operation.source_file)
            used = {
                dependency.name
                for dependency in map(Dependency.from_key, operation.dependencies)
                if dependency.kind == FRAGMENT_USE
            }
            operations.append({
                "kind": operation.operation_type,
                "name": operation.graphql_name,
                "source": _escape_template_literal(strip_ignored_characters(operation.source)),
                "fragments": [variable(name) for name in sorted(used)],
            })

        kinds = [
            {"name": kind, "operations": [o for o in operations if o["kind"] == kind]}
            for kind in OPERATION_KINDS
        ]
        content = self.emitter.render_template(
            "operations.js.j2",
            fragments=fragments,
            operations=operations,
            kinds=kinds,
        )
        return self.hooks.run_post_hooks(OPERATIONS_FILENAME, content)

    def get_operation_types(self, import_from: str | None = None) -> str:
        """A map from operation names to their response and variables types.

        Args:
            import_from: Module to import the generated types from, if they
                live in another file
        """
        imports = sorted(
            {o.type_name for o in self.operations} | {o.variables_type_name for o in self.operations}
        )
        kinds = [
            {
                "type_name": kind.capitalize(),
                "operations": [o for o in self.operations if o.operation_type == kind],
            }
            for kind in OPERATION_KINDS
        ]
        content = self.emitter.render_template(
            "operation_types.ts.j2",
            import_from=import_from,
            imports=imports,
            kinds=kinds,
        )
        return self.hooks.run_post_hooks(OPERATION_TYPES_FILENAME, content)
