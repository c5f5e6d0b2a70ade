"""Schema loading and lookups.

Wraps a graphql-core ``GraphQLSchema`` with the precomputed lookups the
compiler needs for polymorphic selections.
"""

import os

from graphql import (
    GraphQLNamedType,
    GraphQLObjectType,
    GraphQLSchema,
    OperationType,
    build_schema,
    is_abstract_type,
)

from .errors import TypeNotFoundError

SCHEMA_EXTENSIONS = (".graphql", ".graphqls")


def _collect_schema_files(schema_path: str) -> list[str]:
    """Collect all schema files from a file or directory path."""
    files = []
    if os.path.isfile(schema_path):
        files.append(schema_path)
    else:
        for root, _, filenames in os.walk(schema_path):
            for filename in filenames:
                if filename.endswith(SCHEMA_EXTENSIONS):
                    files.append(os.path.join(root, filename))
    return sorted(files)


def load_schema(schema_path: str) -> GraphQLSchema:
    """Build a schema from an SDL file or a directory of SDL files."""
    sources = []
    for file_path in _collect_schema_files(schema_path):
        with open(file_path) as f:
            sources.append(f.read())
    return build_schema("\n".join(sources))


class SchemaTypeIndex:
    """Precomputed view of a schema.

    Keeps the possible concrete type names of every abstract type and a flat
    set of ``"abstract---concrete"`` keys for constant-time implements checks.

    Example:
        index = SchemaTypeIndex(schema)
        index.get_possible_concrete_names("Entity")  # ["User", "Comment"]
        index.object_implements("User", "Entity")    # True
    """

    def __init__(self, schema: GraphQLSchema):
        self.schema = schema
        self._implementations: set[str] = set()
        self._possible_types: dict[str, list[str]] = {}
        self._build()

    def _build(self):
        self._implementations = set()
        self._possible_types = {}
        for graphql_type in self.schema.type_map.values():
            if not is_abstract_type(graphql_type):
                continue
            names = [t.name for t in self.schema.get_possible_types(graphql_type)]
            self._possible_types[graphql_type.name] = names
            for name in names:
                self._implementations.add(self._implements_key(graphql_type.name, name))

    @staticmethod
    def _implements_key(abstract_name: str, concrete_name: str) -> str:
        return f"{abstract_name}---{concrete_name}"

    def update(self, schema: GraphQLSchema) -> "SchemaTypeIndex":
        """Replace the schema and rebuild every lookup."""
        self.schema = schema
        self._build()
        return self

    def get_type(self, name: str) -> GraphQLNamedType:
        """Get a named type, raising TypeNotFoundError if it doesn't exist."""
        graphql_type = self.schema.get_type(name)
        if graphql_type is None:
            raise TypeNotFoundError(name)
        return graphql_type

    def get_root_type(self, kind: OperationType | str) -> GraphQLObjectType | None:
        """Get the root type for an operation kind, or None if the schema has none."""
        try:
            operation = OperationType(kind)
        except ValueError:
            return None
        return self.schema.get_root_type(operation)

    def get_possible_concrete_names(self, abstract_name: str) -> list[str]:
        """Names of the object types an interface or union can resolve to."""
        return list(self._possible_types.get(abstract_name, []))

    def get_possible_types(self, abstract_name: str) -> list[GraphQLObjectType]:
        """Object types an interface or union can resolve to."""
        return [self.get_type(name) for name in self._possible_types.get(abstract_name, [])]

    def object_implements(self, concrete_name: str, abstract_name: str) -> bool:
        """Check whether an object type is a possible type of an abstract type."""
        return self._implements_key(abstract_name, concrete_name) in self._implementations
