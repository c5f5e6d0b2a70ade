"""Tests for the Generator: incremental builds, output files and errors."""

import logging

import pytest
from graphql import build_schema, parse

from gql_typegen.core.artifacts import FRAGMENT, OPERATION
from gql_typegen.core.documents import GeneratorInput
from gql_typegen.core.errors import (
    DependencyTrackingError,
    DuplicateInputDocumentError,
    FieldNotFoundError,
    InvalidOptionError,
    LogicError,
    MissingRootTypeError,
    NodeLocMissingError,
)
from gql_typegen.core.generator import Generator
from gql_typegen.core.hooks import AddHeaderHook

FRAGMENTS = """
fragment UserName on User {
  name
}

fragment UserCard on User {
  ...UserName
  email
  role
}
"""

QUERIES = """
query getUser($id: ID!) {
  user(id: $id) {
    id
    ...UserCard
  }
}

query random {
  getRandomEntity {
    __typename
    ... on User { ...UserName }
    ... on Comment { body }
  }
}
"""

OTHER_QUERIES = """
query getNode {
  node(id: 1) {
    __typename
    id
    ... on NodePage { path }
  }
}
"""


def documents():
    return [
        GeneratorInput.from_source(FRAGMENTS, "fragments.graphql"),
        GeneratorInput.from_source(QUERIES, "queries.graphql"),
        GeneratorInput.from_source(OTHER_QUERIES, "other.graphql"),
    ]


def generate_from_scratch(schema, docs, **options) -> str:
    generator = Generator(schema, options or None)
    generator.add(docs)
    return generator.build().get_everything()


# =============================================================================
# Building
# =============================================================================


class TestBuild:
    """Tests for building output."""

    def test_generate_once(self, schema):
        code = Generator.generate_once(schema, documents())
        assert "export type GetUserQuery = " in code
        assert "export type UserCardFragment = " in code
        assert "export type RandomQueryVariables = Exact<{ [key: string]: never }>;" in code

    def test_build_is_idempotent(self, schema):
        generator = Generator(schema)
        generator.add(documents())
        first = generator.build().get_everything()
        second = generator.build().get_everything()
        assert first == second

    def test_build_keeps_dependency_sets(self, schema):
        generator = Generator(schema)
        generator.add(documents())
        first = {(a.kind, a.name): a.dependencies for a in generator.build().get_artifacts()}
        second = {(a.kind, a.name): a.dependencies for a in generator.build().get_artifacts()}
        assert first == second
        assert "file:fragments.graphql" in first[(OPERATION, "GetUserQuery")]

    def test_output_is_deterministic(self, schema):
        assert generate_from_scratch(schema, documents()) == generate_from_scratch(schema, documents())

    def test_document_order_does_not_matter(self, schema):
        assert generate_from_scratch(schema, documents()) == generate_from_scratch(
            schema, list(reversed(documents()))
        )

    def test_cache_does_not_change_output(self, schema):
        cached = generate_from_scratch(schema, documents(), use_cache=True)
        uncached = generate_from_scratch(schema, documents(), use_cache=False)
        assert cached == uncached

    def test_accepts_source_strings(self, schema):
        generator = Generator(schema)
        generator.add("query getUser { user(id: 1) { id } }")
        output = generator.build()
        assert output.get_artifact(OPERATION, "GetUserQuery").source_file == "no-file-path"

    def test_anonymous_operations_are_skipped(self, schema, caplog):
        generator = Generator(schema)
        generator.add("{ user(id: 1) { id } }")
        with caplog.at_level(logging.DEBUG, logger="gql_typegen"):
            output = generator.build()
        assert output.get_collected_operations() == []
        assert "Skipping anonymous query" in caplog.text

    def test_skip_unused_fragments(self, schema):
        generator = Generator(schema, {"skip_unused_fragments": True})
        generator.add([
            GeneratorInput.from_source("fragment Unused on User { id }", "unused.graphql"),
            GeneratorInput.from_source(FRAGMENTS + QUERIES, "queries.graphql"),
        ])
        output = generator.build()
        names = [a.name for a in output.get_artifacts(FRAGMENT)]
        assert names == ["UserCardFragment", "UserNameFragment"]

    def test_doc_comments(self, schema):
        generator = Generator(schema)
        generator.add(GeneratorInput.from_source("fragment UserName on User { name }", "user.graphql"))
        code = generator.build().get_artifact(FRAGMENT, "UserNameFragment").code
        assert code == (
            "/**\n"
            " * @see {@link user.graphql}\n"
            " *\n"
            " * @example\n"
            " * ```graphql\n"
            " * fragment UserName on User { name }\n"
            " * ```\n"
            " */\n"
            "export type UserNameFragment = {\n"
            "  /** The display name. */\n"
            "  name?: string;\n"
            "};"
        )

    def test_debug_mode_logs_counters(self, schema, caplog):
        generator = Generator(schema, {"debug_mode": True})
        generator.add(documents())
        with caplog.at_level(logging.INFO, logger="gql_typegen"):
            generator.build()
        assert "cache:" in caplog.text


# =============================================================================
# Incremental updates
# =============================================================================


class TestIncremental:
    """Tests for adding, updating and removing documents."""

    def test_add_after_build(self, schema):
        docs = documents()
        generator = Generator(schema)
        generator.add(docs[:2])
        generator.build()
        generator.add(docs[2])
        assert generator.build().get_everything() == generate_from_scratch(schema, docs)

    def test_update_matches_fresh_build(self, schema):
        docs = documents()
        generator = Generator(schema)
        generator.add(docs)
        generator.build()

        changed = GeneratorInput.from_source(FRAGMENTS.replace("email", "email\n  tags"), "fragments.graphql")
        generator.update(changed)
        incremental = generator.build().get_everything()

        assert incremental == generate_from_scratch(schema, [changed, docs[1], docs[2]])
        assert "tags: Array<string | null>;" in incremental

    def test_update_purges_dependents_only(self, schema):
        generator = Generator(schema)
        generator.add(documents())
        generator.build()

        generator.update(GeneratorInput.from_source(FRAGMENTS, "fragments.graphql"))
        assert generator.artifacts.get(FRAGMENT, "UserCard") is None
        assert generator.artifacts.get(OPERATION, "getUser") is None
        assert generator.artifacts.get(OPERATION, "getNode") is not None

    def test_remove(self, schema):
        docs = documents()
        generator = Generator(schema)
        generator.add(docs)
        generator.build()

        generator.remove("other.graphql")
        output = generator.build()

        assert output.get_artifact(OPERATION, "GetNodeQuery") is None
        assert [o.graphql_name for o in output.get_collected_operations()] == ["getUser", "random"]
        assert output.get_everything() == generate_from_scratch(schema, docs[:2])

    def test_remove_purges_file_dependents(self, schema):
        generator = Generator(schema)
        generator.add(documents())
        generator.build()
        assert any("file:fragments.graphql" in a.dependencies for a in generator.artifacts)

        generator.remove("fragments.graphql")

        assert all("file:fragments.graphql" not in a.dependencies for a in generator.artifacts)
        assert generator.artifacts.get(OPERATION, "getNode") is not None

    def test_without_dependency_tracking(self, schema):
        docs = documents()
        generator = Generator(schema, {"dependency_tracking": False})
        generator.add(docs)
        output = generator.build()

        assert output.get_everything() == generate_from_scratch(schema, docs)
        assert all(not key.startswith("file:") for a in output.get_artifacts() for key in a.dependencies)
        assert "+ fragment_UserCard + fragment_UserName;" in output.get_operations_file()

        changed = GeneratorInput.from_source(FRAGMENTS.replace("email", "email\n  tags"), "fragments.graphql")
        generator.update(changed)
        assert len(generator.artifacts) == 0
        assert generator.build().get_everything() == generate_from_scratch(schema, [changed, docs[1], docs[2]])

        generator.remove("other.graphql")
        assert len(generator.artifacts) == 0
        assert generator.build().get_artifact(OPERATION, "GetNodeQuery") is None

    def test_update_schema(self, schema):
        generator = Generator(schema)
        generator.add("query getUser { user(id: 1) { id } }")
        generator.build()

        generator.update_schema(build_schema("type Query { user(id: ID!): User } type User { id: Int! }"))
        assert "id: number;" in generator.build().get_everything()

    def test_reset(self, schema):
        generator = Generator(schema)
        generator.add(documents())
        generator.build()
        generator.reset()
        assert generator.input_documents == {}
        assert generator.build().get_artifacts() == []


# =============================================================================
# Output files
# =============================================================================


class TestOutput:
    """Tests for the files produced from a build."""

    def test_sections_in_kind_order(self, schema):
        code = generate_from_scratch(schema, documents())
        positions = [
            code.index(label)
            for label in ("// Type Helpers", "// Enums", "// Object Types", "// Fragments", "// Operations")
        ]
        assert positions == sorted(positions)
        assert code.endswith("\n")

    def test_get_types_has_no_enums(self, schema):
        generator = Generator(schema)
        generator.add(documents())
        output = generator.build()
        assert "export const Role" in output.get_everything()
        assert "export const Role" not in output.get_types()

    def test_hooks_run_on_every_file(self, schema):
        generator = Generator(schema, {"hooks": [AddHeaderHook("// generated")]})
        generator.add(documents())
        output = generator.build()
        assert output.get_everything().startswith("// generated\n\n")
        assert output.get_operations_file().startswith("// generated\n\n")
        assert output.get_operation_types().startswith("// generated\n\n")

    def test_operations_file(self, schema):
        generator = Generator(schema)
        generator.add(documents())
        content = generator.build().get_operations_file()

        assert "const fragment_UserName = `fragment UserName on User{name}`;" in content
        assert "const query_getUser = `query getUser($id:ID!){user(id:$id){id ...UserCard}}`" in content
        assert "+ fragment_UserCard + fragment_UserName;" in content
        assert "    getNode: query_getNode,\n" in content

    def test_minified_operations_file(self, schema):
        generator = Generator(schema)
        generator.add(documents())
        content = generator.build().get_operations_file(minify=True)

        assert "const a = `fragment UserCard on User{" in content
        assert "const b = `fragment UserName on User{name}`;" in content
        assert "+ a + b;" in content
        assert "fragment_" not in content
        assert "    getUser: query_getUser,\n" in content

    def test_operations_file_needs_locations(self, schema):
        generator = Generator(schema)
        generator.add(parse("query getUser { user(id: 1) { id } }", no_location=True))
        with pytest.raises(NodeLocMissingError):
            generator.build().get_operations_file()

    def test_operation_types(self, schema):
        generator = Generator(schema)
        generator.add(documents())
        content = generator.build().get_operation_types(import_from="./types")

        assert content.startswith("import type {\n  GetNodeQuery,\n")
        assert "} from './types';" in content
        assert (
            "  getUser: {\n"
            "    response: GetUserQuery;\n"
            "    variables: GetUserQueryVariables;\n"
            "    needsVariables: true;\n"
            "  };\n"
        ) in content
        assert "export type Mutation = {\n};" in content


# =============================================================================
# Errors
# =============================================================================


class TestErrors:
    """Tests for error handling."""

    def test_duplicate_document(self, schema):
        generator = Generator(schema)
        generator.add(GeneratorInput.from_source("query a { user(id: 1) { id } }", "a.graphql"))
        with pytest.raises(DuplicateInputDocumentError, match="a.graphql"):
            generator.add(GeneratorInput.from_source("query b { user(id: 1) { id } }", "a.graphql"))

    def test_update_unknown_document(self, schema):
        generator = Generator(schema)
        with pytest.raises(LogicError):
            generator.update(GeneratorInput.from_source("query a { user(id: 1) { id } }", "a.graphql"))

    def test_missing_root_type(self, schema):
        generator = Generator(schema)
        generator.add(GeneratorInput.from_source("mutation save { user(id: 1) { id } }", "save.graphql"))
        with pytest.raises(MissingRootTypeError) as excinfo:
            generator.build()
        assert excinfo.value.operation_type == "mutation"
        assert excinfo.value.file_path == "save.graphql"

    def test_unfinished_scopes(self, schema):
        generator = Generator(schema)
        generator.add("query getUser { user(id: 1) { id } }")
        generator.dependency_tracker.start()
        with pytest.raises(DependencyTrackingError):
            generator.build()

    def test_error_resets_generated_state(self, schema):
        generator = Generator(schema)
        generator.add("query getUser { user(id: 1) { id } }")
        generator.build()
        generator.add(GeneratorInput.from_source("query broken { user(id: 1) { nope } }", "broken.graphql"))

        with pytest.raises(FieldNotFoundError):
            generator.build()

        assert len(generator.artifacts) == 0
        assert len(generator.input_documents) == 2

    def test_invalid_options(self, schema):
        with pytest.raises(InvalidOptionError, match="output.array_shape"):
            Generator(schema, {"output": {"array_shape": "Foobar"}})
