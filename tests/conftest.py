"""Shared fixtures for gql-typegen tests."""

import pytest
from graphql import build_schema

from gql_typegen.core.documents import GeneratorInput
from gql_typegen.core.generator import Generator

SCHEMA_SDL = '''
interface Entity {
  id: ID!
}

type User implements Entity {
  id: ID!
  "The display name."
  name: String
  email: String!
  role: Role!
  friends: [User!]
  tags: [String]!
}

type Comment implements Entity {
  id: ID!
  body: String
  author: User
}

interface Node {
  id: ID!
  title: String
}

type NodePage implements Node {
  id: ID!
  title: String
  path: String!
}

type NodeArticle implements Node {
  id: ID!
  title: String
  body: String
  author: User
}

type NodeVideo implements Node {
  id: ID!
  title: String
  duration: Int
}

type NodeEvent implements Node {
  id: ID!
  title: String
  startsAt: DateTime
}

union SearchResult = User | Comment

enum Role {
  ADMIN
  EDITOR
  VIEWER
}

scalar DateTime

input UserFilter {
  role: Role
  name: String
  ids: [ID!]
  and: [UserFilter!]
}

type Query {
  getRandomEntity: Entity
  user(id: ID!): User
  users(filter: UserFilter, limit: Int): [User!]!
  search(text: String!): [SearchResult!]!
  node(id: ID!): Node
}
'''

# Options that keep generated code free of doc comments
PLAIN_OUTPUT = {"type_comment": False, "field_description": False}


@pytest.fixture
def schema():
    """The schema shared by most tests."""
    return build_schema(SCHEMA_SDL)


@pytest.fixture
def make_generator(schema):
    """Factory for generators over the shared schema without doc comments."""

    def factory(**output):
        options = {"output": {**PLAIN_OUTPUT, **output}}
        return Generator(schema, options)

    return factory


@pytest.fixture
def compile_document(make_generator):
    """Build a single document and return the output."""

    def compile(source: str, file_path: str = "document.graphql", **output):
        generator = make_generator(**output)
        generator.add(GeneratorInput.from_source(source, file_path))
        return generator.build()

    return compile


@pytest.fixture
def schema_file(tmp_path):
    """The shared schema written to a file."""
    path = tmp_path / "schema.graphql"
    path.write_text(SCHEMA_SDL)
    return path
