"""Input documents and helpers for working with their AST."""

import os
from dataclasses import dataclass
from typing import Iterable, Union

from graphql import (
    DocumentNode,
    FieldNode,
    FragmentDefinitionNode,
    ListTypeNode,
    NonNullTypeNode,
    OperationDefinitionNode,
    SelectionNode,
    SelectionSetNode,
    TypeNode,
    parse,
    print_ast,
)

from .dependencies import NO_FILE_PATH

DOCUMENT_EXTENSIONS = (".graphql", ".gql")

# Directives that may remove a field from the response
CONDITIONAL_DIRECTIVES = ("skip", "include")


@dataclass
class GeneratorInput:
    """A parsed document and the file it was read from."""
    document_node: DocumentNode
    file_path: str = NO_FILE_PATH

    @classmethod
    def from_source(cls, source: str, file_path: str = NO_FILE_PATH) -> "GeneratorInput":
        return cls(document_node=parse(source), file_path=file_path)


InputDocuments = Union[str, DocumentNode, GeneratorInput, Iterable[Union[str, DocumentNode, GeneratorInput]]]


def to_input_documents(documents: InputDocuments) -> list[GeneratorInput]:
    """Normalize a source string, document node, input or list of them."""
    if isinstance(documents, (str, DocumentNode, GeneratorInput)):
        documents = [documents]
    result = []
    for document in documents:
        if isinstance(document, GeneratorInput):
            result.append(document)
        elif isinstance(document, DocumentNode):
            result.append(GeneratorInput(document_node=document))
        else:
            result.append(GeneratorInput.from_source(document))
    return result


def load_documents(path: str) -> list[GeneratorInput]:
    """Read every GraphQL document from a file or directory."""
    files = []
    if os.path.isfile(path):
        files.append(path)
    else:
        for root, _, filenames in os.walk(path):
            for filename in filenames:
                if filename.endswith(DOCUMENT_EXTENSIONS):
                    files.append(os.path.join(root, filename))

    documents = []
    for file_path in sorted(files):
        with open(file_path) as f:
            documents.append(GeneratorInput.from_source(f.read(), file_path))
    return documents


def get_fragment_definitions(document: DocumentNode) -> list[FragmentDefinitionNode]:
    return [d for d in document.definitions if isinstance(d, FragmentDefinitionNode)]


def get_operation_definitions(document: DocumentNode) -> list[OperationDefinitionNode]:
    return [d for d in document.definitions if isinstance(d, OperationDefinitionNode)]


def get_ast_source(node) -> str | None:
    """Return the source text of a node, or None if it was parsed without locations."""
    loc = node.loc
    if loc is None or loc.source is None:
        return None
    return loc.source.body[loc.start:loc.end]


def has_conditional_directive(node: SelectionNode) -> bool:
    """Check for @skip or @include, which make a selection optional."""
    return any(d.name.value in CONDITIONAL_DIRECTIVES for d in node.directives or ())


def selection_set_key(selection_set: SelectionSetNode) -> str:
    return print_ast(selection_set)


def response_key(node: FieldNode) -> str:
    return node.alias.value if node.alias else node.name.value


def named_type_name(type_node: TypeNode) -> str:
    """Name of the named type inside list and non-null wrappers."""
    while isinstance(type_node, (NonNullTypeNode, ListTypeNode)):
        type_node = type_node.type
    return type_node.name.value
