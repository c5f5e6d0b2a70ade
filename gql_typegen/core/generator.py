"""Type generator for GraphQL documents.

Keeps the input documents and everything generated from them, so that
adding, updating or removing a single document only regenerates the types
that depend on it.

Example:
    generator = Generator(schema, {"output": {"array_shape": "[]"}})
    generator.add(GeneratorInput.from_source(source, "queries/user.graphql"))
    output = generator.build()
    print(output.get_everything())
"""

import logging

from graphql import GraphQLSchema

from .artifacts import ArtifactStore
from .cache import MemoizationCache
from .compiler import CollectedOperation, FragmentDefinition, SelectionCompiler
from .dependencies import DependencyTracker, purge_entries
from .documents import (
    GeneratorInput,
    InputDocuments,
    get_fragment_definitions,
    get_operation_definitions,
    to_input_documents,
)
from .emitter import Emitter
from .errors import DependencyTrackingError, DuplicateInputDocumentError, LogicError
from .hooks import HookRunner
from .options import GeneratorOptions, resolve_options
from .output import GeneratorOutput
from .schema import SchemaTypeIndex

logger = logging.getLogger(__name__)


class Generator:
    """Generates TypeScript types for GraphQL fragments and operations."""

    def __init__(
        self,
        schema: GraphQLSchema,
        options: GeneratorOptions | dict | None = None,
    ):
        """Initialize the generator.

        Args:
            schema: The schema all documents are validated against
            options: Generator options, as a model or a dict

        Raises:
            InvalidOptionError: If an option has an invalid value
        """
        self.options = resolve_options(options)
        self.schema = SchemaTypeIndex(schema)
        self.dependency_tracker = DependencyTracker(enabled=self.options.dependency_tracking)
        self.cache = MemoizationCache(self.dependency_tracker, enabled=self.options.use_cache)
        self.artifacts = ArtifactStore(self.dependency_tracker)
        self.emitter = Emitter(self.options.output, template_dir=self.options.template_dir)
        self.hooks = HookRunner(self.options.hooks)
        self.compiler = SelectionCompiler(
            schema=self.schema,
            options=self.options,
            tracker=self.dependency_tracker,
            cache=self.cache,
            artifacts=self.artifacts,
            emitter=self.emitter,
        )
        self.input_documents: dict[str, GeneratorInput] = {}
        self.operations: dict[str, CollectedOperation] = {}

    @classmethod
    def generate_once(
        cls,
        schema: GraphQLSchema,
        documents: InputDocuments,
        options: GeneratorOptions | dict | None = None,
    ) -> str:
        """Generate all types for a set of documents in one go."""
        generator = cls(schema, options)
        generator.add(documents)
        return generator.build().get_everything()

    # =========================================================================
    # Input documents
    # =========================================================================

    def add(self, documents: InputDocuments):
        """Add new documents.

        Raises:
            DuplicateInputDocumentError: If a document with the same file path exists
        """
        for document in to_input_documents(documents):
            if document.file_path in self.input_documents:
                raise DuplicateInputDocumentError(document.file_path)
            self.input_documents[document.file_path] = document

    def update(self, documents: InputDocuments):
        """Replace existing documents and discard everything derived from them."""
        for document in to_input_documents(documents):
            if document.file_path not in self.input_documents:
                raise LogicError("Cannot update a document that was never added", document.file_path)
            self._purge(document.file_path)
            self.input_documents[document.file_path] = document

    def remove(self, file_path: str):
        """Remove a document and everything derived from it."""
        self.input_documents.pop(file_path, None)
        self._purge(file_path)

    def _purge(self, file_path: str):
        if not self.options.dependency_tracking:
            self.reset_caches()
            logger.debug("Dependency tracking is off, discarded everything for %s", file_path)
            return
        removed = self.artifacts.purge(file_path)
        self.cache.purge(file_path)
        purge_entries(self.compiler.fragment_fields, file_path)
        purge_entries(self.operations, file_path)
        logger.debug("Purged %d artifacts for %s", removed, file_path)

    # =========================================================================
    # State
    # =========================================================================

    def reset_caches(self):
        """Discard everything generated, keeping the input documents."""
        self.artifacts.clear()
        self.cache.clear()
        self.compiler.reset()
        self.dependency_tracker.reset()
        self.operations = {}

    def reset(self):
        """Discard everything, including the input documents."""
        self.reset_caches()
        self.input_documents = {}

    def update_schema(self, schema: GraphQLSchema):
        """Switch to a new schema. Everything generated is discarded."""
        self.schema.update(schema)
        self.reset_caches()

    # =========================================================================
    # Build
    # =========================================================================

    def build(self) -> GeneratorOutput:
        """Generate types for all documents that aren't generated yet.

        Any error discards the generated state, so the next build starts over.

        Raises:
            DependencyTrackingError: If dependency scopes were left open
        """
        try:
            self._build()
        except Exception:
            self.reset_caches()
            raise

        if self.options.debug_mode:
            counters = dict(self.compiler.counters)
            logger.info(
                "Built %d artifacts (cache: %d hits, %d misses, compiled: %s)",
                len(self.artifacts),
                self.cache.hits,
                self.cache.misses,
                counters,
            )

        return GeneratorOutput(
            artifacts=list(self.artifacts),
            operations=list(self.operations.values()),
            emitter=self.emitter,
            hooks=self.hooks,
        )

    def _build(self):
        fragments = {}
        for document in self.input_documents.values():
            for definition in get_fragment_definitions(document.document_node):
                fragments[definition.name.value] = FragmentDefinition(
                    node=definition,
                    source_file=document.file_path,
                )
        self.compiler.fragments = fragments

        if not self.options.skip_unused_fragments:
            for document in self.input_documents.values():
                self.dependency_tracker.start(document.file_path)
                for definition in get_fragment_definitions(document.document_node):
                    self.compiler.generate_fragment(definition.name.value)
                self.dependency_tracker.end()

        for document in self.input_documents.values():
            self.dependency_tracker.start(document.file_path)
            for definition in get_operation_definitions(document.document_node):
                operation = self.compiler.generate_operation(definition, document.file_path)
                if operation is not None:
                    self.operations[operation.graphql_name] = operation
            self.dependency_tracker.end()

        if self.dependency_tracker.has_open_scope():
            raise DependencyTrackingError(self.dependency_tracker.current_file)
