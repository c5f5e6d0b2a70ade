"""Core modules for GraphQL type generation."""

from .artifacts import Artifact, ArtifactStore
from .cache import MemoizationCache
from .compiler import CollectedOperation, SelectionCompiler
from .dependencies import DependencyTracker
from .documents import GeneratorInput, load_documents
from .emitter import Emitter
from .errors import (
    DependencyTrackingError,
    DuplicateInputDocumentError,
    FieldNotFoundError,
    FragmentNotFoundError,
    GeneratorError,
    InvalidOptionError,
    LogicError,
    MissingRootTypeError,
    NodeLocMissingError,
    TypeNotFoundError,
)
from .generator import Generator
from .hooks import (
    AddHeaderHook,
    ExternalFormatterHook,
    HookRunner,
    PostGenerateHook,
)
from .ir import (
    IRArray,
    IRDiscriminant,
    IRFragmentRef,
    IRIntersection,
    IRNode,
    IRObject,
    IRScalar,
    IRUnion,
)
from .naming import NamingConventions
from .options import GeneratorOptions, OutputOptions
from .output import GeneratorOutput
from .scalars import ScalarHandler, ScalarRegistry, TypeExpression
from .schema import SchemaTypeIndex, load_schema

__all__ = [
    # Generator
    "Generator",
    "GeneratorInput",
    "GeneratorOutput",
    "CollectedOperation",
    "load_documents",
    "load_schema",
    # Options
    "GeneratorOptions",
    "OutputOptions",
    "NamingConventions",
    # Scalars
    "ScalarHandler",
    "ScalarRegistry",
    "TypeExpression",
    # Hooks
    "PostGenerateHook",
    "AddHeaderHook",
    "ExternalFormatterHook",
    "HookRunner",
    # Internals
    "Artifact",
    "ArtifactStore",
    "DependencyTracker",
    "Emitter",
    "MemoizationCache",
    "SchemaTypeIndex",
    "SelectionCompiler",
    # IR types
    "IRArray",
    "IRDiscriminant",
    "IRFragmentRef",
    "IRIntersection",
    "IRNode",
    "IRObject",
    "IRScalar",
    "IRUnion",
    # Errors
    "GeneratorError",
    "DependencyTrackingError",
    "DuplicateInputDocumentError",
    "FieldNotFoundError",
    "FragmentNotFoundError",
    "InvalidOptionError",
    "LogicError",
    "MissingRootTypeError",
    "NodeLocMissingError",
    "TypeNotFoundError",
]
