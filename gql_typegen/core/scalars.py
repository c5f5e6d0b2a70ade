"""Scalar type mapping for GraphQL code generation.

Maps GraphQL scalars to the TypeScript types used in generated code.

Example usage:
    from gql_typegen.core.scalars import ScalarHandler, ScalarRegistry

    # Create custom handler
    class DateTimeHandler(ScalarHandler):
        type_expr = "string"
        description = "ISO 8601 date and time"

    registry = ScalarRegistry()
    registry.register("DateTime", DateTimeHandler())
"""

from typing import Protocol, runtime_checkable

# Used for scalars without a registered handler
FALLBACK_TYPE = "any"


@runtime_checkable
class ScalarHandler(Protocol):
    """Protocol for scalar handlers.

    Implement this protocol to define how a GraphQL scalar maps to TypeScript.

    Attributes:
        type_expr: The TypeScript type expression (e.g., "string", "Date")
    """

    type_expr: str


class TypeExpression:
    """Handler mapping a scalar to a fixed TypeScript type.

    Example:
        registry.register("Upload", TypeExpression("File"))
    """

    def __init__(self, type_expr: str):
        self.type_expr = type_expr

    def __repr__(self) -> str:
        return f"TypeExpression({self.type_expr!r})"


class ScalarRegistry:
    """Registry for scalar handlers.

    Manages the mapping between GraphQL scalar names and their handlers.

    Example:
        registry = ScalarRegistry()
        registry.register("DateTime", TypeExpression("string"))

        registry.type_for("DateTime")  # "string"
        registry.type_for("Unknown")   # "any"
    """

    def __init__(self):
        self._handlers: dict[str, ScalarHandler] = {}
        # Register default handlers
        self._register_defaults()

    def _register_defaults(self):
        """Register handlers for the built-in GraphQL scalars."""
        self.register("ID", TypeExpression("string | number"))
        self.register("String", TypeExpression("string"))
        self.register("Boolean", TypeExpression("boolean"))
        self.register("Int", TypeExpression("number"))
        self.register("Float", TypeExpression("number"))

    def register(self, scalar_name: str, handler: ScalarHandler | str):
        """Register a handler, or a plain type expression, for a scalar type."""
        if isinstance(handler, str):
            handler = TypeExpression(handler)
        self._handlers[scalar_name] = handler

    def get(self, scalar_name: str) -> ScalarHandler | None:
        """Get the handler for a scalar type, or None if not registered."""
        return self._handlers.get(scalar_name)

    def has(self, scalar_name: str) -> bool:
        """Check if a handler is registered for a scalar type."""
        return scalar_name in self._handlers

    def type_for(self, scalar_name: str) -> str:
        """Get the TypeScript type for a scalar, falling back to ``any``."""
        handler = self.get(scalar_name)
        if handler is None:
            return FALLBACK_TYPE
        return handler.type_expr
