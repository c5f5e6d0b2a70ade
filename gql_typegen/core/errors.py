"""Errors raised while generating types.

Every error keeps the file that was being processed when it was raised,
so callers can point the user at the offending document.
"""


class GeneratorError(Exception):
    """Base class for all generator errors."""

    def __init__(self, message: str, file_path: str | None = None):
        self.message = message
        self.file_path = file_path
        if file_path:
            message = f"{message} (in {file_path})"
        super().__init__(message)


class TypeNotFoundError(GeneratorError):
    """A type name does not exist in the schema."""

    def __init__(self, type_name: str, file_path: str | None = None):
        self.type_name = type_name
        super().__init__(f"Type not found: {type_name}", file_path)


class FragmentNotFoundError(GeneratorError):
    """A fragment spread references an unknown fragment."""

    def __init__(self, fragment_name: str, file_path: str | None = None):
        self.fragment_name = fragment_name
        super().__init__(f"Fragment not found: {fragment_name}", file_path)


class FieldNotFoundError(GeneratorError):
    """A selected field does not exist on its parent type."""

    def __init__(self, field_name: str, type_name: str, file_path: str | None = None):
        self.field_name = field_name
        self.type_name = type_name
        super().__init__(f'Field "{field_name}" not found on type "{type_name}"', file_path)


class MissingRootTypeError(GeneratorError):
    """The schema has no root type for an operation's kind."""

    def __init__(self, operation_name: str, operation_type: str, file_path: str | None = None):
        self.operation_name = operation_name
        self.operation_type = operation_type
        super().__init__(
            f'Missing root type "{operation_type}" for operation "{operation_name}"',
            file_path,
        )


class DuplicateInputDocumentError(GeneratorError):
    """A document was added for a file path that is already registered."""

    def __init__(self, file_path: str):
        super().__init__(
            f"Input document already exists. Use update() to replace it: {file_path}",
            file_path,
        )


class LogicError(GeneratorError):
    """Internal invariant violated, e.g. a circular fragment or tracker misuse."""


class DependencyTrackingError(GeneratorError):
    """The dependency tracker still had open scopes after a build."""

    def __init__(self, file_path: str | None = None):
        super().__init__("Dependency tracker has unfinished scopes after build", file_path)


class NodeLocMissingError(GeneratorError):
    """A document node was parsed without location info, so its source is unknown."""

    def __init__(self, name: str, file_path: str | None = None):
        self.name = name
        super().__init__(f'Missing source location for "{name}"', file_path)


class InvalidOptionError(GeneratorError):
    """An option has an invalid value."""

    def __init__(self, option: str, message: str):
        self.option = option
        super().__init__(f'Invalid option "{option}": {message}')
