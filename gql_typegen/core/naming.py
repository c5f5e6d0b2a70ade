"""Naming conventions for generated types.

Subclass NamingConventions to change how generated types are named:

    class PrefixedNames(NamingConventions):
        def fragment_type_name(self, fragment_name: str) -> str:
            return "Gql" + super().fragment_type_name(fragment_name)
"""

import re


def to_snake_case(name: str) -> str:
    """Convert camelCase or PascalCase to snake_case."""
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    s2 = re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1)
    # Separate letters from digits so "user2fa" becomes "user_2_fa"
    s3 = re.sub("([a-zA-Z])([0-9])", r"\1_\2", s2)
    s4 = re.sub("([0-9])([a-zA-Z])", r"\1_\2", s3)
    return re.sub(r"[\W_]+", "_", s4).strip("_").lower()


def to_pascal_case(name: str) -> str:
    """Convert snake_case, camelCase or SCREAMING_CASE to PascalCase."""
    return "".join(word.capitalize() for word in to_snake_case(name).split("_"))


class NamingConventions:
    """Builds the names of generated types from GraphQL names."""

    def operation_type_name(self, operation_name: str, root_type_name: str) -> str:
        """e.g. ``getUser`` on ``Query`` becomes ``GetUserQuery``."""
        return to_pascal_case(operation_name) + root_type_name

    def operation_variables_type_name(self, operation_name: str, root_type_name: str) -> str:
        return self.operation_type_name(operation_name, root_type_name) + "Variables"

    def fragment_type_name(self, fragment_name: str) -> str:
        return to_pascal_case(fragment_name) + "Fragment"

    def input_type_name(self, type_name: str) -> str:
        name = to_pascal_case(type_name)
        if name.endswith("Input"):
            return name
        return name + "Input"

    def enum_type_name(self, type_name: str) -> str:
        return to_pascal_case(type_name)


# Words that can't be used as JavaScript variable names
RESERVED_WORDS = frozenset([
    "await", "break", "case", "catch", "class", "const", "continue", "debugger",
    "default", "delete", "do", "else", "enum", "export", "extends", "false",
    "finally", "for", "function", "if", "import", "in", "instanceof", "let",
    "new", "null", "return", "static", "super", "switch", "this", "throw",
    "true", "try", "typeof", "var", "void", "while", "with", "yield",
])


def short_name(index: int) -> str:
    """Bijective base-26 name: 0 is ``a``, 25 is ``z``, 26 is ``aa``."""
    name = ""
    while index >= 0:
        name = chr(ord("a") + index % 26) + name
        index = index // 26 - 1
    return name


class VariableNameMinifier:
    """Hands out short JavaScript variable names, one per original name.

    Example:
        minifier = VariableNameMinifier()
        minifier.get("fragment_UserName")  # "a"
        minifier.get("fragment_UserCard")  # "b"
        minifier.get("fragment_UserName")  # "a"
    """

    def __init__(self):
        self._names: dict[str, str] = {}
        self._index = 0

    def get(self, name: str) -> str:
        if name not in self._names:
            candidate = short_name(self._index)
            self._index += 1
            while candidate in RESERVED_WORDS:
                candidate = short_name(self._index)
                self._index += 1
            self._names[name] = candidate
        return self._names[name]
