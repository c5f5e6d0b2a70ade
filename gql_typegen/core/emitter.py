"""Renders IR and artifacts to TypeScript.

Type expressions are built directly from the IR; everything with a fixed
layout (type aliases, enums, whole files) comes from Jinja2 templates.

Supports custom templates via the template_dir parameter:
    emitter = Emitter(options, template_dir="./my_templates")

Template lookup order:
1. User's template directory (if provided)
2. Package default templates
"""

from dataclasses import replace
from pathlib import Path
from typing import Any, Mapping, assert_never

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, PackageLoader, select_autoescape

from .ir import (
    IRArray,
    IRDiscriminant,
    IRFragmentRef,
    IRIntersection,
    IRNode,
    IRObject,
    IRScalar,
    IRUnion,
    is_fragment_key,
)
from .options import ARRAY_ELEMENT_PLACEHOLDER, OutputOptions

INDENT = "  "

MAYBE = "Maybe"
EXACT = "Exact"

# Source of the helper types referenced by generated code
TYPE_HELPERS = {
    EXACT: "type Exact<T extends { [key: string]: unknown }> = { [K in keyof T]: T[K] };",
    MAYBE: "type Maybe<T> = T | null;",
}

EMPTY_VARIABLES = "{ [key: string]: never }"


def safe_comment(text: str) -> str:
    """Make text safe for use inside a /** */ comment."""
    if not text:
        return ""
    return text.replace("*/", "*\\/").strip()


def doc_comment(text: str) -> str:
    """Render text as a doc comment, on one line if it fits."""
    lines = safe_comment(text).splitlines()
    if len(lines) == 1:
        return f"/** {lines[0]} */"
    body = "\n".join(f" * {line}".rstrip() for line in lines)
    return f"/**\n{body}\n */"


class Emitter:
    """Renders IR nodes and artifacts as TypeScript code.

    Available templates to override:
        - type.ts.j2: A type alias
        - enum.ts.j2: An enum as a const object plus a type
        - types.ts.j2: The file with all generated types
        - operations.js.j2: The file with all operation sources
        - operation_types.ts.j2: The map of operations to their types
    """

    def __init__(self, options: OutputOptions, template_dir: str | None = None):
        self.options = options

        # Build template loader - custom templates take precedence
        loaders = []
        if template_dir:
            template_path = Path(template_dir)
            if template_path.is_dir():
                loaders.append(FileSystemLoader(str(template_path)))
        loaders.append(PackageLoader("gql_typegen", "templates"))

        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["doc_comment"] = doc_comment

    def render_template(self, template_name: str, **context: Any) -> str:
        return self.env.get_template(template_name).render(**context)

    # =========================================================================
    # Type expressions
    # =========================================================================

    def render(self, node: IRNode, depth: int = 0) -> str:
        """Render a node as a type expression."""
        if isinstance(node, IRScalar):
            return node.type_expr
        if isinstance(node, IRDiscriminant):
            return self._render_discriminant(node)
        if isinstance(node, IRObject):
            return self._render_object(node, depth)
        if isinstance(node, IRArray):
            element = self.render(node.element, depth)
            if node.nullable_element:
                element = f"{element} | null"
            return self.array_of(element)
        if isinstance(node, IRUnion):
            parts = sorted(dict.fromkeys(self.render(b, depth) for b in node.branches))
            return self._join(parts, " | ")
        if isinstance(node, IRIntersection):
            parts = list(dict.fromkeys(self.render(p, depth) for p in node.parts))
            return self._join(parts, " & ")
        if isinstance(node, IRFragmentRef):
            if not node.omitted_fields:
                return node.artifact_name
            omitted = " | ".join(f'"{name}"' for name in node.omitted_fields)
            return f"Omit<{node.artifact_name}, {omitted}>"
        assert_never(node)

    @staticmethod
    def _join(parts: list[str], separator: str) -> str:
        if len(parts) == 1:
            return parts[0]
        return "(" + separator.join(parts) + ")"

    @staticmethod
    def _render_discriminant(node: IRDiscriminant) -> str:
        names = sorted(node.names)
        if node.exclude_from:
            if not names:
                return node.exclude_from
            return f"Exclude<{node.exclude_from}, {' | '.join(names)}>"
        return " | ".join(names) or "never"

    def _render_object(self, node: IRObject, depth: int) -> str:
        refs = [v for k, v in node.fields.items() if is_fragment_key(k)]
        if refs:
            # Fragments not composed by the compiler: plain intersection
            fields = {k: v for k, v in node.fields.items() if not is_fragment_key(k)}
            parts = [replace(node, fields=fields)] if fields else []
            return self.render(IRIntersection(parts=tuple(parts + refs)), depth)
        return self.render_fields(node.fields, depth)

    def render_fields(self, fields: Mapping[str, IRNode], depth: int = 0) -> str:
        """Render a field map as an object type."""
        if not fields:
            return self.options.empty_object
        keys = sorted(fields) if self.options.sort_properties else list(fields)
        indent = INDENT * (depth + 1)
        lines = ["{"]
        for key in keys:
            value = fields[key]
            if value.description and self.options.field_description:
                lines.append(indent + doc_comment(value.description))
            lines.append(indent + self._render_field(key, value, depth + 1))
        lines.append(INDENT * depth + "}")
        return "\n".join(lines)

    def _render_field(self, key: str, value: IRNode, depth: int) -> str:
        code = self.render(value, depth)
        if not value.nullable:
            return f"{key}: {code};"
        mode = self.options.nullable_field
        if mode == "optional":
            return f"{key}?: {code};"
        if mode == "null":
            return f"{key}: {code} | null;"
        return f"{key}: {MAYBE}<{code}>;"

    def render_input_fields(self, fields: Mapping[str, IRScalar]) -> str:
        """Render input fields or variables; nullable ones may be omitted or null."""
        if not fields:
            return self.options.empty_object
        keys = sorted(fields) if self.options.sort_properties else list(fields)
        lines = ["{"]
        for key in keys:
            value = fields[key]
            if value.description and self.options.field_description:
                lines.append(INDENT + doc_comment(value.description))
            if value.nullable:
                lines.append(f"{INDENT}{key}?: {self.nullable_type(value.type_expr)};")
            else:
                lines.append(f"{INDENT}{key}: {value.type_expr};")
        lines.append("}")
        return "\n".join(lines)

    def nullable_type(self, code: str) -> str:
        if self.options.nullable_field == "maybe":
            return f"{MAYBE}<{code}>"
        return f"{code} | null"

    def array_of(self, element: str) -> str:
        """Wrap an element type in the configured array shape."""
        template = self.options.array_template
        if template.startswith(ARRAY_ELEMENT_PLACEHOLDER) and ("|" in element or "&" in element):
            element = f"({element})"
        return template.replace(ARRAY_ELEMENT_PLACEHOLDER, element)

    # =========================================================================
    # Artifacts
    # =========================================================================

    def type_doc(
        self,
        description: str | None = None,
        file_path: str | None = None,
        source: str | None = None,
    ) -> str | None:
        """Build the doc comment placed above a generated type."""
        if not self.options.type_comment:
            return None
        sections = []
        if description:
            sections.append(safe_comment(description))
        if file_path:
            sections.append(f"@see {{@link {file_path}}}")
        if source:
            sections.append("@example\n```graphql\n" + safe_comment(source) + "\n```")
        if not sections:
            return None
        return doc_comment("\n\n".join(sections))

    def type_alias(self, name: str, code: str, doc: str | None = None, exported: bool = True) -> str:
        return self.render_template("type.ts.j2", name=name, code=code, doc=doc, exported=exported)

    def enum(self, name: str, values: list[dict[str, Any]], doc: str | None = None) -> str:
        """Render an enum as a const object and a matching type."""
        return self.render_template("enum.ts.j2", name=name, values=values, doc=doc)
