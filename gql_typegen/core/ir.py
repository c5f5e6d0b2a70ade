"""Intermediate Representation (IR) of selection shapes.

Every fragment and operation is compiled into a tree of these nodes before
being rendered. The node set is closed: every function that walks the tree
handles each variant explicitly and ends with ``assert_never`` so that a new
variant can't be forgotten.

Nodes are frozen and may be shared between cached results, so all helpers
here return new nodes instead of modifying their arguments.
"""

from dataclasses import dataclass, field, replace
from typing import Mapping, Union, assert_never

# Prefix for field-map keys that hold fragment references. It can't appear
# in a GraphQL response key.
FRAGMENT_KEY_PREFIX = "..."


@dataclass(frozen=True)
class IRScalar:
    """A leaf type: scalar, enum or input reference."""
    type_expr: str
    nullable: bool = False
    description: str | None = None


@dataclass(frozen=True)
class IRDiscriminant:
    """The value of a ``__typename`` selection.

    Either an explicit set of concrete type names, or, when ``exclude_from``
    is set, every possible type of that abstract type except ``names``.
    """
    names: frozenset[str] = frozenset()
    exclude_from: str | None = None
    nullable: bool = False
    description: str | None = None


@dataclass(frozen=True)
class IRObject:
    """An object shape. Keys are response keys (aliases)."""
    concrete_type_name: str
    fields: dict[str, "IRNode"] = field(default_factory=dict)
    nullable: bool = False
    description: str | None = None


@dataclass(frozen=True)
class IRArray:
    element: "IRNode"
    nullable_element: bool = False
    nullable: bool = False
    description: str | None = None


@dataclass(frozen=True)
class IRUnion:
    branches: tuple["IRNode", ...]
    nullable: bool = False
    description: str | None = None


@dataclass(frozen=True)
class IRIntersection:
    parts: tuple["IRNode", ...]
    nullable: bool = False
    description: str | None = None


@dataclass(frozen=True)
class IRFragmentRef:
    """Reference to a fragment's generated type.

    ``omitted_fields`` lists fields whose shape is provided elsewhere because
    they conflict with sibling selections.
    """
    fragment_name: str
    artifact_name: str
    condition_type: str
    parent_type: str
    omitted_fields: tuple[str, ...] = ()
    nullable: bool = False
    description: str | None = None


IRNode = Union[IRScalar, IRDiscriminant, IRObject, IRArray, IRUnion, IRIntersection, IRFragmentRef]


def fragment_key(artifact_name: str) -> str:
    """Field-map key under which a fragment reference is stored."""
    return FRAGMENT_KEY_PREFIX + artifact_name


def is_fragment_key(key: str) -> bool:
    return key.startswith(FRAGMENT_KEY_PREFIX)


# =============================================================================
# Structural identity
# =============================================================================

_DISCRIMINANT_PLACEHOLDER = ("discriminant",)


def shape_key(node: IRNode, ignore_discriminant: bool = False) -> tuple:
    """Build a hashable structural key for a node.

    Descriptions and concrete type names don't take part. With
    ``ignore_discriminant`` the node's own discriminant fields are replaced by
    a placeholder, which makes branches that only differ by type tag equal.
    """
    if isinstance(node, IRScalar):
        return ("scalar", node.type_expr, node.nullable)
    if isinstance(node, IRDiscriminant):
        return ("discriminant", tuple(sorted(node.names)), node.exclude_from, node.nullable)
    if isinstance(node, IRObject):
        fields = []
        for key, value in sorted(node.fields.items()):
            if ignore_discriminant and isinstance(value, IRDiscriminant):
                fields.append((key, _DISCRIMINANT_PLACEHOLDER))
            else:
                fields.append((key, shape_key(value)))
        return ("object", tuple(fields), node.nullable)
    if isinstance(node, IRArray):
        return ("array", shape_key(node.element), node.nullable_element, node.nullable)
    if isinstance(node, IRUnion):
        branches = sorted((shape_key(b) for b in node.branches), key=repr)
        return ("union", tuple(branches), node.nullable)
    if isinstance(node, IRIntersection):
        return ("intersection", tuple(shape_key(p) for p in node.parts), node.nullable)
    if isinstance(node, IRFragmentRef):
        return ("fragment", node.artifact_name, tuple(sorted(node.omitted_fields)), node.nullable)
    assert_never(node)


def is_identical(a: IRNode, b: IRNode) -> bool:
    """Check whether two nodes describe the same shape."""
    return shape_key(a) == shape_key(b)


# =============================================================================
# Merging
# =============================================================================


def union_discriminants(a: IRDiscriminant, b: IRDiscriminant) -> IRDiscriminant | None:
    """Combine two discriminants into one, or None if that isn't expressible."""
    nullable = a.nullable and b.nullable
    description = a.description or b.description
    if a.exclude_from is None and b.exclude_from is None:
        return IRDiscriminant(names=a.names | b.names, nullable=nullable, description=description)
    if a.exclude_from is None:
        a, b = b, a
    if b.exclude_from is None:
        return IRDiscriminant(
            names=a.names - b.names,
            exclude_from=a.exclude_from,
            nullable=nullable,
            description=description,
        )
    if a.exclude_from == b.exclude_from:
        return IRDiscriminant(
            names=a.names & b.names,
            exclude_from=a.exclude_from,
            nullable=nullable,
            description=description,
        )
    return None


def merge_fields(a: Mapping[str, IRNode], b: Mapping[str, IRNode]) -> dict[str, IRNode]:
    """Merge two field maps key by key. Keys of ``a`` keep their order."""
    result = dict(a)
    for key, value in b.items():
        result[key] = merge_ir(result.get(key), value)
    return result


def unify_branches(*groups: tuple[IRNode, ...]) -> tuple[IRNode, ...]:
    """Concatenate union branches, merging object branches of the same type."""
    result: list[IRNode] = []
    positions: dict[str, int] = {}

    def add(branch: IRNode):
        if isinstance(branch, IRUnion):
            for nested in branch.branches:
                add(nested)
        elif isinstance(branch, IRObject):
            position = positions.get(branch.concrete_type_name)
            if position is None:
                positions[branch.concrete_type_name] = len(result)
                result.append(branch)
            else:
                result[position] = merge_ir(result[position], branch)
        elif not any(is_identical(branch, existing) for existing in result):
            result.append(branch)

    for group in groups:
        for branch in group:
            add(branch)
    return tuple(result)


def _append_parts(parts: tuple[IRNode, ...], more: tuple[IRNode, ...]) -> tuple[IRNode, ...]:
    result = list(parts)
    for part in more:
        if not any(is_identical(part, existing) for existing in result):
            result.append(part)
    return tuple(result)


def _merge_mismatched(a: IRNode, b: IRNode, nullable: bool) -> IRNode:
    description = a.description or b.description
    if isinstance(a, IRObject) and isinstance(b, IRFragmentRef):
        fields = merge_fields(a.fields, {fragment_key(b.artifact_name): b})
        return replace(a, fields=fields, nullable=nullable, description=description)
    if isinstance(a, IRFragmentRef) and isinstance(b, IRObject):
        fields = merge_fields({fragment_key(a.artifact_name): a}, b.fields)
        return replace(b, fields=fields, nullable=nullable, description=description)
    if isinstance(a, IRIntersection):
        return replace(a, parts=_append_parts(a.parts, (b,)), nullable=nullable, description=description)
    if isinstance(b, IRIntersection):
        return replace(b, parts=_append_parts((a,), b.parts), nullable=nullable, description=description)
    if isinstance(a, IRFragmentRef) or isinstance(b, IRFragmentRef):
        return IRIntersection(parts=(a, b), nullable=nullable, description=description)
    return IRUnion(branches=unify_branches((a, b)), nullable=nullable, description=description)


def merge_ir(a: IRNode | None, b: IRNode) -> IRNode:
    """Merge two shapes selected under the same response key.

    A value is only nullable if every contributor says so. Shapes of
    different kinds end up in a union (or an intersection when a fragment
    reference is involved).
    """
    if a is None:
        return b
    nullable = a.nullable and b.nullable
    if type(a) is not type(b):
        return _merge_mismatched(a, b, nullable)

    if isinstance(a, IRScalar):
        if a.type_expr == b.type_expr:
            return replace(a, nullable=nullable)
        branches = (replace(a, nullable=False), replace(b, nullable=False))
        return IRUnion(branches=unify_branches(branches), nullable=nullable, description=a.description)
    if isinstance(a, IRDiscriminant):
        merged = union_discriminants(a, b)
        if merged is None:
            return IRUnion(branches=(a, b), nullable=nullable, description=a.description)
        return merged
    if isinstance(a, IRObject):
        return replace(a, fields=merge_fields(a.fields, b.fields), nullable=nullable)
    if isinstance(a, IRArray):
        return replace(
            a,
            element=merge_ir(a.element, b.element),
            nullable_element=a.nullable_element or b.nullable_element,
            nullable=nullable,
        )
    if isinstance(a, IRUnion):
        return replace(a, branches=unify_branches(a.branches, b.branches), nullable=nullable)
    if isinstance(a, IRIntersection):
        return replace(a, parts=_append_parts(a.parts, b.parts), nullable=nullable)
    if isinstance(a, IRFragmentRef):
        if a.artifact_name == b.artifact_name:
            return replace(a, nullable=nullable)
        return IRIntersection(parts=(a, b), nullable=nullable, description=a.description)
    assert_never(a)


# =============================================================================
# Postprocessing
# =============================================================================


def _combine_branches(a: IRObject, b: IRObject) -> IRObject | None:
    fields = dict(a.fields)
    for key, value in a.fields.items():
        if not isinstance(value, IRDiscriminant):
            continue
        other = b.fields.get(key)
        if not isinstance(other, IRDiscriminant):
            return None
        merged = union_discriminants(value, other)
        if merged is None:
            return None
        fields[key] = merged
    return replace(a, fields=fields)


def _merge_equivalent_branches(branches: list[IRNode]) -> list[IRNode]:
    result: list[IRNode] = []
    for branch in branches:
        if isinstance(branch, IRObject):
            signature = shape_key(branch, ignore_discriminant=True)
            for position, existing in enumerate(result):
                if not isinstance(existing, IRObject):
                    continue
                if shape_key(existing, ignore_discriminant=True) != signature:
                    continue
                combined = _combine_branches(existing, branch)
                if combined is not None:
                    result[position] = combined
                    break
            else:
                result.append(branch)
        else:
            result.append(branch)
    return result


def postprocess_ir(node: IRNode) -> IRNode:
    """Simplify a compiled tree.

    Union branches that only differ by their type tag are merged into one
    branch whose tag covers all of their types. A union left with a single
    branch is replaced by that branch.
    """
    if isinstance(node, (IRScalar, IRDiscriminant, IRFragmentRef)):
        return node
    if isinstance(node, IRObject):
        return replace(node, fields={k: postprocess_ir(v) for k, v in node.fields.items()})
    if isinstance(node, IRArray):
        return replace(node, element=postprocess_ir(node.element))
    if isinstance(node, IRIntersection):
        return replace(node, parts=tuple(postprocess_ir(p) for p in node.parts))
    if isinstance(node, IRUnion):
        branches = _merge_equivalent_branches([postprocess_ir(b) for b in node.branches])
        if len(branches) == 1:
            return replace(
                branches[0],
                nullable=node.nullable,
                description=node.description or branches[0].description,
            )
        return replace(node, branches=tuple(branches))
    assert_never(node)


# =============================================================================
# Fragment composition
# =============================================================================


def compose_fragment_refs(
    type_name: str,
    direct: Mapping[str, IRNode],
    refs: list[IRFragmentRef],
    field_maps: Mapping[str, Mapping[str, IRNode]],
) -> IRNode:
    """Combine an object's own fields with the fragments spread into it.

    Without conflicts the result is the plain intersection of the direct
    fields and the fragment types. A field conflicts when merging its
    contributions produces a union or changes the running merge; conflicting
    fields are merged into one object and omitted from every fragment that
    declares them. A fragment whose fields all conflict is dropped. Type tags
    never conflict.

    Args:
        type_name: Concrete type of the object being composed
        direct: Fields selected directly on the object
        refs: Fragment references spread into the object
        field_maps: Flattened field map of each fragment, by fragment name
    """
    names = list(direct)
    for ref in refs:
        names.extend(field_maps[ref.fragment_name])

    conflicts: dict[str, IRNode] = {}
    for name in dict.fromkeys(names):
        nodes = [direct[name]] if name in direct else []
        nodes.extend(
            field_maps[ref.fragment_name][name] for ref in refs if name in field_maps[ref.fragment_name]
        )
        if len(nodes) < 2 or any(isinstance(node, IRDiscriminant) for node in nodes):
            continue
        merged = nodes[0]
        conflicting = False
        for node in nodes[1:]:
            result = merge_ir(merged, node)
            if isinstance(result, IRUnion) or not is_identical(result, merged):
                conflicting = True
            merged = result
        if conflicting:
            conflicts[name] = merged

    parts: list[IRNode] = []
    if conflicts:
        parts.append(IRObject(concrete_type_name=type_name, fields=conflicts))
    remaining = {k: v for k, v in direct.items() if k not in conflicts}
    if remaining:
        parts.append(IRObject(concrete_type_name=type_name, fields=remaining))
    for ref in refs:
        fields = field_maps[ref.fragment_name]
        omitted = tuple(name for name in conflicts if name in fields)
        if fields and len(omitted) == len(fields):
            continue
        parts.append(replace(ref, omitted_fields=omitted))

    if not parts:
        return IRObject(concrete_type_name=type_name)
    if len(parts) == 1:
        return parts[0]
    return IRIntersection(parts=tuple(parts))
