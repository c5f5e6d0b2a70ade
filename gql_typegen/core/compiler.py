"""Compiles selection sets into IR and IR into artifacts.

The compiler walks fragments and operations against the schema and decides
what every selection resolves to: a plain object for concrete types, one
branch per possible type for interfaces and unions, and references to
fragment types wherever fragments are spread.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field, replace
from typing import assert_never

from graphql import (
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    GraphQLEnumType,
    GraphQLInputObjectType,
    GraphQLInputType,
    GraphQLInterfaceType,
    GraphQLNamedType,
    GraphQLObjectType,
    GraphQLOutputType,
    InlineFragmentNode,
    OperationDefinitionNode,
    SelectionSetNode,
    VariableDefinitionNode,
    is_abstract_type,
    is_enum_type,
    is_input_object_type,
    is_list_type,
    is_non_null_type,
    is_object_type,
    is_scalar_type,
)
from graphql.utilities import type_from_ast

from .artifacts import (
    DISCRIMINANT_LITERAL,
    DISCRIMINANT_UNION,
    ENUM,
    FRAGMENT,
    INPUT_TYPE,
    OPERATION,
    OPERATION_VARIABLES,
    TYPE_HELPER,
    ArtifactDraft,
    ArtifactStore,
)
from .cache import MemoizationCache
from .dependencies import NO_FILE_PATH, DependencyTracker
from .documents import (
    get_ast_source,
    has_conditional_directive,
    named_type_name,
    response_key,
    selection_set_key,
)
from .emitter import EMPTY_VARIABLES, EXACT, MAYBE, TYPE_HELPERS, Emitter
from .errors import (
    FieldNotFoundError,
    FragmentNotFoundError,
    LogicError,
    MissingRootTypeError,
    TypeNotFoundError,
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
    compose_fragment_refs,
    fragment_key,
    is_fragment_key,
    merge_fields,
    merge_ir,
    postprocess_ir,
)
from .options import GeneratorOptions
from .schema import SchemaTypeIndex

logger = logging.getLogger(__name__)

TYPENAME = "__typename"

# Typename unions longer than this are written one member per line
MAX_INLINE_UNION_LENGTH = 80


def _linkable(file_path: str) -> str | None:
    return None if file_path == NO_FILE_PATH else file_path


@dataclass
class FragmentDefinition:
    """A fragment found in an input document."""
    node: FragmentDefinitionNode
    source_file: str
    dependencies: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.node.name.value

    @property
    def type_condition(self) -> str:
        return self.node.type_condition.name.value


@dataclass
class FragmentFields:
    """The flattened field map of a compiled fragment."""
    fields: dict[str, IRNode]
    source_file: str
    dependencies: tuple[str, ...] = ()


@dataclass
class CollectedOperation:
    """An operation with the names of its generated types."""
    graphql_name: str
    operation_type: str
    type_name: str
    variables_type_name: str
    has_variables: bool
    needs_variables: bool
    source_file: str
    dependencies: tuple[str, ...]
    source: str | None = None


@dataclass
class _AbstractSelections:
    """Selections on an interface or union, grouped by what they target."""
    base: dict[str, IRNode] = field(default_factory=dict)
    own_spreads: list[FragmentDefinition] = field(default_factory=list)
    concrete_spreads: dict[str, list[FragmentDefinition]] = field(default_factory=dict)
    abstract_spreads: list[FragmentDefinition] = field(default_factory=list)
    concrete_inlines: dict[str, list[SelectionSetNode]] = field(default_factory=dict)
    abstract_inlines: list[tuple[GraphQLNamedType, SelectionSetNode]] = field(default_factory=list)


class SelectionCompiler:
    """Builds IR for fragments and operations and generates their artifacts.

    Fragments are compiled on first use. A fragment that is reached again
    while it is still being compiled is part of a cycle and raises
    LogicError.
    """

    def __init__(
        self,
        schema: SchemaTypeIndex,
        options: GeneratorOptions,
        tracker: DependencyTracker,
        cache: MemoizationCache,
        artifacts: ArtifactStore,
        emitter: Emitter,
    ):
        self.schema = schema
        self.options = options
        self.tracker = tracker
        self.cache = cache
        self.artifacts = artifacts
        self.emitter = emitter
        self.naming = options.naming

        self.fragments: dict[str, FragmentDefinition] = {}
        self.fragment_fields: dict[str, FragmentFields] = {}
        self._fragments_in_progress: set[str] = set()
        self._inputs_in_progress: set[str] = set()
        self.counters: Counter = Counter()

    def reset(self):
        self.fragment_fields = {}
        self._fragments_in_progress = set()
        self._inputs_in_progress = set()
        self.counters = Counter()

    def _file_context(self) -> str:
        return self.tracker.current_file

    def _get_type(self, name: str) -> GraphQLNamedType:
        try:
            return self.schema.get_type(name)
        except TypeNotFoundError as e:
            raise TypeNotFoundError(name, self._file_context()) from e

    # =========================================================================
    # Fragments
    # =========================================================================

    def _get_fragment(self, name: str) -> FragmentDefinition:
        """Look up a spread fragment, recording its use and generating it."""
        definition = self.fragments.get(name)
        if definition is None:
            raise FragmentNotFoundError(name, self._file_context())
        self.tracker.add_fragment_use(name)
        self.generate_fragment(name)
        return definition

    def _fragment_ref(self, fragment: FragmentDefinition, parent_type: str) -> IRFragmentRef:
        return IRFragmentRef(
            fragment_name=fragment.name,
            artifact_name=self.naming.fragment_type_name(fragment.name),
            condition_type=fragment.type_condition,
            parent_type=parent_type,
        )

    def generate_fragment(self, name: str) -> str:
        """Generate the type of a fragment, returning the type name."""
        definition = self.fragments.get(name)
        if definition is None:
            raise FragmentNotFoundError(name, self._file_context())
        if self.artifacts.get(FRAGMENT, name) is None and name in self._fragments_in_progress:
            raise LogicError(f'Circular fragment reference: "{name}"', self._file_context())

        artifact_name = self.artifacts.generate_once(
            FRAGMENT,
            name,
            lambda: self._build_fragment(definition),
            file_path=definition.source_file,
        )
        entry = self.fragment_fields.get(name)
        if entry is not None and not entry.dependencies:
            entry.dependencies = self.artifacts.get(FRAGMENT, name).dependencies
        return artifact_name

    def _build_fragment(self, definition: FragmentDefinition) -> ArtifactDraft:
        self.counters["fragments"] += 1
        self._ensure_helpers()
        self._fragments_in_progress.add(definition.name)
        try:
            graphql_type = self._get_type(definition.type_condition)
            ir = postprocess_ir(self.build_selection_set(graphql_type, definition.node.selection_set))
            self.fragment_fields[definition.name] = FragmentFields(
                fields=self._shape_fields(ir),
                source_file=definition.source_file,
            )
            ir = self._finalize(ir)
        finally:
            self._fragments_in_progress.discard(definition.name)

        name = self.naming.fragment_type_name(definition.name)
        source = get_ast_source(definition.node)
        doc = self.emitter.type_doc(file_path=_linkable(definition.source_file), source=source)
        return ArtifactDraft(
            name=name,
            code=self.emitter.type_alias(name, self.emitter.render(ir), doc),
            graphql_name=definition.name,
            source=source,
            identifier=definition.name,
        )

    def fragment_field_map(self, name: str) -> dict[str, IRNode]:
        """The flattened field map of a fragment, compiling it if needed."""
        self.generate_fragment(name)
        entry = self.fragment_fields.get(name)
        if entry is None:
            raise LogicError(f'Fragment "{name}" has no compiled fields', self._file_context())
        return entry.fields

    def _shape_fields(self, node: IRNode) -> dict[str, IRNode]:
        """Flatten a shape into one field map, inlining referenced fragments."""
        if isinstance(node, IRObject):
            fields: dict[str, IRNode] = {}
            for key, value in node.fields.items():
                if is_fragment_key(key):
                    fields = merge_fields(fields, self._shape_fields(value))
                else:
                    fields = merge_fields(fields, {key: value})
            return fields
        if isinstance(node, IRFragmentRef):
            return dict(self.fragment_field_map(node.fragment_name))
        if isinstance(node, (IRUnion, IRIntersection)):
            fields = {}
            children = node.branches if isinstance(node, IRUnion) else node.parts
            for child in children:
                fields = merge_fields(fields, self._shape_fields(child))
            return fields
        return {}

    def _finalize(self, node: IRNode) -> IRNode:
        """Replace fragment references in objects by resolved compositions."""
        if isinstance(node, (IRScalar, IRDiscriminant, IRFragmentRef)):
            return node
        if isinstance(node, IRObject):
            refs = [v for k, v in node.fields.items() if is_fragment_key(k)]
            if not refs:
                return replace(node, fields={k: self._finalize(v) for k, v in node.fields.items()})
            direct = {k: v for k, v in node.fields.items() if not is_fragment_key(k)}
            field_maps = {ref.fragment_name: self.fragment_field_map(ref.fragment_name) for ref in refs}
            composed = compose_fragment_refs(node.concrete_type_name, direct, refs, field_maps)
            return replace(self._finalize(composed), nullable=node.nullable, description=node.description)
        if isinstance(node, IRArray):
            return replace(node, element=self._finalize(node.element))
        if isinstance(node, IRUnion):
            return replace(node, branches=tuple(self._finalize(b) for b in node.branches))
        if isinstance(node, IRIntersection):
            return replace(node, parts=tuple(self._finalize(p) for p in node.parts))
        assert_never(node)

    # =========================================================================
    # Selection sets
    # =========================================================================

    def build_selection_set(self, graphql_type: GraphQLNamedType, selection_set: SelectionSetNode) -> IRNode:
        """Build the shape of a selection set on an object, interface or union."""
        key = f"{graphql_type.name}_{selection_set_key(selection_set)}"
        return self.cache.with_cache(
            "selection_set",
            key,
            lambda: self._build_selection_set(graphql_type, selection_set),
        )

    def _build_selection_set(self, graphql_type: GraphQLNamedType, selection_set: SelectionSetNode) -> IRNode:
        self.counters["selection_sets"] += 1
        if is_abstract_type(graphql_type):
            return self._build_abstract_selection_set(graphql_type, selection_set)
        if is_object_type(graphql_type):
            return self._build_object_selection_set(graphql_type, selection_set)
        raise LogicError(f'Cannot select fields on type "{graphql_type.name}"', self._file_context())

    def _applies_to(self, condition: str, concrete_name: str) -> bool:
        return condition == concrete_name or self.schema.object_implements(concrete_name, condition)

    def _build_object_selection_set(
        self, graphql_type: GraphQLObjectType, selection_set: SelectionSetNode
    ) -> IRObject:
        fields: dict[str, IRNode] = {}
        has_typename = False

        for selection in selection_set.selections:
            if isinstance(selection, FieldNode):
                key = response_key(selection)
                if selection.name.value == TYPENAME:
                    has_typename = True
                    ir = replace(
                        self._typename_literal(graphql_type.name),
                        nullable=has_conditional_directive(selection),
                    )
                else:
                    ir = self._build_field_ir(graphql_type, selection)
                fields[key] = merge_ir(fields.get(key), ir)
            elif isinstance(selection, FragmentSpreadNode):
                fragment = self._get_fragment(selection.name.value)
                if self._applies_to(fragment.type_condition, graphql_type.name):
                    ref = self._fragment_ref(fragment, graphql_type.name)
                    fields = merge_fields(fields, {fragment_key(ref.artifact_name): ref})
            elif isinstance(selection, InlineFragmentNode):
                condition = graphql_type.name
                if selection.type_condition:
                    condition = selection.type_condition.name.value
                if self._applies_to(condition, graphql_type.name):
                    inline = self.build_selection_set(graphql_type, selection.selection_set)
                    fields = merge_fields(fields, inline.fields)

        if self.options.output.non_optional_typename and not has_typename and TYPENAME not in fields:
            fields[TYPENAME] = self._typename_literal(graphql_type.name)
        return IRObject(concrete_type_name=graphql_type.name, fields=fields)

    def _get_field(self, graphql_type: GraphQLNamedType, name: str):
        fields = {}
        if isinstance(graphql_type, (GraphQLObjectType, GraphQLInterfaceType)):
            fields = graphql_type.fields
        if name not in fields:
            raise FieldNotFoundError(name, graphql_type.name, self._file_context())
        return fields[name]

    def _build_field_ir(self, parent_type: GraphQLNamedType, node: FieldNode) -> IRNode:
        graphql_field = self._get_field(parent_type, node.name.value)
        ir = self._build_output_type_ir(graphql_field.type, node.selection_set)
        return replace(
            ir,
            nullable=ir.nullable or has_conditional_directive(node),
            description=graphql_field.description,
        )

    def _build_output_type_ir(
        self,
        graphql_type: GraphQLOutputType,
        selection_set: SelectionSetNode | None,
        nullable: bool = True,
    ) -> IRNode:
        if is_non_null_type(graphql_type):
            return self._build_output_type_ir(graphql_type.of_type, selection_set, nullable=False)
        if is_list_type(graphql_type):
            element = self._build_output_type_ir(graphql_type.of_type, selection_set)
            return IRArray(element=element, nullable_element=element.nullable, nullable=nullable)
        if is_object_type(graphql_type) or is_abstract_type(graphql_type):
            if not selection_set:
                return IRObject(concrete_type_name=graphql_type.name, nullable=nullable)
            ir = self.build_selection_set(graphql_type, selection_set)
            return replace(ir, nullable=nullable)
        if is_enum_type(graphql_type):
            return IRScalar(type_expr=self._enum_type(graphql_type), nullable=nullable)
        if is_input_object_type(graphql_type):
            return IRScalar(type_expr=self._input_type(graphql_type), nullable=nullable)
        if is_scalar_type(graphql_type):
            return IRScalar(type_expr=self.options.scalars.type_for(graphql_type.name), nullable=nullable)
        raise LogicError(f"Unsupported output type: {graphql_type}", self._file_context())

    # =========================================================================
    # Interfaces and unions
    # =========================================================================

    def _build_abstract_selection_set(
        self, graphql_type: GraphQLNamedType, selection_set: SelectionSetNode
    ) -> IRNode:
        """Build one branch per possible type of an interface or union.

        Fields selected on the abstract type itself are shared by every
        branch. Types targeted by an inline fragment or a fragment spread get
        their own branch with their own type tag; all other types share one
        tag. Branches that end up identical are merged by postprocessing.
        """
        possible = self.schema.get_possible_concrete_names(graphql_type.name)
        selections = self._classify(graphql_type, selection_set)

        if not selections.base and not selections.concrete_inlines and not selections.abstract_inlines:
            shortcut = self._fragment_shortcut(graphql_type, possible, selections)
            if shortcut is not None:
                return shortcut

        base = self._base_fields(graphql_type, selections)
        per_type = self._collect_type_fields(graphql_type, possible, selections)
        targeted = [name for name in possible if name in per_type]

        fallback: IRDiscriminant | None = None
        branches: list[IRNode] = []
        for name in possible:
            fields = merge_fields(base, per_type.get(name, {}))
            if any(isinstance(value, IRDiscriminant) for value in fields.values()):
                if name in per_type or not self.options.output.merge_typenames:
                    tag = self._typename_literal(name)
                else:
                    if fallback is None:
                        fallback = self._fallback_typename(graphql_type, possible, targeted)
                    tag = fallback
                fields = {
                    key: replace(tag, nullable=value.nullable) if isinstance(value, IRDiscriminant) else value
                    for key, value in fields.items()
                }
            branches.append(IRObject(concrete_type_name=name, fields=fields))

        if not branches:
            return IRObject(concrete_type_name=graphql_type.name)
        if len(branches) == 1:
            return branches[0]
        return IRUnion(branches=tuple(branches))

    def _classify(
        self,
        graphql_type: GraphQLNamedType,
        selection_set: SelectionSetNode,
        selections: _AbstractSelections | None = None,
    ) -> _AbstractSelections:
        if selections is None:
            selections = _AbstractSelections()

        for selection in selection_set.selections:
            if isinstance(selection, FieldNode):
                key = response_key(selection)
                if selection.name.value == TYPENAME:
                    ir = replace(
                        self._abstract_typename(graphql_type.name),
                        nullable=has_conditional_directive(selection),
                    )
                else:
                    ir = self._build_field_ir(graphql_type, selection)
                selections.base[key] = merge_ir(selections.base.get(key), ir)
            elif isinstance(selection, FragmentSpreadNode):
                fragment = self._get_fragment(selection.name.value)
                condition = fragment.type_condition
                if condition == graphql_type.name:
                    selections.own_spreads.append(fragment)
                elif is_object_type(self._get_type(condition)):
                    selections.concrete_spreads.setdefault(condition, []).append(fragment)
                else:
                    selections.abstract_spreads.append(fragment)
            elif isinstance(selection, InlineFragmentNode):
                condition = graphql_type.name
                if selection.type_condition:
                    condition = selection.type_condition.name.value
                condition_type = self._get_type(condition)
                if condition == graphql_type.name:
                    self._classify(graphql_type, selection.selection_set, selections)
                elif is_object_type(condition_type):
                    selections.concrete_inlines.setdefault(condition, []).append(selection.selection_set)
                else:
                    selections.abstract_inlines.append((condition_type, selection.selection_set))

        if self.options.output.non_optional_typename and TYPENAME not in selections.base:
            selections.base[TYPENAME] = self._abstract_typename(graphql_type.name)
        return selections

    def _fragment_shortcut(
        self,
        graphql_type: GraphQLNamedType,
        possible: list[str],
        selections: _AbstractSelections,
    ) -> IRNode | None:
        """Shapes that consist of fragment spreads only can reuse the fragment types."""
        if len(selections.own_spreads) == 1 and not selections.concrete_spreads and not selections.abstract_spreads:
            return self._fragment_ref(selections.own_spreads[0], graphql_type.name)

        if selections.own_spreads or selections.abstract_spreads or not selections.concrete_spreads:
            return None
        if any(len(fragments) > 1 for fragments in selections.concrete_spreads.values()):
            return None

        targeted = [name for name in selections.concrete_spreads if name in possible]
        if not targeted:
            return None
        branches: list[IRNode] = [
            self._fragment_ref(selections.concrete_spreads[name][0], graphql_type.name)
            for name in targeted
        ]
        if len(targeted) < len(possible):
            branches.append(IRObject(concrete_type_name=graphql_type.name))
        if len(branches) == 1:
            return branches[0]
        return IRUnion(branches=tuple(branches))

    def _base_fields(self, graphql_type: GraphQLNamedType, selections: _AbstractSelections) -> dict[str, IRNode]:
        base = dict(selections.base)
        for fragment in selections.own_spreads:
            ref = self._fragment_ref(fragment, graphql_type.name)
            base = merge_fields(base, {fragment_key(ref.artifact_name): ref})
        return base

    def _collect_type_fields(
        self,
        graphql_type: GraphQLNamedType,
        possible: list[str],
        selections: _AbstractSelections,
    ) -> dict[str, dict[str, IRNode]]:
        """Fields contributed to each possible type by fragments and inline fragments."""
        per_type: dict[str, dict[str, IRNode]] = {}

        def contribute(name: str, fields: dict[str, IRNode]):
            if name not in possible or not fields:
                return
            # Type tags selected in a fragment resolve to the concrete type
            tagged = {
                key: replace(self._typename_literal(name), nullable=value.nullable)
                if isinstance(value, IRDiscriminant)
                else value
                for key, value in fields.items()
            }
            per_type[name] = merge_fields(per_type.get(name, {}), tagged)

        for condition, selection_sets in selections.concrete_inlines.items():
            if condition not in possible:
                continue
            condition_type = self._get_type(condition)
            for selection_set in selection_sets:
                ir = self.build_selection_set(condition_type, selection_set)
                contribute(condition, ir.fields)

        for condition, fragments in selections.concrete_spreads.items():
            for fragment in fragments:
                ref = self._fragment_ref(fragment, graphql_type.name)
                contribute(condition, {fragment_key(ref.artifact_name): ref})

        for fragment in selections.abstract_spreads:
            ref = self._fragment_ref(fragment, graphql_type.name)
            for name in possible:
                if self.schema.object_implements(name, fragment.type_condition):
                    contribute(name, {fragment_key(ref.artifact_name): ref})

        for condition_type, selection_set in selections.abstract_inlines:
            nested = self._classify(condition_type, selection_set)
            nested_possible = self.schema.get_possible_concrete_names(condition_type.name)
            nested_base = self._base_fields(condition_type, nested)
            nested_per_type = self._collect_type_fields(condition_type, nested_possible, nested)
            for name in possible:
                if self.schema.object_implements(name, condition_type.name):
                    contribute(name, merge_fields(nested_base, nested_per_type.get(name, {})))

        return per_type

    def _fallback_typename(
        self,
        graphql_type: GraphQLNamedType,
        possible: list[str],
        targeted: list[str],
    ) -> IRDiscriminant:
        """The type tag shared by all branches not targeted by a fragment.

        Uses ``Exclude<Abstract, Targeted>`` when that is shorter than listing
        the remaining types, i.e. when more than two types remain and they
        outnumber the targeted ones.
        """
        if not targeted:
            return self._abstract_typename(graphql_type.name)
        remaining = [name for name in possible if name not in targeted]
        if len(remaining) > len(targeted) and len(remaining) > 2:
            self._typename_union(graphql_type.name)
            return IRDiscriminant(names=frozenset(targeted), exclude_from=graphql_type.name)
        for name in remaining:
            self._typename_literal(name)
        return IRDiscriminant(names=frozenset(remaining))

    # =========================================================================
    # Type tags, enums, inputs and helpers
    # =========================================================================

    def _typename_literal(self, type_name: str) -> IRDiscriminant:
        def build() -> ArtifactDraft:
            graphql_type = self._get_type(type_name)
            doc = self.emitter.type_doc(description=graphql_type.description)
            return ArtifactDraft(
                name=type_name,
                code=self.emitter.type_alias(type_name, f"'{type_name}'", doc),
                graphql_name=type_name,
            )

        self.artifacts.generate_once(DISCRIMINANT_LITERAL, type_name, build)
        return IRDiscriminant(names=frozenset([type_name]))

    def _typename_union(self, abstract_name: str) -> str:
        def build() -> ArtifactDraft:
            names = sorted(self.schema.get_possible_concrete_names(abstract_name))
            for name in names:
                self._typename_literal(name)
            code = " | ".join(names) or "never"
            if len(code) > MAX_INLINE_UNION_LENGTH:
                code = "".join(f"\n  | {name}" for name in names)
            doc = self.emitter.type_doc(description=self._get_type(abstract_name).description)
            return ArtifactDraft(
                name=abstract_name,
                code=self.emitter.type_alias(abstract_name, code, doc),
                graphql_name=abstract_name,
            )

        return self.artifacts.generate_once(DISCRIMINANT_UNION, abstract_name, build)

    def _abstract_typename(self, abstract_name: str) -> IRDiscriminant:
        """Type tag covering every possible type of an interface or union."""
        self._typename_union(abstract_name)
        return IRDiscriminant(exclude_from=abstract_name)

    def _enum_type(self, enum_type: GraphQLEnumType) -> str:
        def build() -> ArtifactDraft:
            name = self.naming.enum_type_name(enum_type.name)
            values = [
                {"name": key, "value": key, "description": value.description}
                for key, value in enum_type.values.items()
            ]
            doc = self.emitter.type_doc(description=enum_type.description)
            return ArtifactDraft(
                name=name,
                code=self.emitter.enum(name, values, doc),
                graphql_name=enum_type.name,
            )

        return self.artifacts.generate_once(ENUM, enum_type.name, build)

    def _input_type(self, input_type: GraphQLInputObjectType) -> str:
        name = self.naming.input_type_name(input_type.name)
        if input_type.name in self._inputs_in_progress:
            # Self-referencing input, resolved by name
            self.tracker.add(INPUT_TYPE, name)
            return name

        def build() -> ArtifactDraft:
            self._ensure_helpers()
            self._inputs_in_progress.add(input_type.name)
            try:
                fields = {
                    field_name: IRScalar(
                        type_expr=self.input_type_code(input_field.type),
                        nullable=not is_non_null_type(input_field.type),
                        description=input_field.description,
                    )
                    for field_name, input_field in input_type.fields.items()
                }
            finally:
                self._inputs_in_progress.discard(input_type.name)
            doc = self.emitter.type_doc(description=input_type.description)
            return ArtifactDraft(
                name=name,
                code=self.emitter.type_alias(name, self.emitter.render_input_fields(fields), doc),
                graphql_name=input_type.name,
            )

        return self.artifacts.generate_once(INPUT_TYPE, input_type.name, build)

    def input_type_code(self, graphql_type: GraphQLInputType) -> str:
        """Type expression of an input value, without its own nullability."""
        return self.cache.with_cache(
            "input_type",
            str(graphql_type),
            lambda: self._build_input_type_code(graphql_type),
        )

    def _build_input_type_code(self, graphql_type: GraphQLInputType) -> str:
        if is_non_null_type(graphql_type):
            graphql_type = graphql_type.of_type
        if is_list_type(graphql_type):
            element = self._build_input_type_code(graphql_type.of_type)
            if not is_non_null_type(graphql_type.of_type):
                element = self.emitter.nullable_type(element)
            return self.emitter.array_of(element)
        if is_input_object_type(graphql_type):
            return self._input_type(graphql_type)
        if is_enum_type(graphql_type):
            return self._enum_type(graphql_type)
        if is_scalar_type(graphql_type):
            return self.options.scalars.type_for(graphql_type.name)
        raise LogicError(f"Unsupported input type: {graphql_type}", self._file_context())

    def _type_helper(self, name: str) -> str:
        return self.artifacts.generate_once(
            TYPE_HELPER,
            name,
            lambda: ArtifactDraft(name=name, code=TYPE_HELPERS[name]),
        )

    def _ensure_helpers(self):
        if self.options.output.nullable_field == "maybe":
            self._type_helper(MAYBE)

    # =========================================================================
    # Operations
    # =========================================================================

    def _inline_root_fragments(self, root_type: GraphQLObjectType, selection_set: SelectionSetNode) -> SelectionSetNode:
        """Replace spreads of fragments on the root type by their selections."""
        selections = []
        for selection in selection_set.selections:
            if isinstance(selection, FragmentSpreadNode):
                fragment = self._get_fragment(selection.name.value)
                if fragment.type_condition == root_type.name:
                    inlined = self._inline_root_fragments(root_type, fragment.node.selection_set)
                    selections.extend(inlined.selections)
                    continue
            selections.append(selection)
        return SelectionSetNode(selections=tuple(selections))

    def compile_operation(self, operation: OperationDefinitionNode, root_type: GraphQLObjectType) -> IRNode:
        """Build the final shape of an operation's response."""
        selection_set = self._inline_root_fragments(root_type, operation.selection_set)
        ir = postprocess_ir(self.build_selection_set(root_type, selection_set))
        return self._finalize(ir)

    def generate_operation(self, operation: OperationDefinitionNode, file_path: str) -> CollectedOperation | None:
        """Generate the response and variables types of an operation.

        Returns:
            The collected operation, or None for anonymous operations
        """
        if operation.name is None:
            logger.debug("Skipping anonymous %s in %s", operation.operation.value, file_path)
            return None

        name = operation.name.value
        kind = operation.operation.value
        root_type = self.schema.get_root_type(operation.operation)
        if root_type is None:
            raise MissingRootTypeError(name, kind, file_path)

        type_name = self.naming.operation_type_name(name, root_type.name)
        variables_type_name = self.naming.operation_variables_type_name(name, root_type.name)
        source = get_ast_source(operation)
        variables = operation.variable_definitions or ()

        self.tracker.start()
        self.artifacts.generate_once(
            OPERATION,
            name,
            lambda: self._build_operation(operation, root_type, type_name, source, file_path),
        )
        self.artifacts.generate_once(
            OPERATION_VARIABLES,
            name,
            lambda: self._build_variables(operation, variables_type_name),
        )
        dependencies = self.tracker.end()

        return CollectedOperation(
            graphql_name=name,
            operation_type=kind,
            type_name=type_name,
            variables_type_name=variables_type_name,
            has_variables=bool(variables),
            needs_variables=any(self._is_required_variable(v) for v in variables),
            source_file=file_path,
            dependencies=dependencies,
            source=source,
        )

    def _is_required_variable(self, definition: VariableDefinitionNode) -> bool:
        graphql_type = type_from_ast(self.schema.schema, definition.type)
        return is_non_null_type(graphql_type) and definition.default_value is None

    def _build_operation(
        self,
        operation: OperationDefinitionNode,
        root_type: GraphQLObjectType,
        type_name: str,
        source: str | None,
        file_path: str,
    ) -> ArtifactDraft:
        self.counters["operations"] += 1
        self._ensure_helpers()
        ir = self.compile_operation(operation, root_type)
        doc = self.emitter.type_doc(file_path=_linkable(file_path), source=source)
        return ArtifactDraft(
            name=type_name,
            code=self.emitter.type_alias(type_name, self.emitter.render(ir), doc),
            graphql_name=operation.name.value,
            source=source,
            identifier=operation.name.value,
        )

    def _build_variables(self, operation: OperationDefinitionNode, type_name: str) -> ArtifactDraft:
        self._ensure_helpers()
        exact = self._type_helper(EXACT)
        fields = {}
        for definition in operation.variable_definitions or ():
            graphql_type = type_from_ast(self.schema.schema, definition.type)
            if graphql_type is None:
                raise TypeNotFoundError(named_type_name(definition.type), self._file_context())
            fields[definition.variable.name.value] = IRScalar(
                type_expr=self.input_type_code(graphql_type),
                nullable=not is_non_null_type(graphql_type) or definition.default_value is not None,
            )

        code = self.emitter.render_input_fields(fields) if fields else EMPTY_VARIABLES
        return ArtifactDraft(
            name=type_name,
            code=self.emitter.type_alias(type_name, f"{exact}<{code}>"),
            graphql_name=operation.name.value,
        )
