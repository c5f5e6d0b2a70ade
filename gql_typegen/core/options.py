"""Generator configuration.

All options are validated once, when the generator is created. Invalid
values raise InvalidOptionError.

Example:
    options = resolve_options({
        "use_cache": False,
        "output": {"nullable_field": "null", "array_shape": "[]"},
    })
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import InvalidOptionError
from .hooks import PostGenerateHook
from .naming import NamingConventions
from .scalars import ScalarRegistry

# Placeholder for the element type in array shape templates
ARRAY_ELEMENT_PLACEHOLDER = "$T$"

ARRAY_SHAPES = {
    "Array": "Array<$T$>",
    "[]": "$T$[]",
}


class OutputOptions(BaseModel):
    """Options controlling the generated code."""

    model_config = ConfigDict(extra="forbid")

    # How nullable fields are declared: "key?: T", "key: T | null" or "key: Maybe<T>"
    nullable_field: Literal["optional", "null", "maybe"] = "optional"
    # "Array", "[]" or a custom template containing $T$, e.g. "ReadonlyArray<$T$>"
    array_shape: str = "Array"
    empty_object: str = "object"
    # Always select __typename, even if the document doesn't
    non_optional_typename: bool = False
    # Share one type tag between all branches that aren't targeted by a fragment
    merge_typenames: bool = True
    # Add a doc comment with the source document to each generated type
    type_comment: bool = True
    # Add the schema description of a field as a doc comment
    field_description: bool = True
    sort_properties: bool = False

    @field_validator("array_shape")
    @classmethod
    def _validate_array_shape(cls, value: str) -> str:
        template = ARRAY_SHAPES.get(value, value)
        if ARRAY_ELEMENT_PLACEHOLDER not in template:
            raise ValueError(f'must be "Array", "[]" or contain {ARRAY_ELEMENT_PLACEHOLDER}')
        return value

    @property
    def array_template(self) -> str:
        return ARRAY_SHAPES.get(self.array_shape, self.array_shape)


class GeneratorOptions(BaseModel):
    """Options for the Generator."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid")

    debug_mode: bool = False
    use_cache: bool = True
    # Record what each artifact depends on. Without it, update() and remove()
    # discard everything generated instead of only the affected artifacts.
    dependency_tracking: bool = True
    # Only generate fragments that are used by an operation
    skip_unused_fragments: bool = False
    output: OutputOptions = Field(default_factory=OutputOptions)
    scalars: ScalarRegistry = Field(default_factory=ScalarRegistry)
    naming: NamingConventions = Field(default_factory=NamingConventions)
    hooks: list[Any] = Field(default_factory=list)
    # Directory with templates overriding the built-in ones
    template_dir: str | None = None

    @field_validator("scalars", mode="before")
    @classmethod
    def _build_scalars(cls, value: Any) -> Any:
        # Allow {"DateTime": "string"} as a shorthand
        if isinstance(value, dict):
            registry = ScalarRegistry()
            for name, handler in value.items():
                registry.register(name, handler)
            return registry
        return value

    @field_validator("hooks")
    @classmethod
    def _validate_hooks(cls, value: list[Any]) -> list[Any]:
        for hook in value:
            if not isinstance(hook, PostGenerateHook):
                raise ValueError(f"{hook!r} does not implement post_generate()")
        return value


def _format_validation_error(error: ValidationError) -> InvalidOptionError:
    first = error.errors()[0]
    option = ".".join(str(part) for part in first["loc"])
    return InvalidOptionError(option, first["msg"])


def resolve_options(options: GeneratorOptions | dict[str, Any] | None = None) -> GeneratorOptions:
    """Validate options given as a model, a dict or None (all defaults)."""
    if isinstance(options, GeneratorOptions):
        return options
    try:
        return GeneratorOptions.model_validate(options or {})
    except ValidationError as e:
        raise _format_validation_error(e) from e
