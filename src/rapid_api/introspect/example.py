"""Example value synthesis.

Every model field is filled, every sequence gets exactly one element and
every mapping exactly one entry, so an example always shows the full shape
of a payload. Primitives take their zero value.

Recursion is bounded by a visited set of models scoped to one top-level
call. The set is threaded through every step and handed back with each
value, so it carries across sibling branches too: once a model has been
expanded anywhere in the tree, any later occurrence of it is rendered as
a zero-valued instance, whether or not it is on an actual cycle.
"""

import json
from typing import Any

from pydantic import PydanticUserError
from pydantic_core import PydanticSerializationError

from rapid_api.errors import SerializationError
from rapid_api.introspect.descriptor import (
    MappingType,
    PointerType,
    PrimitiveType,
    SequenceType,
    StructType,
    TypeDescriptor,
    adapter_for,
    describe,
)

Visited = frozenset


def make_example(tp: Any, indent: bool = True) -> str:
    """Render a synthesized example of ``tp`` as JSON text."""
    value = make_example_value(tp)
    try:
        data = adapter_for(tp).dump_python(value, mode="json", by_alias=True, warnings=False)
    except (PydanticSerializationError, PydanticUserError) as e:
        raise SerializationError(f"cannot serialize example for {describe(tp).name}: {e}") from e
    if indent:
        return json.dumps(data, indent=2)
    return json.dumps(data, separators=(",", ":"))


def make_example_value(tp: Any) -> Any:
    value, _ = synthesize(describe(tp), Visited())
    return value


def synthesize(desc: TypeDescriptor, visited: Visited) -> tuple[Any, Visited]:
    """Build an example for ``desc``; returns the value and the updated visited set."""
    if isinstance(desc, PointerType):
        return synthesize(desc.elem, visited)

    if isinstance(desc, StructType):
        model = desc.python_type
        if model in visited:
            return zero_value(desc), visited
        visited = visited | {model}
        values = {}
        for field in desc.fields:
            if field.exported:
                values[field.name], visited = synthesize(field.descriptor, visited)
            else:
                values[field.name] = zero_value(field.descriptor)
        return model.model_construct(**values), visited

    if isinstance(desc, SequenceType):
        elem, visited = synthesize(desc.elem, visited)
        return [elem], visited

    if isinstance(desc, MappingType):
        key, visited = synthesize(desc.key, visited)
        elem, visited = synthesize(desc.elem, visited)
        return {key: elem}, visited

    return zero_value(desc), visited


def zero_value(desc: TypeDescriptor, zeroing: frozenset = frozenset()) -> Any:
    """The empty value of a type. Nested models are zeroed too, unless already being zeroed."""
    if isinstance(desc, PrimitiveType):
        return desc.zero
    if isinstance(desc, SequenceType):
        return []
    if isinstance(desc, MappingType):
        return {}
    if isinstance(desc, StructType):
        model = desc.python_type
        if model in zeroing:
            return None
        zeroing = zeroing | {model}
        return model.model_construct(
            **{field.name: zero_value(field.descriptor, zeroing) for field in desc.fields}
        )
    # pointers and opaque types
    return None
