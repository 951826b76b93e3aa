"""RAML types for parameters: terminal types only."""

from typing import Any

from rapid_api.errors import UnsupportedTypeError
from rapid_api.introspect.descriptor import (
    PointerType,
    PrimitiveType,
    StructType,
    TypeDescriptor,
    describe,
)


def type_to_raml(tp: Any) -> dict[str, Any]:
    """Map a primitive type to ``{"type": ...}``.

    Models, collections and anything else non-terminal raise
    UnsupportedTypeError; only primitives may appear as parameters.
    """
    return _descriptor_to_raml(describe(tp))


def _descriptor_to_raml(desc: TypeDescriptor) -> dict[str, Any]:
    if isinstance(desc, PointerType):
        return _descriptor_to_raml(desc.elem)
    if isinstance(desc, PrimitiveType):
        return {"type": desc.raml_type}
    raise UnsupportedTypeError(f"unsupported type {desc.name}")


def struct_to_raml_params(tp: Any, required: bool) -> dict[str, Any]:
    """RAML parameter declarations for every field of a model, keyed by parameter name."""
    desc = describe(tp)
    while isinstance(desc, PointerType):
        desc = desc.elem
    if not isinstance(desc, StructType):
        raise UnsupportedTypeError(f"parameters must be a model, not {desc.name}")
    params = {}
    for field in desc.fields:
        if not field.exported:
            continue
        param = _descriptor_to_raml(field.descriptor)
        param["required"] = required
        params[field.param_name] = param
    return params
