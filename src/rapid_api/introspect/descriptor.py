"""Structural descriptors for Python types.

describe() turns a type annotation into one of the descriptor variants
below. Schema generation, example synthesis, the public export and the
request dispatcher all walk these rather than inspecting types directly.

Pydantic models are structs; Optional[T] is a pointer to T; list/tuple/set
are sequences; dict is a mapping. Anything else that is not a known
primitive is opaque.
"""

import collections.abc
import datetime
import decimal
import functools
import types
import uuid
from dataclasses import dataclass
from typing import Annotated, Any, Union, get_args, get_origin

from pydantic import BaseModel, TypeAdapter

from rapid_api.schema.base import Param, RawData

ZERO_DATETIME = datetime.datetime(1, 1, 1, tzinfo=datetime.timezone.utc)

# Order matters: bool is an int, datetime is a date.
PRIMITIVES: list[tuple[type, str, Any]] = [
    (bool, "boolean", False),
    (int, "integer", 0),
    (float, "number", 0.0),
    (decimal.Decimal, "number", decimal.Decimal(0)),
    (str, "string", ""),
    (uuid.UUID, "string", uuid.UUID(int=0)),
    (datetime.datetime, "date", ZERO_DATETIME),
    (datetime.date, "date", datetime.date(1, 1, 1)),
    (bytes, "string", b""),
]

SEQUENCE_ORIGINS = {
    list, tuple, set, frozenset,
    collections.abc.Sequence, collections.abc.MutableSequence,
    collections.abc.Set, collections.abc.MutableSet,
    collections.abc.Iterable,
}
MAPPING_ORIGINS = {dict, collections.abc.Mapping, collections.abc.MutableMapping}


@dataclass(frozen=True)
class TypeDescriptor:
    python_type: Any

    @property
    def name(self) -> str:
        return getattr(self.python_type, "__name__", repr(self.python_type))


@dataclass(frozen=True)
class PrimitiveType(TypeDescriptor):
    raml_type: str
    zero: Any

    @property
    def is_date(self) -> bool:
        return self.raml_type == "date"

    @property
    def is_raw(self) -> bool:
        return isinstance(self.python_type, type) and issubclass(self.python_type, RawData)


@dataclass(frozen=True)
class StructType(TypeDescriptor):
    @property
    def fields(self) -> list["FieldDescriptor"]:
        return _struct_fields(self.python_type)


@dataclass(frozen=True)
class SequenceType(TypeDescriptor):
    elem: TypeDescriptor


@dataclass(frozen=True)
class MappingType(TypeDescriptor):
    key: TypeDescriptor
    elem: TypeDescriptor


@dataclass(frozen=True)
class PointerType(TypeDescriptor):
    elem: TypeDescriptor


@dataclass(frozen=True)
class OpaqueType(TypeDescriptor):
    pass


@dataclass(frozen=True)
class FieldDescriptor:
    """One model field and the names it goes by on the wire."""

    name: str
    annotation: Any
    wire_name: str  # JSON key
    input_name: str  # key pydantic validates from
    param_name: str  # path/query parameter name
    required: bool
    exported: bool

    @property
    def descriptor(self) -> TypeDescriptor:
        return describe(self.annotation)


@functools.lru_cache(maxsize=None)
def describe(tp: Any) -> TypeDescriptor:
    """Describe a type annotation."""
    origin = get_origin(tp)
    if origin is Annotated:
        return describe(get_args(tp)[0])
    if origin is Union or origin is types.UnionType:
        args = get_args(tp)
        non_none = [a for a in args if a is not type(None)]
        if len(non_none) == 1 and len(args) == 2:
            return PointerType(tp, describe(non_none[0]))
        return OpaqueType(tp)
    if origin in SEQUENCE_ORIGINS:
        args = get_args(tp)
        if origin is tuple and not (len(args) == 2 and args[1] is Ellipsis):
            return OpaqueType(tp)
        return SequenceType(tp, describe(args[0] if args else Any))
    if origin in MAPPING_ORIGINS:
        args = get_args(tp) or (Any, Any)
        return MappingType(tp, describe(args[0]), describe(args[1]))
    if isinstance(tp, type):
        if issubclass(tp, BaseModel):
            return StructType(tp)
        for base, raml_type, zero in PRIMITIVES:
            if issubclass(tp, base):
                if issubclass(tp, RawData):
                    zero = tp(b"")
                return PrimitiveType(tp, raml_type, zero)
        if tp in (list, tuple, set, frozenset):
            return SequenceType(tp, describe(Any))
        if tp is dict:
            return MappingType(tp, describe(Any), describe(Any))
    return OpaqueType(tp)


def strip_optional(tp: Any) -> Any:
    """Return T for Optional[T], otherwise tp unchanged."""
    desc = describe(tp)
    if isinstance(desc, PointerType):
        return desc.elem.python_type
    return tp


@functools.lru_cache(maxsize=None)
def _struct_fields(model: type[BaseModel]) -> list[FieldDescriptor]:
    if not model.__pydantic_complete__:
        model.model_rebuild()
    fields = []
    for name, info in model.model_fields.items():
        wire_name = info.serialization_alias or info.alias or name
        input_name = info.validation_alias if isinstance(info.validation_alias, str) else None
        param_name = next((m.name for m in info.metadata if isinstance(m, Param)), wire_name)
        fields.append(
            FieldDescriptor(
                name=name,
                annotation=info.annotation,
                wire_name=wire_name,
                input_name=input_name or info.alias or name,
                param_name=param_name,
                required=info.is_required(),
                exported=not info.exclude,
            )
        )
    return fields


@functools.lru_cache(maxsize=None)
def adapter_for(tp: Any) -> TypeAdapter:
    return TypeAdapter(tp)
