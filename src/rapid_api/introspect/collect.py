"""Type graph collection: every named model reachable from a type."""

from typing import Any

from rapid_api.introspect.descriptor import (
    MappingType,
    PointerType,
    PrimitiveType,
    SequenceType,
    StructType,
    TypeDescriptor,
    describe,
)

TypeMap = dict[str, type]


def collect_types(type_map: TypeMap, tp: Any) -> None:
    """Add every model reachable from ``tp`` to ``type_map``, keyed by class name.

    Models already present by name are not descended into again, so two
    distinct models sharing a class name collide and the first one wins.
    """
    if tp is None:
        return
    _collect(type_map, describe(tp))


def _collect(type_map: TypeMap, desc: TypeDescriptor) -> None:
    if isinstance(desc, PrimitiveType) and desc.is_date:
        return
    if desc.name in type_map:
        return

    if isinstance(desc, StructType):
        type_map[desc.name] = desc.python_type
        for field in desc.fields:
            if not field.exported:
                continue
            _collect(type_map, field.descriptor)

    elif isinstance(desc, (PointerType, SequenceType)):
        _collect(type_map, desc.elem)

    elif isinstance(desc, MappingType):
        _collect(type_map, desc.key)
        _collect(type_map, desc.elem)
