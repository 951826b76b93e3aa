"""Public, JSON-serializable view of a Schema.

Clients that cannot import the Python types (code generators, other
languages) consume this instead: every payload type is spelled out as a
tree of PublicType nodes.
"""

from typing import Any

from pydantic import BaseModel

from rapid_api.introspect.descriptor import (
    MappingType,
    PointerType,
    PrimitiveType,
    SequenceType,
    StructType,
    TypeDescriptor,
    describe,
)
from rapid_api.schema.base import Route, Schema

PRIMITIVE_KINDS = {
    "bool": "bool",
    "int": "int",
    "float": "float",
    "Decimal": "float",
    "str": "string",
    "UUID": "string",
    "datetime": "time",
    "date": "time",
    "bytes": "bytes",
}


class PublicType(BaseModel):
    kind: str
    name: str | None = None
    fields: list["PublicType"] | None = None
    key: "PublicType | None" = None
    value: "PublicType | None" = None
    elem: "PublicType | None" = None
    alias: str | None = None


class PublicRoute(BaseModel):
    name: str
    description: str
    path: str
    method: str
    request_type: PublicType | None
    response_type: PublicType | None
    query_type: PublicType | None
    path_type: PublicType | None
    streaming_response: bool
    success_status: int


class PublicSchema(BaseModel):
    name: str
    description: str
    routes: list[PublicRoute]


def schema_to_public(schema: Schema) -> PublicSchema:
    return PublicSchema(
        name=schema.name,
        description=schema.description,
        routes=[_route_to_public(route) for route in schema.routes()],
    )


def _route_to_public(route: Route) -> PublicRoute:
    response = route.default_response()
    return PublicRoute(
        name=route.name,
        description=route.description,
        path=route.path,
        method=route.method,
        request_type=type_to_public(route.request_type),
        response_type=type_to_public(response.type),
        query_type=type_to_public(route.query_type),
        path_type=type_to_public(route.path_type),
        streaming_response=response.streaming,
        success_status=response.status,
    )


def type_to_public(tp: Any) -> PublicType | None:
    if tp is None:
        return None
    return _descriptor_to_public(describe(tp), frozenset())


def _descriptor_to_public(desc: TypeDescriptor, expanding: frozenset) -> PublicType:
    if isinstance(desc, StructType):
        # A model already being expanded on this branch is a reference by name.
        if desc.python_type in expanding:
            return PublicType(kind="struct", name=desc.name)
        expanding = expanding | {desc.python_type}
        fields = []
        for field in desc.fields:
            if not field.exported:
                continue
            public = _descriptor_to_public(field.descriptor, expanding)
            public.name = field.name
            if field.wire_name != field.name:
                public.alias = field.wire_name
            fields.append(public)
        return PublicType(kind="struct", name=desc.name, fields=fields)
    if isinstance(desc, PointerType):
        return PublicType(kind="pointer", elem=_descriptor_to_public(desc.elem, expanding))
    if isinstance(desc, SequenceType):
        return PublicType(kind="slice", elem=_descriptor_to_public(desc.elem, expanding))
    if isinstance(desc, MappingType):
        return PublicType(
            kind="map",
            key=_descriptor_to_public(desc.key, expanding),
            value=_descriptor_to_public(desc.elem, expanding),
        )
    if isinstance(desc, PrimitiveType):
        for base in desc.python_type.__mro__:
            if base.__name__ in PRIMITIVE_KINDS:
                return PublicType(kind=PRIMITIVE_KINDS[base.__name__])
    return PublicType(kind="any")
