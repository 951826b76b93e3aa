"""RAML generator. Renders a Schema as a RAML 0.8 document.

Named models become JSON Schema entries under ``schemas`` and are referenced
by name from request and response bodies. Every method description carries a
generated curl transcript unless the author already supplied one.
"""

import json
from typing import Any

import yaml
from pydantic import PydanticUserError

from rapid_api.errors import SerializationError
from rapid_api.generator.tree import build_route_tree
from rapid_api.introspect.collect import TypeMap, collect_types
from rapid_api.introspect.descriptor import PointerType, StructType, adapter_for, describe
from rapid_api.introspect.example import make_example
from rapid_api.introspect.primitive import struct_to_raml_params
from rapid_api.log import logger
from rapid_api.schema.base import DEFAULT_CONTENT_TYPE, Resource, Route, Schema
from rapid_api.schema.path import path_variables

RAML_HEADER = "#%RAML 0.8\n"
STREAMING_DESCRIPTION = "Streaming response."


class _RamlDumper(yaml.SafeDumper):
    def ignore_aliases(self, data: Any) -> bool:
        return True


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


_RamlDumper.add_representer(str, _represent_str)


class RamlGenerator:
    """Generates a RAML document for a Schema served at ``base_url``."""

    def __init__(self, base_url: str):
        self.base_url = base_url

    def generate(self, schema: Schema) -> str:
        title = schema.name
        if schema.description:
            title = f"{schema.name} - {schema.description}"
        doc: dict[Any, Any] = {
            "baseUri": self.base_url,
            "mediaType": DEFAULT_CONTENT_TYPE,
            "title": title,
        }

        schemas = self._schemas(schema)
        if schemas:
            doc["schemas"] = schemas

        for resource in schema.resources:
            if resource.hidden:
                continue
            doc[resource.simplify_path()] = self._resource(resource)

        try:
            body = yaml.dump(
                doc,
                Dumper=_RamlDumper,
                sort_keys=False,
                default_flow_style=False,
                allow_unicode=True,
            )
        except yaml.YAMLError as e:
            raise SerializationError(f"cannot render RAML: {e}") from e
        return RAML_HEADER + body

    def _schemas(self, schema: Schema) -> list[dict[str, str]]:
        type_map: TypeMap = {}
        for route in schema.routes():
            collect_types(type_map, route.request_type)
            for response in route.responses:
                collect_types(type_map, response.type)
        logger.debug("Collected %d named types for %s", len(type_map), schema.name)
        return [{name: _json_schema(model)} for name, model in type_map.items()]

    def _resource(self, resource: Resource) -> dict[Any, Any]:
        node: dict[Any, Any] = {"displayName": resource.name}
        if resource.description:
            node["description"] = resource.description

        tree = build_route_tree(resource)
        uri_parameters = self._uri_parameters(resource.simplify_path(), tree.routes)
        if uri_parameters:
            node["uriParameters"] = uri_parameters
        for route in tree.routes:
            node[route.method.lower()] = self._method(route)

        for rpath, child in tree.nested.items():
            sub: dict[Any, Any] = {}
            uri_parameters = self._uri_parameters(rpath, child.routes)
            if uri_parameters:
                sub["uriParameters"] = uri_parameters
            for route in child.routes:
                sub[route.method.lower()] = self._method(route)
            node[rpath] = sub
        return node

    def _uri_parameters(self, path: str, routes: list[Route]) -> dict[str, Any]:
        names = path_variables(path)
        if not names:
            return {}
        for route in routes:
            if route.path_type is not None:
                params = struct_to_raml_params(route.path_type, required=True)
                return {name: params[name] for name in names if name in params}
        return {}

    def _method(self, route: Route) -> dict[str, Any]:
        method: dict[str, Any] = {}

        description = route.name
        if route.description:
            description += " - " + route.description
        if "curl" not in description:
            example = self.request_example(route).rstrip("\n")
            # Some RAML renderers strip one leading space from continuation
            # lines of a literal block, hence five spaces after the first line.
            example = "    " + "\n     ".join(example.split("\n"))
            description += "\n\n\n" + example
        method["description"] = description

        if route.query_type is not None:
            method["queryParameters"] = struct_to_raml_params(route.query_type, required=False)

        if route.request_type is not None:
            body = self._body(route.request_type)
            if route.example:
                body["example"] = route.example
            method["body"] = {DEFAULT_CONTENT_TYPE: body}

        responses: dict[int, Any] = {}
        for response in route.responses:
            entry: dict[str, Any] = {"body": {response.content_type: self._body(response.type)}}
            description = response.description
            if response.streaming:
                description = STREAMING_DESCRIPTION
                entry["headers"] = {"Transfer-Encoding": {"type": "string"}}
            if description:
                entry["description"] = description
            responses[response.status] = entry
        method["responses"] = responses
        return method

    def _body(self, tp: Any) -> dict[str, Any]:
        if tp is None:
            return {}
        desc = describe(tp)
        while isinstance(desc, PointerType):
            desc = desc.elem
        if isinstance(desc, StructType):
            schema = desc.name
        else:
            schema = _json_schema(desc.python_type)
        return {"schema": schema, "example": make_example(desc.python_type)}

    def request_example(self, route: Route) -> str:
        """A curl invocation followed by the default response body."""
        parts = ["$ curl"]
        if route.method != "GET":
            parts.append(f"-X {route.method}")
        if route.request_type is not None:
            parts.append(f"--data-binary '{make_example(route.request_type, indent=False)}'")
        parts.append(self.base_url + route.simplify_path())
        text = " ".join(parts) + "\n"

        response = route.default_response()
        if response.type is not None:
            text += make_example(response.type)
        return text


def _json_schema(tp: Any) -> str:
    try:
        return json.dumps(adapter_for(tp).json_schema(by_alias=True), indent=2)
    except PydanticUserError as e:
        raise SerializationError(f"cannot build JSON schema for {describe(tp).name}: {e}") from e


def schema_to_raml(base_url: str, schema: Schema) -> str:
    return RamlGenerator(base_url).generate(schema)
