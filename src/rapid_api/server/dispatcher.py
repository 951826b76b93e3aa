"""Request dispatcher. Serves a Schema as an ASGI application.

Each route is bound to a handler when the Server is constructed. Handlers
declare what they want through parameter annotations:

    class Users:
        async def get(self, path: UserPath, query: GetQuery) -> User: ...
        def create(self, params: Params, body: NewUser) -> User: ...

Coroutine handlers are awaited; plain functions run in a worker thread.
The handler object is shared between concurrent requests and is not locked.
"""

import inspect
import re
import typing
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import JSONResponse, Response, StreamingResponse
from starlette.routing import Route as StarletteRoute
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_404_NOT_FOUND
from starlette.types import Receive, Scope, Send

from rapid_api.errors import DecodeError, HandlerNotFoundError, HTTPError, SchemaError
from rapid_api.introspect.descriptor import (
    PointerType,
    SequenceType,
    StructType,
    describe,
    strip_optional,
)
from rapid_api.log import logger
from rapid_api.schema.base import Route, Schema
from rapid_api.schema.builder import HTTP_METHODS
from rapid_api.schema.path import compile_path
from rapid_api.server.codec import Codec, CodecRegistry


class Params(dict[str, str]):
    """Raw path parameters as matched from the URL."""


# Argument kinds a handler parameter can bind to.
PARAMS, REQUEST, PATH, QUERY, BODY = "params", "request", "path", "query", "body"


@dataclass
class _Binding:
    route: Route
    pattern: re.Pattern
    handler: Callable[..., Any]
    arguments: list[tuple[str, str]]  # (parameter name, argument kind)

    async def invoke(self, kwargs: dict[str, Any]) -> Any:
        if _is_coroutine_handler(self.handler):
            return await self.handler(**kwargs)
        result = await run_in_threadpool(self.handler, **kwargs)
        if inspect.isawaitable(result):
            return await result
        return result


def _is_coroutine_handler(handler: Callable[..., Any]) -> bool:
    return inspect.iscoroutinefunction(handler) or inspect.iscoroutinefunction(
        getattr(handler, "__call__", None)
    )


class Server:
    """ASGI application dispatching requests to the handlers of a Schema."""

    def __init__(self, schema: Schema, handlers: Any, codecs: CodecRegistry | None = None):
        self.schema = schema
        self.codecs = codecs or CodecRegistry()
        self._bindings: dict[str, list[_Binding]] = {}
        for route in schema.routes():
            for tp in (route.path_type, route.query_type):
                if tp is not None and not isinstance(describe(strip_optional(tp)), StructType):
                    raise SchemaError(f"route {route.name}: parameters must be a model, not {tp!r}")
            handler = _resolve_handler(handlers, route)
            binding = _Binding(
                route=route,
                pattern=compile_path(route.path),
                handler=handler,
                arguments=_plan_arguments(route, handler),
            )
            self._bindings.setdefault(route.method, []).append(binding)
        self.app = Starlette(
            routes=[StarletteRoute("/{path:path}", self.dispatch, methods=list(HTTP_METHODS))]
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.app(scope, receive, send)

    def match(self, method: str, path: str) -> tuple[_Binding, Params] | None:
        """First route registered for ``method`` whose pattern matches ``path``."""
        for binding in self._bindings.get(method, ()):
            if m := binding.pattern.match(path):
                return binding, Params(m.groupdict())
        return None

    async def dispatch(self, request: Request) -> Response:
        matched = self.match(request.method, request.url.path)
        if matched is None:
            return error_response(HTTP_404_NOT_FOUND, "not found")
        binding, params = matched
        route = binding.route
        logger.debug("%s %s matched route %s", request.method, request.url.path, route.name)

        try:
            decoded = await self._decode(route, request, params)
        except DecodeError as e:
            logger.warning("Rejected request for route %s: %s", route.name, e)
            return error_response(HTTP_400_BAD_REQUEST, str(e))

        kwargs = {name: decoded[kind] for name, kind in binding.arguments}
        try:
            result = await binding.invoke(kwargs)
        except HTTPError as e:
            return error_response(e.status, e.message, e.headers)
        except Exception as e:
            logger.exception("Handler for route %s failed", route.name)
            return error_response(HTTP_400_BAD_REQUEST, str(e))
        return self._encode(route, result)

    async def _decode(self, route: Route, request: Request, params: Params) -> dict[str, Any]:
        decoded: dict[str, Any] = {PARAMS: params, REQUEST: request}
        if route.path_type is not None:
            decoded[PATH] = decode_parameters(
                route.path_type, {k: [v] for k, v in params.items()}, "path"
            )
        if route.query_type is not None:
            query = {k: request.query_params.getlist(k) for k in request.query_params.keys()}
            decoded[QUERY] = decode_parameters(route.query_type, query, "query")
        if route.request_type is not None:
            codec = self.codecs.for_type(route.request_type, request.headers.get("content-type"))
            decoded[BODY] = codec.decode(route.request_type, await request.body())
        return decoded

    def _encode(self, route: Route, result: Any) -> Response:
        response = route.default_response()
        if response.type is None:
            return Response(status_code=response.status)
        codec = self.codecs.for_type(response.type, response.content_type)
        if response.streaming:
            return StreamingResponse(
                _chunks(codec, response.type, result),
                status_code=response.status,
                media_type=response.content_type,
            )
        return Response(
            codec.encode(response.type, result),
            status_code=response.status,
            media_type=response.content_type,
        )


def error_response(status: int, message: str, headers: Mapping[str, str] | None = None) -> Response:
    return JSONResponse({"e": message}, status_code=status, headers=dict(headers or {}))


def decode_parameters(tp: Any, values: Mapping[str, list[str]], where: str) -> Any:
    """Validate a model from string parameters, keyed by each field's parameter name.

    Sequence fields receive every value given for their name, others the first.
    """
    model = strip_optional(tp)
    data: dict[str, Any] = {}
    for field in describe(model).fields:
        if not field.exported or not values.get(field.param_name):
            continue
        desc = field.descriptor
        while isinstance(desc, PointerType):
            desc = desc.elem
        given = values[field.param_name]
        data[field.input_name] = given if isinstance(desc, SequenceType) else given[0]
    try:
        return model.model_validate(data)
    except ValidationError as e:
        error = e.errors()[0]
        location = ".".join(str(part) for part in error["loc"])
        raise DecodeError(f"invalid {where} parameter {location}: {error['msg']}") from e


def _chunks(codec: Codec, tp: Any, items: Any) -> Any:
    if hasattr(items, "__aiter__"):
        return _async_chunks(codec, tp, items)
    return (codec.encode(tp, item) + codec.delimiter for item in items)


async def _async_chunks(codec: Codec, tp: Any, items: Any) -> Any:
    async for item in items:
        yield codec.encode(tp, item) + codec.delimiter


def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def _resolve_handler(handlers: Any, route: Route) -> Callable[..., Any]:
    if isinstance(handlers, Mapping):
        handler = handlers.get(route.name)
    else:
        handler = getattr(handlers, route.name, None) or getattr(
            handlers, _snake_case(route.name), None
        )
    if handler is None or not callable(handler):
        raise HandlerNotFoundError(f"no handler for route {route.name}")
    return handler


def _plan_arguments(route: Route, handler: Callable[..., Any]) -> list[tuple[str, str]]:
    try:
        hints = typing.get_type_hints(handler)
    except (NameError, TypeError):
        hints = {}
    arguments = []
    for name, param in inspect.signature(handler).parameters.items():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        kind = _argument_kind(route, name, hints.get(name, param.annotation))
        if kind is None:
            if param.default is not param.empty:
                continue
            raise SchemaError(
                f"handler for route {route.name} has parameter {name!r} "
                "that matches none of its path, query or request types"
            )
        arguments.append((name, kind))
    return arguments


def _argument_kind(route: Route, name: str, annotation: Any) -> str | None:
    annotation = strip_optional(annotation)
    if isinstance(annotation, type):
        if issubclass(annotation, Params):
            return PARAMS
        if issubclass(annotation, Request):
            return REQUEST
    kinds = [
        kind
        for kind, tp in ((PATH, route.path_type), (QUERY, route.query_type), (BODY, route.request_type))
        if tp is not None and annotation == strip_optional(tp)
    ]
    if len(kinds) <= 1:
        return kinds[0] if kinds else None
    # The same model serves several kinds; the parameter name picks one.
    if name in kinds:
        return name
    raise SchemaError(
        f"handler for route {route.name} has parameter {name!r} "
        f"that could be any of {', '.join(kinds)}; name it after one of them"
    )
