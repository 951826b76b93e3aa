"""Fluent API for defining a Schema.

    svc = define("Users")
    users = svc.resource("Users", "/users")
    users.route("List", "/users").get().query(ListQuery).response(200, list[User])
    users.route("Get", "/users/{id}").get().path(UserPath).response(200, User)
    schema = svc.build()
"""

from typing import Any

from rapid_api.errors import SchemaError
from rapid_api.schema.base import DEFAULT_CONTENT_TYPE, Resource, Response, Route, Schema

HTTP_METHODS = ("GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS")


class RouteBuilder:
    def __init__(self, name: str, path: str):
        self._fields: dict[str, Any] = {"name": name, "path": path}
        self._responses: list[Response] = []

    def method(self, method: str) -> "RouteBuilder":
        method = method.upper()
        if method not in HTTP_METHODS:
            raise SchemaError(f"route {self._fields['name']} has unknown method {method}")
        self._fields["method"] = method
        return self

    def get(self) -> "RouteBuilder":
        return self.method("GET")

    def head(self) -> "RouteBuilder":
        return self.method("HEAD")

    def post(self) -> "RouteBuilder":
        return self.method("POST")

    def put(self) -> "RouteBuilder":
        return self.method("PUT")

    def patch(self) -> "RouteBuilder":
        return self.method("PATCH")

    def delete(self) -> "RouteBuilder":
        return self.method("DELETE")

    def options(self) -> "RouteBuilder":
        return self.method("OPTIONS")

    def description(self, text: str) -> "RouteBuilder":
        self._fields["description"] = text
        return self

    def hidden(self) -> "RouteBuilder":
        self._fields["hidden"] = True
        return self

    def example(self, text: str) -> "RouteBuilder":
        """Literal request body example, used instead of a generated one."""
        self._fields["example"] = text
        return self

    def request(self, type_: Any) -> "RouteBuilder":
        self._fields["request_type"] = type_
        return self

    def query(self, type_: Any) -> "RouteBuilder":
        self._fields["query_type"] = type_
        return self

    def path(self, type_: Any) -> "RouteBuilder":
        self._fields["path_type"] = type_
        return self

    def response(
        self,
        status: int,
        type_: Any = None,
        *,
        content_type: str = DEFAULT_CONTENT_TYPE,
        description: str = "",
        streaming: bool = False,
    ) -> "RouteBuilder":
        self._responses.append(
            Response(
                status=status,
                type=type_,
                content_type=content_type,
                description=description,
                streaming=streaming,
            )
        )
        return self

    def streaming_response(self, status: int, type_: Any, **kwargs) -> "RouteBuilder":
        return self.response(status, type_, streaming=True, **kwargs)

    def build(self) -> Route:
        return Route(**self._fields, responses=list(self._responses))


class ResourceBuilder:
    def __init__(self, name: str, path: str):
        self.name = name
        self.path = path
        self._description = ""
        self._hidden = False
        self._routes: list[RouteBuilder] = []

    def description(self, text: str) -> "ResourceBuilder":
        self._description = text
        return self

    def hidden(self) -> "ResourceBuilder":
        self._hidden = True
        return self

    def route(self, name: str, path: str) -> RouteBuilder:
        route = RouteBuilder(name, path)
        self._routes.append(route)
        return route

    def build(self) -> Resource:
        routes = [r.build() for r in self._routes]
        for route in routes:
            if not route.path.startswith(self.path):
                raise SchemaError(f"resource {self.path} has route {route.path} outside prefix")
        return Resource(
            name=self.name,
            path=self.path,
            description=self._description,
            hidden_flag=self._hidden,
            routes=routes,
        )


class SchemaBuilder:
    def __init__(self, name: str):
        self.name = name
        self._description = ""
        self._resources: list[ResourceBuilder] = []
        self._root: ResourceBuilder | None = None

    def description(self, text: str) -> "SchemaBuilder":
        self._description = text
        return self

    def resource(self, name: str, path: str) -> ResourceBuilder:
        resource = ResourceBuilder(name, path)
        self._resources.append(resource)
        return resource

    def route(self, name: str, path: str) -> RouteBuilder:
        """Add a route to the implicit root resource at ``/``."""
        if self._root is None:
            self._root = self.resource(self.name, "/")
        return self._root.route(name, path)

    def build(self) -> Schema:
        resources = [r.build() for r in self._resources]
        seen: dict[str, str] = {}
        for resource in resources:
            path = resource.simplify_path()
            if path in seen:
                raise SchemaError(
                    f"resources {seen[path]} and {resource.name} share the path {path}"
                )
            seen[path] = resource.name
        return Schema(name=self.name, description=self._description, resources=resources)


def define(name: str) -> SchemaBuilder:
    return SchemaBuilder(name)
