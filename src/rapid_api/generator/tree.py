"""Groups the routes of a resource by their path below the resource prefix."""

from dataclasses import dataclass, field

from rapid_api.errors import SchemaError
from rapid_api.schema.base import Resource, Route
from rapid_api.schema.path import simplified_path


@dataclass
class RouteNode:
    routes: list[Route] = field(default_factory=list)
    nested: dict[str, "RouteNode"] = field(default_factory=dict)


def relative_path(resource: Resource, route: Route) -> str:
    """The simplified route path below the resource prefix, "" for the resource itself."""
    if not route.path.startswith(resource.path):
        raise SchemaError(f"resource {resource.path} has route {route.path} outside prefix")
    rpath = simplified_path(route.path[len(resource.path):])
    if rpath and not rpath.startswith("/"):
        rpath = "/" + rpath
    return rpath


def build_route_tree(resource: Resource) -> RouteNode:
    """Skip hidden routes; routes sharing a path become siblings under one key."""
    root = RouteNode()
    for route in resource.routes:
        if route.hidden:
            continue
        rpath = relative_path(resource, route)
        if not rpath:
            root.routes.append(route)
        else:
            root.nested.setdefault(rpath, RouteNode()).routes.append(route)
    return root
