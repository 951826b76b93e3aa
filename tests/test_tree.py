import pytest

from rapid_api.errors import SchemaError
from rapid_api.generator.tree import build_route_tree, relative_path
from rapid_api.schema.base import Resource, Route


def _resource(*routes: Route) -> Resource:
    return Resource(name="Users", path="/users", routes=list(routes))


class TestRelativePath:
    def test_resource_itself(self):
        route = Route(name="List", path="/users")
        assert relative_path(_resource(route), route) == ""

    def test_nested_path_is_simplified(self):
        route = Route(name="Get", path="/users/{id:\\d+}")
        assert relative_path(_resource(route), route) == "/{id}"

    def test_leading_slash_added(self):
        route = Route(name="Get", path="/users{id}")
        assert relative_path(_resource(route), route) == "/{id}"

    def test_outside_prefix(self):
        route = Route(name="Get", path="/groups/1")
        with pytest.raises(SchemaError, match="resource /users has route /groups/1 outside prefix"):
            relative_path(_resource(route), route)


class TestBuildRouteTree:
    def test_groups_by_path(self):
        list_ = Route(name="List", path="/users")
        create = Route(name="Create", path="/users", method="POST")
        get = Route(name="Get", path="/users/{id:\\d+}")
        delete = Route(name="Delete", path="/users/{id}", method="DELETE")
        tree = build_route_tree(_resource(list_, create, get, delete))

        assert tree.routes == [list_, create]
        assert list(tree.nested) == ["/{id}"]
        assert tree.nested["/{id}"].routes == [get, delete]

    def test_skips_hidden_routes(self):
        secret = Route(name="Secret", path="/users/secret", hidden=True)
        list_ = Route(name="List", path="/users")
        tree = build_route_tree(_resource(secret, list_))
        assert tree.routes == [list_]
        assert tree.nested == {}
