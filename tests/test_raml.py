import json
from typing import Annotated

import pytest
import yaml
from pydantic import BaseModel, ConfigDict

from rapid_api.errors import SchemaError, SerializationError, UnsupportedTypeError
from rapid_api.generator.raml import RamlGenerator, schema_to_raml
from rapid_api.schema.base import Param, Resource, Route, Schema
from rapid_api.schema.builder import define

URL = "http://api.example.com"


class User(BaseModel):
    id: int
    name: str
    friends: list["User"] = []


class NewUser(BaseModel):
    name: str


class UserPath(BaseModel):
    id: int


class ListQuery(BaseModel):
    limit: int = 10
    name: Annotated[str, Param("q")] = ""


class Event(BaseModel):
    kind: str


class BadQuery(BaseModel):
    user: User


class Handle:
    pass


class Resources(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    handle: Handle


def _schema() -> Schema:
    svc = define("Users").description("User management")
    users = svc.resource("Users", "/users").description("All the users")
    users.route("List", "/users").get().query(ListQuery).response(200, list[User])
    (
        users.route("Create", "/users")
        .post()
        .description("Create a user")
        .request(NewUser)
        .response(201, User, description="Created")
        .response(400)
    )
    users.route("Get", "/users/{id:\\d+}").get().path(UserPath).response(200, User)
    users.route("Watch", "/users/events").get().streaming_response(200, Event)
    users.route("Internal", "/users/internal").get().hidden().response(200)
    svc.resource("Admin", "/admin").route("Reset", "/admin/reset").post().hidden()
    return svc.build()


def _load(text: str) -> dict:
    header, _, body = text.partition("\n")
    assert header == "#%RAML 0.8"
    return yaml.safe_load(body)


class TestDocument:
    def test_header(self):
        doc = _load(schema_to_raml(URL, _schema()))
        assert doc["baseUri"] == URL
        assert doc["mediaType"] == "application/json"
        assert doc["title"] == "Users - User management"

    def test_title_without_description(self):
        svc = define("Plain")
        svc.route("Index", "/").get()
        assert _load(schema_to_raml(URL, svc.build()))["title"] == "Plain"

    def test_schemas(self):
        doc = _load(schema_to_raml(URL, _schema()))
        names = [next(iter(entry)) for entry in doc["schemas"]]
        assert names == ["User", "NewUser", "Event"]
        user_schema = json.loads(doc["schemas"][0]["User"])
        # recursive models are emitted as a $ref into $defs
        if "$ref" in user_schema:
            user_schema = user_schema["$defs"]["User"]
        assert set(user_schema["properties"]) == {"id", "name", "friends"}

    def test_no_schemas_without_models(self):
        svc = define("Plain")
        svc.route("Index", "/").get().response(200, str)
        assert "schemas" not in _load(schema_to_raml(URL, svc.build()))

    def test_hidden_resources_and_routes(self):
        doc = _load(schema_to_raml(URL, _schema()))
        assert "/admin" not in doc
        assert "/internal" not in doc["/users"]

    def test_idempotent(self):
        schema = _schema()
        assert schema_to_raml(URL, schema) == schema_to_raml(URL, schema)

    def test_implicit_root_resource(self):
        svc = define("Test")
        svc.route("Index", "/{id}").get().response(200)
        doc = _load(schema_to_raml(URL, svc.build()))
        assert doc["/"]["displayName"] == "Test"
        assert "get" in doc["/"]["/{id}"]


class TestResource:
    def test_resource_section(self):
        users = _load(schema_to_raml(URL, _schema()))["/users"]
        assert users["displayName"] == "Users"
        assert users["description"] == "All the users"
        assert set(users) >= {"get", "post", "/{id}", "/events"}

    def test_query_parameters(self):
        get = _load(schema_to_raml(URL, _schema()))["/users"]["get"]
        assert get["queryParameters"] == {
            "limit": {"type": "integer", "required": False},
            "q": {"type": "string", "required": False},
        }

    def test_uri_parameters(self):
        node = _load(schema_to_raml(URL, _schema()))["/users"]["/{id}"]
        assert node["uriParameters"] == {"id": {"type": "integer", "required": True}}
        assert node["get"]["responses"][200]["body"]["application/json"]["schema"] == "User"

    def test_request_body(self):
        post = _load(schema_to_raml(URL, _schema()))["/users"]["post"]
        body = post["body"]["application/json"]
        assert body["schema"] == "NewUser"
        assert json.loads(body["example"]) == {"name": ""}

    def test_example_override(self):
        svc = define("Test")
        svc.route("Create", "/").post().request(NewUser).example('{"name": "Alice"}').response(201)
        post = _load(schema_to_raml(URL, svc.build()))["/"]["post"]
        assert post["body"]["application/json"]["example"] == '{"name": "Alice"}'

    def test_responses(self):
        responses = _load(schema_to_raml(URL, _schema()))["/users"]["post"]["responses"]
        assert responses[201]["description"] == "Created"
        assert responses[201]["body"]["application/json"]["schema"] == "User"
        assert responses[400] == {"body": {"application/json": {}}}

    def test_inline_schema_for_non_models(self):
        get = _load(schema_to_raml(URL, _schema()))["/users"]["get"]
        body = get["responses"][200]["body"]["application/json"]
        assert json.loads(body["schema"])["type"] == "array"
        assert json.loads(body["example"]) == [
            {"id": 0, "name": "", "friends": [{"id": 0, "name": "", "friends": []}]}
        ]

    def test_primitive_payload(self):
        svc = define("Test")
        svc.route("Name", "/").get().response(200, str)
        body = _load(schema_to_raml(URL, svc.build()))["/"]["get"]["responses"][200]["body"]
        assert json.loads(body["application/json"]["schema"]) == {"type": "string"}
        assert body["application/json"]["example"] == '""'

    def test_streaming_response(self):
        watch = _load(schema_to_raml(URL, _schema()))["/users"]["/events"]["get"]
        response = watch["responses"][200]
        assert response["headers"] == {"Transfer-Encoding": {"type": "string"}}
        assert response["description"] == "Streaming response."


class TestDescription:
    def test_curl_transcript(self):
        get = _load(schema_to_raml(URL, _schema()))["/users"]["/{id}"]["get"]
        assert get["description"].startswith(
            "Get\n\n\n    $ curl http://api.example.com/users/{id}\n     {\n       \"id\": 0,"
        )

    def test_description_with_curl_is_kept(self):
        svc = define("Test")
        svc.route("Index", "/").get().description("try: curl /")
        get = _load(schema_to_raml(URL, svc.build()))["/"]["get"]
        assert get["description"] == "Index - try: curl /"

    def test_request_example(self):
        create = _schema().routes()[1]
        assert RamlGenerator(URL).request_example(create) == (
            "$ curl -X POST --data-binary '{\"name\":\"\"}' http://api.example.com/users\n"
            + json.dumps(
                {"id": 0, "name": "", "friends": [{"id": 0, "name": "", "friends": []}]},
                indent=2,
            )
        )

    def test_request_example_without_response_body(self):
        svc = define("Test")
        svc.route("Delete", "/{id}").delete().response(204)
        route = svc.build().routes()[0]
        assert RamlGenerator(URL).request_example(route) == (
            "$ curl -X DELETE http://api.example.com/{id}\n"
        )


class TestErrors:
    def test_route_outside_prefix(self):
        schema = Schema(
            name="Broken",
            resources=[
                Resource(name="Users", path="/users", routes=[Route(name="Get", path="/groups")])
            ],
        )
        with pytest.raises(SchemaError):
            schema_to_raml(URL, schema)

    def test_unsupported_query_type(self):
        svc = define("Test")
        svc.route("Index", "/").get().query(BadQuery)
        with pytest.raises(UnsupportedTypeError):
            schema_to_raml(URL, svc.build())

    def test_unserializable_model(self):
        svc = define("Test")
        svc.route("Index", "/").get().response(200, Resources)
        with pytest.raises(SerializationError, match="Resources"):
            schema_to_raml(URL, svc.build())
