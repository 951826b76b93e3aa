"""Data models describing an API definition.

A Schema is a list of Resources, each grouping the Routes that share its
path prefix. Request, query, path and response payloads are Python types
(usually pydantic models) inspected at generation and dispatch time.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, GetCoreSchemaHandler
from pydantic_core import CoreSchema, core_schema

from rapid_api.schema.path import simplified_path

DEFAULT_CONTENT_TYPE = "application/json"


class RawData(bytes):
    """Body payload passed through verbatim, bypassing JSON."""

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: GetCoreSchemaHandler) -> CoreSchema:
        return core_schema.no_info_after_validator_function(cls, core_schema.bytes_schema())


class Param:
    """Field marker naming a path or query parameter.

        class UserPath(BaseModel):
            user_id: Annotated[int, Param("id")]
    """

    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return f"Param({self.name!r})"


class Response(BaseModel):
    """One declared outcome of a route."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status: int
    type: Any = None  # None means an empty body
    content_type: str = DEFAULT_CONTENT_TYPE
    description: str = ""
    streaming: bool = False


class Route(BaseModel):
    """One HTTP method bound to one path."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    path: str  # /users/{id} or /users/{id:\d+}
    method: str = "GET"
    description: str = ""
    hidden: bool = False
    request_type: Any = None
    query_type: Any = None
    path_type: Any = None
    example: str = ""
    responses: list[Response] = []

    def default_response(self) -> Response:
        """The first declared response, or an empty 200 when none is declared."""
        if self.responses:
            return self.responses[0]
        return Response(status=200)

    def simplify_path(self) -> str:
        return simplified_path(self.path)


class Resource(BaseModel):
    """A path prefix grouping routes."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    path: str
    description: str = ""
    hidden_flag: bool = False
    routes: list[Route] = []

    @property
    def hidden(self) -> bool:
        """Hidden when explicitly flagged or when every route is hidden."""
        return self.hidden_flag or all(r.hidden for r in self.routes)

    def simplify_path(self) -> str:
        return simplified_path(self.path) or "/"


class Schema(BaseModel):
    """The whole API."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    description: str = ""
    resources: list[Resource] = []

    def routes(self) -> list[Route]:
        return [r for res in self.resources for r in res.routes]
