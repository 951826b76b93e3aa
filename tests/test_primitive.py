import datetime
from typing import Annotated, Optional

import pytest
from pydantic import BaseModel, Field

from rapid_api.errors import UnsupportedTypeError
from rapid_api.introspect.primitive import struct_to_raml_params, type_to_raml
from rapid_api.schema.base import Param


class Search(BaseModel):
    limit: int = 10
    text: Annotated[str, Param("q")] = ""
    since: Optional[datetime.datetime] = None
    debug: bool = Field(default=False, exclude=True)


class Nested(BaseModel):
    search: Search


class TestTypeToRaml:
    @pytest.mark.parametrize(
        "tp, expected",
        [
            (int, "integer"),
            (bool, "boolean"),
            (float, "number"),
            (str, "string"),
            (datetime.datetime, "date"),
            (Optional[int], "integer"),
        ],
    )
    def test_primitives(self, tp, expected):
        assert type_to_raml(tp) == {"type": expected}

    def test_struct_is_unsupported(self):
        with pytest.raises(UnsupportedTypeError):
            type_to_raml(Search)

    def test_collections_are_unsupported(self):
        with pytest.raises(UnsupportedTypeError):
            type_to_raml(list[int])
        with pytest.raises(UnsupportedTypeError):
            type_to_raml(dict[str, int])


class TestStructToRamlParams:
    def test_query_params(self):
        assert struct_to_raml_params(Search, required=False) == {
            "limit": {"type": "integer", "required": False},
            "q": {"type": "string", "required": False},
            "since": {"type": "date", "required": False},
        }

    def test_required_params(self):
        params = struct_to_raml_params(Optional[Search], required=True)
        assert all(p["required"] is True for p in params.values())

    def test_nested_model_is_unsupported(self):
        with pytest.raises(UnsupportedTypeError):
            struct_to_raml_params(Nested, required=False)

    def test_non_model_is_unsupported(self):
        with pytest.raises(UnsupportedTypeError):
            struct_to_raml_params(int, required=False)
