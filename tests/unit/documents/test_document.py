from typing import Any

import pytest

from specvault.documents import Document, SchemaVersion, detect_schema_version


@pytest.mark.parametrize(
    ("content", "expected"),
    [
        ({"swagger": "2.0"}, SchemaVersion.SWAGGER_2_0),
        ({"swagger": 2.0}, SchemaVersion.SWAGGER_2_0),
        ({"openapi": "3.0.3"}, SchemaVersion.OPENAPI_3_0),
        ({"openapi": "3.1.0"}, SchemaVersion.OPENAPI_3_1),
        ({"openapi": "2.0"}, None),
        ({"openapi": 3.1}, None),
        ({}, None),
    ],
)
def test_detect_schema_version(
    content: dict[str, Any], expected: SchemaVersion | None
) -> None:
    assert detect_schema_version(content) == expected


class TestAccessors:
    def test_operations_skip_non_method_keys(self) -> None:
        document = Document(
            content={
                "openapi": "3.0.0",
                "paths": {
                    "/a": {
                        "summary": "A",
                        "parameters": [],
                        "get": {"responses": {}},
                        "x-internal": True,
                    },
                    "/b": None,
                },
            },
            schema_version=SchemaVersion.OPENAPI_3_0,
        )

        assert document.operations() == {"/a": {"get": {"responses": {}}}, "/b": {}}

    def test_schemas_include_swagger_definitions(self) -> None:
        document = Document(
            content={"swagger": "2.0", "definitions": {"Pet": {"type": "object"}}},
            schema_version=SchemaVersion.SWAGGER_2_0,
        )

        assert document.schemas() == {"Pet": {"type": "object"}}

    def test_missing_sections_are_empty(self) -> None:
        document = Document(
            content={"openapi": "3.1.0"}, schema_version=SchemaVersion.OPENAPI_3_1
        )

        assert document.info() == {}
        assert document.title == ""
        assert document.paths() == {}
        assert document.schemas() == {}


def test_skeleton() -> None:
    document = Document.skeleton("Orders API", "1.0.0", "Order intake")

    assert document.schema_version is SchemaVersion.OPENAPI_3_0
    assert document.info() == {
        "title": "Orders API",
        "version": "1.0.0",
        "description": "Order intake",
    }
    assert document.paths() == {}


def test_copy_is_independent(petstore: Document) -> None:
    copied = petstore.copy()
    copied.content["info"]["title"] = "Changed"

    assert petstore.title == "Petstore"
    assert copied.schema_version is petstore.schema_version
