from collections.abc import Callable

from specvault.diff import ChangeKind, ChangeSummary, compare, diff
from specvault.documents import Document


def test_identical_documents_have_no_changes(petstore: Document) -> None:
    summary = diff(petstore, petstore.copy())

    assert summary.is_empty
    assert summary == ChangeSummary.empty()


def test_version_bump_alone_is_not_a_change(
    make_petstore: Callable[[str], Document],
) -> None:
    assert diff(make_petstore("1.0.0"), make_petstore("2.0.0")).is_empty


def test_added_and_removed_endpoints(petstore: Document) -> None:
    new = petstore.copy()
    del new.content["paths"]["/pets"]["post"]
    new.content["paths"]["/owners"] = {
        "get": {"responses": {"200": {}}},
        "delete": {"responses": {"204": {}}},
    }

    summary = diff(petstore, new)

    assert summary.endpoints_added == ("GET /owners", "DELETE /owners")
    assert summary.endpoints_deleted == ("POST /pets",)
    assert summary.breaking_changes == ("Removed endpoint: POST /pets",)


def test_removed_path_reports_every_method(petstore: Document) -> None:
    new = petstore.copy()
    del new.content["paths"]["/pets"]

    summary = diff(petstore, new)

    assert summary.endpoints_deleted == ("GET /pets", "POST /pets")


def test_modified_operation_signals(petstore: Document) -> None:
    new = petstore.copy()
    get_pets = new.content["paths"]["/pets"]["get"]
    get_pets["summary"] = "List all pets"
    get_pets["parameters"].append({"name": "offset", "in": "query"})
    get_pets["responses"]["400"] = {"description": "bad"}
    del new.content["paths"]["/pets"]["post"]["requestBody"]

    result = compare(petstore, new)

    assert result.summary.endpoints_modified == ("GET /pets", "POST /pets")
    get_mod, post_mod = result.modified_endpoints
    assert [c.kind for c in get_mod.changes] == [
        ChangeKind.SUMMARY,
        ChangeKind.PARAMETERS,
        ChangeKind.RESPONSES,
    ]
    assert get_mod.changes[1].description == "parameters changed (1 -> 2)"
    assert post_mod.has(ChangeKind.REQUEST_BODY_REMOVED)
    assert result.summary.breaking_changes == (
        "Potentially breaking: GET /pets - parameters changed",
        "Breaking: POST /pets - request body removed",
    )


def test_request_body_added_is_not_breaking(petstore: Document) -> None:
    new = petstore.copy()
    new.content["paths"]["/pets/{id}"]["get"]["requestBody"] = {"content": {}}

    summary = diff(petstore, new)

    assert summary.endpoints_modified == ("GET /pets/{id}",)
    assert not summary.has_breaking_changes


def test_schema_changes(petstore: Document) -> None:
    new = petstore.copy()
    schemas = new.content["components"]["schemas"]
    del schemas["Error"]
    schemas["Pet"]["properties"]["age"] = {"type": "integer"}
    schemas["Owner"] = {"type": "object"}

    result = compare(petstore, new)

    assert result.summary.schemas_added == ("Owner",)
    assert result.summary.schemas_modified == ("Pet",)
    assert result.summary.schemas_deleted == ("Error",)
    assert result.summary.breaking_changes == (
        "Removed schema: Error",
        "Modified schemas: Pet (review required)",
    )
    assert result.added_schemas[0].type == "object"


def test_does_not_modify_inputs(petstore: Document) -> None:
    new = petstore.copy()
    del new.content["paths"]["/pets/{id}"]
    before = petstore.copy()

    _ = compare(petstore, new)

    assert petstore == before


def test_summary_dict_round_trip() -> None:
    summary = ChangeSummary(endpoints_added=("GET /a",), breaking_changes=("x",))

    assert ChangeSummary.from_dict(summary.to_dict()) == summary
    assert ChangeSummary.from_dict({}) == ChangeSummary.empty()
