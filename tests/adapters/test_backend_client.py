from __future__ import annotations

import asyncio
import json
from collections.abc import Callable  # noqa: TC003

import httpx
import pytest

from courtdesk.adapters.backend import BackendAPIError, HttpReviewBackend
from courtdesk.adapters.backend.client import _is_reference_data  # type: ignore[reportPrivateUsage]
from courtdesk.adapters.http_resilience import ResilientClient
from courtdesk.config import BackendConfig, ResilienceConfig
from courtdesk.domain.errors import friendly_error_message
from courtdesk.domain.model import AuditEntry, Court, ResolutionHints
from courtdesk.domain.ports import FinalRecordRequest, ReviewBackend

BASE_URL = "https://backend.test"

Handler = Callable[[httpx.Request], httpx.Response]


def _backend(handler: Handler) -> HttpReviewBackend:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        client._client = httpx.AsyncClient(  # noqa: SLF001  # type: ignore[reportPrivateUsage]
            base_url=BASE_URL, transport=httpx.MockTransport(async_handler)
        )
        return client

    config = BackendConfig(resilience=ResilienceConfig(name="test", base_url=BASE_URL))
    return HttpReviewBackend(config=config, client_factory=factory)


def test_backend_satisfies_the_review_port() -> None:
    backend = _backend(lambda _: httpx.Response(204))

    assert isinstance(backend, ReviewBackend)


def test_fetch_case_record_maps_fields() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/cases/case-1"
        return httpx.Response(
            200,
            json={
                "Id": "case-1",
                "Driver__c": "driver-7",
                "Ticket__c": "  ",
                "Special_Instructions_for_Ticket__c": "Call first",
                "Agent__c": "agent-3",
            },
        )

    record = asyncio.run(_backend(handler).fetch_case_record("case-1"))

    assert record.driver_ref == "driver-7"
    assert record.linked_record_ref is None
    assert record.instructions == "Call first"
    assert record.agent_ref == "agent-3"


def test_fetch_documents_keeps_payload_and_metadata() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/cases/case-1/files"
        return httpx.Response(
            200,
            json={
                "files": [
                    {
                        "Id": "f-1",
                        "Name": "ticket.pdf",
                        "OCR_Response__c": '{"Ticket_City__c": {"value": "Austin"}}',
                    },
                    {"Id": "f-2", "Name": ""},
                ],
                "fieldLabels": {"ticket_city__c": "Ticket City"},
                "fieldDescribes": {"Date_of_Ticket__c": {"fieldType": "DATE"}},
            },
        )

    feed = asyncio.run(_backend(handler).fetch_documents("case-1"))

    first, second = feed.documents
    assert first.display_name == "ticket.pdf"
    assert first.extraction_payload == '{"Ticket_City__c": {"value": "Austin"}}'
    assert second.display_name == "Untitled Document"
    assert second.extraction_payload is None
    assert feed.field_labels == {"ticket_city__c": "Ticket City"}
    assert feed.field_types == {"Date_of_Ticket__c": "DATE"}


def test_enumeration_and_state_options() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/states":
            return httpx.Response(200, json=[{"label": "Texas", "value": "TX"}])
        assert request.url.path == "/picklists/Accident__c"
        return httpx.Response(200, json={"values": [{"label": "Yes", "value": "Y"}]})

    backend = _backend(handler)

    async def run() -> None:
        options = await backend.fetch_enumeration_options("Accident__c")
        states = await backend.fetch_states()
        assert [(option.label, option.value) for option in options] == [("Yes", "Y")]
        assert [(state.label, state.value) for state in states] == [("Texas", "TX")]

    asyncio.run(run())


def test_search_courts_sends_hints_and_maps_preselection() -> None:
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["path"] = request.url.path
        captured["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "courts": [{"Id": "c-1", "Name": "Metro County Court"}],
                "preselectedCourt": {
                    "Id": "c-1",
                    "Name": "Metro County Court",
                    "Address__StateCode__s": "TX",
                },
            },
        )

    result = asyncio.run(
        _backend(handler).search_courts("", 0, ResolutionHints(name="Metro", phone="555"))
    )

    assert captured["path"] == "/courts/search"
    assert captured["body"] == {
        "searchTerm": "",
        "offset": 0,
        "initialName": "Metro",
        "initialPhone": "555",
        "initialCounty": None,
    }
    assert result.courts == (Court(id="c-1", name="Metro County Court"),)
    assert result.preselected is not None
    assert result.preselected.state_code == "TX"


def test_create_court_reports_duplicates() -> None:
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "isSuccess": False,
                "isDuplicate": True,
                "duplicateRecord": {"Id": "c-1", "Name": "Metro County Court"},
            },
        )

    draft = Court(id="ignored", name="Metro Court", phone="555-0100", state_code="TX")
    result = asyncio.run(_backend(handler).create_court(draft))

    assert captured["method"] == "POST"
    body = captured["body"]
    assert isinstance(body, dict)
    assert "Id" not in body
    assert body["Name"] == "Metro Court"
    assert body["Address__StateCode__s"] == "TX"
    assert result.is_duplicate is True
    assert result.duplicate_record == Court(id="c-1", name="Metro County Court")


def test_update_court_patches_by_id() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "PATCH"
        assert request.url.path == "/courts/c-1"
        return httpx.Response(
            200, json={"isSuccess": True, "record": {"Id": "c-1", "Name": "Metro"}}
        )

    result = asyncio.run(_backend(handler).update_court("c-1", Court(name="Metro")))

    assert result.is_success is True
    assert result.record == Court(id="c-1", name="Metro")


def test_coverage_request_and_response() -> None:
    captured: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["body"] = json.loads(request.content)
        return httpx.Response(
            200, json={"OppId": "opp-1", "DriverCoverage": "Covered", "TypeTicket": "Moving"}
        )

    coverage = asyncio.run(_backend(handler).compute_coverage("driver-7", "2024-03-05"))

    assert captured["body"] == {"Driver": "driver-7", "DateOfTicket": "2024-03-05"}
    assert coverage.opportunity_ref == "opp-1"
    assert coverage.coverage_status == "Covered"
    assert coverage.type_classification == "Moving"


def test_processing_endpoints() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            assert request.url.path == "/cases/case-1/unprocessed-files"
            return httpx.Response(200, json=[{"Id": "f-1", "Name": "scan.pdf"}])
        assert request.url.path == "/cases/case-1/process-files"
        return httpx.Response(
            200,
            json=[{"fileId": "f-1", "fileName": "scan.pdf", "success": True, "fileType": "Ticket"}],
        )

    backend = _backend(handler)

    async def run() -> None:
        sources = await backend.fetch_unprocessed_sources("case-1")
        results = await backend.process_sources_now("case-1")
        assert [source.name for source in sources] == ["scan.pdf"]
        assert results[0].success is True
        assert results[0].source_type == "Ticket"

    asyncio.run(run())


def test_audit_trail_and_record_creation() -> None:
    captured: list[tuple[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append((request.url.path, json.loads(request.content)))
        if request.url.path == "/tickets":
            return httpx.Response(201, json={"id": "ticket-1"})
        return httpx.Response(204)

    backend = _backend(handler)
    entry = AuditEntry(
        field_name="Citation_Number__c",
        extracted_value="A123",
        is_accurate=False,
        reviewer_note="smudged",
        expected_value="A128",
        rationale="header",
    )

    async def run() -> str:
        record_id = await backend.create_final_record(
            FinalRecordRequest(values={"Citation_Number__c": "A128"})
        )
        await backend.persist_audit_trail("case-1", record_id, "f-1", [entry])
        return record_id

    assert asyncio.run(run()) == "ticket-1"
    assert captured[0] == ("/tickets", {"fields": {"Citation_Number__c": "A128"}})
    path, body = captured[1]
    assert path == "/extraction-logs"
    assert body == {
        "caseIdForLog": "case-1",
        "ticketId": "ticket-1",
        "neilonFileId": "f-1",
        "logsToSave": [
            {
                "fieldName": "Citation_Number__c",
                "extractedValue": "A123",
                "isAccurate": False,
                "reviewerNotes": "smudged",
                "expectedValue": "A128",
                "aiReason": "header",
            }
        ],
    }


def test_error_responses_raise_with_backend_message() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(
            400,
            json=[
                {
                    "message": "duplicate value found: Citation_Number__c on record with id: a01",
                    "errorCode": "DUPLICATE_VALUE",
                }
            ],
        )

    with pytest.raises(BackendAPIError) as excinfo:
        asyncio.run(_backend(handler).create_final_record(FinalRecordRequest()))

    error = excinfo.value
    assert error.status == 400
    assert error.code == "DUPLICATE_VALUE"
    assert friendly_error_message(error).endswith("record with id: a01")


def test_error_without_body_uses_reason_phrase() -> None:
    with pytest.raises(BackendAPIError) as excinfo:
        asyncio.run(_backend(lambda _: httpx.Response(503)).fetch_states())

    assert excinfo.value.status == 503
    assert str(excinfo.value) == "Service Unavailable"


@pytest.mark.parametrize(
    ("payload", "cached"),
    [
        ([{"label": "Texas", "value": "TX"}], True),
        ({"values": [{"label": "Yes", "value": "Y"}]}, True),
        ({"values": []}, False),
        ([], False),
        ({"Id": "case-1", "Driver__c": "driver-7"}, False),
        ({"files": [], "fieldLabels": {}}, False),
        ([{"Id": "f-1", "Name": "scan.pdf"}], False),
    ],
)
def test_only_reference_data_is_cached(payload: object, cached: bool) -> None:
    assert _is_reference_data(payload) is cached


def test_default_config_caches_reference_data(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("COURTDESK_BACKEND_URL", BASE_URL)

    backend = HttpReviewBackend()

    cache = backend.config.resilience.cache
    assert cache is not None
    assert cache.should_cache is _is_reference_data
