"""HTTP implementation of the review backend ports."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import quote

from pydantic import TypeAdapter

from courtdesk.adapters.http_resilience import ResilientClient
from courtdesk.config import get_backend_config

from .schema import (
    CasePayload,
    CourtSaveResponse,
    CourtSearchRequest,
    CourtSearchResponse,
    CoverageRequest,
    CoverageResponse,
    CreatedRecordResponse,
    ErrorPayload,
    FilesResponse,
    OptionPayload,
    PicklistResponse,
    ProcessingResultPayload,
    UnprocessedFilePayload,
)
from .translator import (
    court_to_payload,
    to_case_record,
    to_coverage,
    to_document_feed,
    to_extraction_log_request,
    to_options,
    to_processing_results,
    to_save_result,
    to_search_result,
    to_unprocessed_sources,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import TracebackType

    import httpx

    from courtdesk.config import BackendConfig, ResilienceConfig
    from courtdesk.domain.model import (
        AuditEntry,
        CaseRecord,
        Court,
        DocumentFeed,
        EnumerationOption,
        ProcessingResult,
        ResolutionHints,
        UnprocessedSource,
    )
    from courtdesk.domain.ports import (
        CatalogSaveResult,
        CatalogSearchResult,
        CoverageResult,
        FinalRecordRequest,
        ReviewBackend,
    )

log = getLogger(__name__)

_OPTIONS = TypeAdapter(list[OptionPayload])
_UNPROCESSED = TypeAdapter(list[UnprocessedFilePayload])
_PROCESSING_RESULTS = TypeAdapter(list[ProcessingResultPayload])


class BackendAPIError(RuntimeError):
    """Raised when the review backend answers with an application-level error."""

    def __init__(self, message: str, *, status: int | None = None, code: str | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.code = code
        self.body = {"message": message}


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def _is_reference_data(payload: object) -> bool:
    """Cache picklists and the state list; case data and search results always go upstream."""

    if isinstance(payload, dict) and "values" in payload:
        payload = payload["values"]
    if not isinstance(payload, list) or not payload:
        return False
    return all(isinstance(item, dict) and {"label", "value"} <= item.keys() for item in payload)


def _default_backend_config() -> BackendConfig:
    return get_backend_config(cache_predicate=_is_reference_data)


@dataclass(slots=True)
class HttpReviewBackend:
    """Review backend reached over HTTP; one shared client per instance."""

    config: BackendConfig = field(default_factory=_default_backend_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    _client: ResilientClient | None = field(default=None, init=False, repr=False)

    async def __aenter__(self) -> HttpReviewBackend:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # feeds

    async def fetch_case_record(self, case_id: str) -> CaseRecord:
        payload = await self._request_json("GET", f"/cases/{quote(case_id)}")
        return to_case_record(CasePayload.model_validate(payload))

    async def fetch_documents(self, case_id: str) -> DocumentFeed:
        payload = await self._request_json("GET", f"/cases/{quote(case_id)}/files")
        return to_document_feed(FilesResponse.model_validate(payload))

    async def fetch_enumeration_options(self, field_name: str) -> Sequence[EnumerationOption]:
        payload = await self._request_json("GET", f"/picklists/{quote(field_name)}")
        return to_options(PicklistResponse.model_validate(payload).values)

    async def fetch_states(self) -> Sequence[EnumerationOption]:
        payload = await self._request_json("GET", "/states")
        return to_options(_OPTIONS.validate_python(payload))

    # court catalog

    async def search_courts(
        self,
        term: str,
        offset: int = 0,
        hints: ResolutionHints | None = None,
    ) -> CatalogSearchResult:
        request = CourtSearchRequest(
            search_term=term,
            offset=offset,
            initial_name=hints.name if hints else None,
            initial_phone=hints.phone if hints else None,
            initial_county=hints.county if hints else None,
        )
        payload = await self._request_json(
            "POST", "/courts/search", json=request.model_dump(by_alias=True)
        )
        return to_search_result(CourtSearchResponse.model_validate(payload))

    async def create_court(self, draft: Court) -> CatalogSaveResult:
        payload = await self._request_json("POST", "/courts", json=court_to_payload(draft))
        return to_save_result(CourtSaveResponse.model_validate(payload))

    async def update_court(self, court_id: str, draft: Court) -> CatalogSaveResult:
        payload = await self._request_json(
            "PATCH", f"/courts/{quote(court_id)}", json=court_to_payload(draft)
        )
        return to_save_result(CourtSaveResponse.model_validate(payload))

    # workflow collaborators

    async def compute_coverage(
        self, driver_ref: str | None, date_of_ticket: object
    ) -> CoverageResult:
        request = CoverageRequest(
            driver=driver_ref,
            date_of_ticket=str(date_of_ticket) if date_of_ticket else None,
        )
        payload = await self._request_json(
            "POST", "/coverage", json=request.model_dump(by_alias=True)
        )
        return to_coverage(CoverageResponse.model_validate(payload))

    async def fetch_unprocessed_sources(self, case_id: str) -> Sequence[UnprocessedSource]:
        payload = await self._request_json("GET", f"/cases/{quote(case_id)}/unprocessed-files")
        return to_unprocessed_sources(_UNPROCESSED.validate_python(payload or []))

    async def process_sources_now(self, case_id: str) -> Sequence[ProcessingResult]:
        payload = await self._request_json("POST", f"/cases/{quote(case_id)}/process-files")
        return to_processing_results(_PROCESSING_RESULTS.validate_python(payload or []))

    async def persist_audit_trail(
        self,
        case_id: str,
        record_id: str,
        source_id: str | None,
        entries: Sequence[AuditEntry],
    ) -> None:
        body = to_extraction_log_request(case_id, record_id, source_id, entries)
        await self._request_json("POST", "/extraction-logs", json=body)

    async def create_final_record(self, request: FinalRecordRequest) -> str:
        body = {"fields": dict(request.values)}
        payload = await self._request_json("POST", "/tickets", json=body)
        return CreatedRecordResponse.model_validate(payload).id

    # plumbing

    def _client_for(self) -> ResilientClient:
        if self._client is None:
            self._client = self.client_factory(self.config.resilience)
        return self._client

    async def _request_json(
        self,
        method: str,
        url: str,
        *,
        json: object | None = None,
    ) -> object:
        client = self._client_for()
        if json is None:
            response = await client.request(method, url)
        else:
            response = await client.request(method, url, json=json)

        if response.is_error:
            raise _api_error(response)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()


def _api_error(response: httpx.Response) -> BackendAPIError:
    try:
        body = response.json()
    except ValueError:
        body = None
    error = ErrorPayload.from_body(body)
    message = error.message if error else (response.reason_phrase or f"HTTP {response.status_code}")
    log.error(f"Backend error {response.status_code} for {response.request.url}: {message}")
    return BackendAPIError(
        message,
        status=response.status_code,
        code=error.error_code if error else None,
    )


if TYPE_CHECKING:
    _backend_check: ReviewBackend = HttpReviewBackend()
