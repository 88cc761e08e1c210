"""Pydantic models describing the review backend's JSON payloads."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class BackendBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CasePayload(BackendBaseModel):
    id: str = Field(alias="Id")
    driver: str | None = Field(default=None, alias="Driver__c")
    ticket: str | None = Field(default=None, alias="Ticket__c")
    special_instructions: str | None = Field(
        default=None, alias="Special_Instructions_for_Ticket__c"
    )
    description: str | None = Field(default=None, alias="Description")
    agent: str | None = Field(default=None, alias="Agent__c")

    _normalize_refs = field_validator("driver", "ticket", "agent", mode="before")(_blank_to_none)


class FilePayload(BackendBaseModel):
    id: str = Field(alias="Id")
    name: str | None = Field(default=None, alias="Name")
    ocr_response: str | dict[str, Any] | None = Field(default=None, alias="OCR_Response__c")
    url: str | None = Field(default=None, alias="NEILON__File_Presigned_URL__c")

    _normalize_name = field_validator("name", mode="before")(_blank_to_none)


class FieldDescribe(BackendBaseModel):
    field_type: str | None = Field(default=None, alias="fieldType")


class FilesResponse(BackendBaseModel):
    files: list[FilePayload] = Field(default_factory=list[FilePayload])
    field_labels: dict[str, str] = Field(default_factory=dict[str, str], alias="fieldLabels")
    field_describes: dict[str, FieldDescribe] = Field(
        default_factory=dict[str, FieldDescribe], alias="fieldDescribes"
    )


class OptionPayload(BackendBaseModel):
    label: str
    value: str


class PicklistResponse(BackendBaseModel):
    values: list[OptionPayload] = Field(default_factory=list[OptionPayload])


class CourtPayload(BackendBaseModel):
    id: str | None = Field(default=None, alias="Id")
    name: str | None = Field(default=None, alias="Name")
    phone: str | None = Field(default=None, alias="Phone__c")
    county: str | None = Field(default=None, alias="County__c")
    street: str | None = Field(default=None, alias="Address__Street__s")
    city: str | None = Field(default=None, alias="Address__City__s")
    state_code: str | None = Field(default=None, alias="Address__StateCode__s")
    postal_code: str | None = Field(default=None, alias="Address__PostalCode__s")


class CourtSearchRequest(BackendBaseModel):
    search_term: str = Field(alias="searchTerm")
    offset: int = 0
    initial_name: str | None = Field(default=None, alias="initialName")
    initial_phone: str | None = Field(default=None, alias="initialPhone")
    initial_county: str | None = Field(default=None, alias="initialCounty")


class CourtSearchResponse(BackendBaseModel):
    courts: list[CourtPayload] = Field(default_factory=list[CourtPayload])
    preselected_court: CourtPayload | None = Field(default=None, alias="preselectedCourt")


class CourtSaveResponse(BackendBaseModel):
    is_success: bool = Field(default=False, alias="isSuccess")
    is_duplicate: bool = Field(default=False, alias="isDuplicate")
    record: CourtPayload | None = None
    duplicate_record: CourtPayload | None = Field(default=None, alias="duplicateRecord")
    message: str | None = None


class CoverageRequest(BackendBaseModel):
    driver: str | None = Field(default=None, alias="Driver")
    date_of_ticket: str | None = Field(default=None, alias="DateOfTicket")


class CoverageResponse(BackendBaseModel):
    opp_id: str | None = Field(default=None, alias="OppId")
    driver_coverage: str | None = Field(default=None, alias="DriverCoverage")
    type_ticket: str | None = Field(default=None, alias="TypeTicket")


class UnprocessedFilePayload(BackendBaseModel):
    id: str = Field(alias="Id")
    name: str = Field(default="Untitled Document", alias="Name")


class ProcessingResultPayload(BackendBaseModel):
    file_id: str = Field(alias="fileId")
    file_name: str = Field(default="", alias="fileName")
    success: bool = False
    file_type: str | None = Field(default=None, alias="fileType")
    message: str | None = None


class ExtractionLogPayload(BackendBaseModel):
    field_name: str = Field(alias="fieldName")
    extracted_value: Any = Field(default=None, alias="extractedValue")
    is_accurate: bool = Field(alias="isAccurate")
    reviewer_notes: str = Field(default="", alias="reviewerNotes")
    expected_value: Any = Field(default=None, alias="expectedValue")
    ai_reason: str = Field(default="", alias="aiReason")


class ExtractionLogRequest(BackendBaseModel):
    case_id: str = Field(alias="caseIdForLog")
    ticket_id: str = Field(alias="ticketId")
    file_id: str | None = Field(default=None, alias="neilonFileId")
    logs: list[ExtractionLogPayload] = Field(alias="logsToSave")


class CreatedRecordResponse(BackendBaseModel):
    id: str


class ErrorPayload(BackendBaseModel):
    message: str
    error_code: str | None = Field(default=None, alias="errorCode")

    @classmethod
    def from_body(cls, body: object) -> ErrorPayload | None:
        """Accept ``{"message": ...}`` or a list of such objects."""

        if isinstance(body, list) and body:
            body = body[0]
        if isinstance(body, Mapping) and isinstance(body.get("message"), str):
            return cls.model_validate(body)
        return None
