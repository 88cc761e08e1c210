from __future__ import annotations

from courtdesk.domain.workflow import (
    DUPLICATE_CITATION_MESSAGE,
    DUPLICATE_WITHOUT_ID_MESSAGE,
    CommitFailure,
    describe_commit_failure,
)


def test_duplicate_with_record_id() -> None:
    text = (
        "Insert failed. First exception on row 0; first error: DUPLICATE_VALUE, "
        "duplicate value found: Citation_Number__c duplicates value on "
        "record with id: a0B5e00000XyZ12"
    )

    failure = describe_commit_failure(text)

    assert failure == CommitFailure(
        message=DUPLICATE_CITATION_MESSAGE,
        conflicting_record_id="a0B5e00000XyZ12",
        is_duplicate=True,
    )


def test_duplicate_without_record_id() -> None:
    failure = describe_commit_failure("duplicate value found: Citation_Number__c")

    assert failure.message == DUPLICATE_WITHOUT_ID_MESSAGE
    assert failure.conflicting_record_id is None
    assert failure.is_duplicate is True


def test_other_errors_pass_through() -> None:
    assert describe_commit_failure("Required field missing") == CommitFailure(
        message="Required field missing"
    )


def test_empty_error_is_unknown() -> None:
    assert describe_commit_failure(None).message == "Unknown error"
    assert describe_commit_failure("").message == "Unknown error"
