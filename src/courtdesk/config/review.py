"""Review workflow defaults."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_flag

MANUAL_PROCESSING_ENV = "COURTDESK_MANUAL_PROCESSING"

DEFAULT_PAGE_SIZE = 10
DEFAULT_SEARCH_DEBOUNCE_SECONDS = 0.3
DEFAULT_ERROR_CLEAR_SECONDS = 10.0
DEFAULT_TARGET_SOURCE_TYPE = "Ticket"


@dataclass(frozen=True, slots=True)
class ReviewConfig:
    enable_manual_processing: bool = False
    page_size: int = DEFAULT_PAGE_SIZE
    search_debounce_seconds: float = DEFAULT_SEARCH_DEBOUNCE_SECONDS
    error_clear_seconds: float = DEFAULT_ERROR_CLEAR_SECONDS
    target_source_type: str = DEFAULT_TARGET_SOURCE_TYPE


def get_review_config(*, enable_manual_processing: bool | None = None) -> ReviewConfig:
    manual = (
        enable_manual_processing
        if enable_manual_processing is not None
        else env_flag(MANUAL_PROCESSING_ENV)
    )
    return ReviewConfig(enable_manual_processing=manual)
