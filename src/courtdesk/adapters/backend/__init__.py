"""HTTP adapter for the review backend."""

from __future__ import annotations

from .client import BackendAPIError, HttpReviewBackend

__all__ = ["BackendAPIError", "HttpReviewBackend"]
