"""Conversion of collaborator failures into user-facing messages."""

from __future__ import annotations

from collections.abc import Mapping

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."


def friendly_error_message(error: object) -> str:
    """Best human-readable text for a failed collaborator call.

    Prefers a ``body.message`` style payload (as carried by backend errors),
    then a ``message`` attribute, then ``str(error)``.
    """

    if error is None:
        return UNKNOWN_ERROR_MESSAGE

    body = getattr(error, "body", None)
    if isinstance(body, Mapping):
        body_message = body.get("message")
    else:
        body_message = getattr(body, "message", None)
    if body_message:
        return str(body_message)

    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message

    text = str(error)
    return text or UNKNOWN_ERROR_MESSAGE
