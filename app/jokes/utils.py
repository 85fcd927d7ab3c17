from __future__ import annotations

from typing import TypeVar

from flask import request

T = TypeVar("T")


def bad_request(data: T) -> tuple[T, int]:
    """Pair action data with a 400 status for the router to render."""
    return data, 400


def wants_json() -> bool:
    """True for API-style callers that accept JSON but not HTML."""
    accept = request.accept_mimetypes
    return accept.accept_json and not accept.accept_html
