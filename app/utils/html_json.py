"""Pull JSON blobs assigned to globals inside inline ``<script>`` tags."""

from __future__ import annotations

import json
from typing import Any

from app.services.exceptions import ExtractionError, ExtractionFailure

DEFAULT_TERMINATOR = "</script>"


def extract_embedded_json(html: str, marker: str, terminator: str = DEFAULT_TERMINATOR) -> Any:
    """Return the JSON value that follows ``marker`` up to ``terminator``.

    Pages typically look like ``<script>window._DATA = {...};</script>``. The
    text between the two is trimmed and a single trailing ``;`` is dropped
    before parsing.
    """

    start = html.find(marker)
    if start == -1:
        raise ExtractionError(
            ExtractionFailure.MARKER_NOT_FOUND, f"marker {marker!r} not found in document"
        )
    json_start = start + len(marker)
    json_end = html.find(terminator, json_start)
    if json_end == -1:
        raise ExtractionError(
            ExtractionFailure.TERMINATOR_NOT_FOUND,
            f"terminator {terminator!r} not found after marker",
        )

    raw = html[json_start:json_end].strip()
    if raw.endswith(";"):
        raw = raw[:-1]
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise ExtractionError(ExtractionFailure.INVALID_JSON, f"embedded JSON is invalid: {exc}") from exc


__all__ = ["DEFAULT_TERMINATOR", "extract_embedded_json"]
