"""JSON schema validation for raw timedtext payloads.

WHY: Caption payloads arrive from an external source and may be
truncated, HTML error pages parsed as JSON, or simply a different
format. The timeline builder must reject these up front with one clear
error instead of failing deep inside the scheduler.

HOW: TIMEDTEXT_SCHEMA describes the subset of the json3 timedtext format
the engine reads. validate_payload() runs jsonschema against it and
wraps any ValidationError in CaptionPayloadError.

RULES:
- The top level must be an object; ``events`` is optional (absent = no captions)
- tStartMs / dDurationMs / tOffsetMs must be non-negative numbers when present
- Unknown keys are allowed everywhere (the source adds styling keys freely)
- CaptionPayloadError is a ValueError so callers can treat it as bad input
"""

from __future__ import annotations

from typing import Any

import jsonschema

_NON_NEGATIVE = {"type": "number", "minimum": 0}

TIMEDTEXT_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Timedtext caption payload",
    "type": "object",
    "properties": {
        "events": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "tStartMs": _NON_NEGATIVE,
                    "dDurationMs": _NON_NEGATIVE,
                    "aAppend": {"type": ["string", "number"]},
                    "utf8": {"type": "string"},
                    "segs": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "utf8": {"type": "string"},
                                "tOffsetMs": _NON_NEGATIVE,
                                "acAsrConf": {"type": "number"},
                            },
                        },
                    },
                },
            },
        },
    },
}


class CaptionPayloadError(ValueError):
    """Raised when a raw caption payload does not match the timedtext format.

    WHY: Callers need a typed exception to distinguish malformed caption
    data (report once, stay disarmed) from programming errors.

    HOW: Raised by validate_payload with the jsonschema message and the
    JSON path of the offending value.

    RULES:
    - Message includes the failing path, e.g. ``events/3/tStartMs``
    """


def validate_payload(payload: Any) -> None:
    """Validate a raw timedtext payload against TIMEDTEXT_SCHEMA.

    Raises:
        CaptionPayloadError: If the payload is not a valid timedtext document.
    """
    try:
        jsonschema.validate(instance=payload, schema=TIMEDTEXT_SCHEMA)
    except jsonschema.ValidationError as exc:
        path = "/".join(str(p) for p in exc.absolute_path) or "<root>"
        raise CaptionPayloadError(
            "Invalid caption payload at {}: {}".format(path, exc.message)
        ) from exc
