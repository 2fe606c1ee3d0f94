"""Encoding of stored JSON payloads (selections, tags, exam config).

Decoding is lenient at the call sites: a malformed payload is logged and
treated as "no selection", "no tags" or "default config" so an exam in
progress stays usable.
"""

import json
from typing import Any

from pydantic import ValidationError

from examsim.core.logging import get_logger
from examsim.models.session import ExamMode
from examsim.schemas.session import ExamConfig

logger = get_logger(__name__)


class EncodingFailure(ValueError):
    """A stored payload could not be decoded."""

    def __init__(self, kind: str, payload: Any, reason: str):
        self.kind = kind
        self.payload = payload
        super().__init__(f"Malformed {kind} payload {payload!r}: {reason}")


def encode_selection(option_ids: list[int]) -> str | None:
    """Serialize a selection; an empty selection is stored as null."""
    if not option_ids:
        return None
    # Sorted and deduplicated so equal selections store identically
    return json.dumps(sorted(set(option_ids)))


def decode_selection(payload: str | None) -> list[int]:
    """Parse a stored selection. Raises EncodingFailure on malformed input."""
    if not payload:
        return []
    try:
        value = json.loads(payload)
    except json.JSONDecodeError as e:
        raise EncodingFailure("selection", payload, str(e)) from e
    if not isinstance(value, list) or not all(
        isinstance(item, int) and not isinstance(item, bool) for item in value
    ):
        raise EncodingFailure("selection", payload, "expected a list of integers")
    return value


def read_selection(payload: str | None, **context: Any) -> list[int]:
    """Decode a selection, degrading to "no selection" when malformed."""
    try:
        return decode_selection(payload)
    except EncodingFailure as e:
        logger.error(f"Failed to parse selected options: {e}", extra=context)
        return []


def read_tags(payload: str | None, **context: Any) -> list[str]:
    """Decode a question's tag list, degrading to no tags when malformed."""
    if not payload:
        return []
    try:
        value = json.loads(payload)
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse tags: {e}", extra=context)
        return []
    if not isinstance(value, list):
        logger.warning("Failed to parse tags: expected a list", extra=context)
        return []
    return [str(tag) for tag in value]


def encode_config(config: ExamConfig) -> str:
    """Serialize an exam config for storage on the attempt."""
    return config.model_dump_json()


def decode_config(payload: str) -> ExamConfig:
    """Parse a stored exam config. Raises EncodingFailure on malformed input."""
    try:
        return ExamConfig.model_validate_json(payload)
    except ValidationError as e:
        raise EncodingFailure("config", payload, str(e)) from e


def read_config(
    payload: str | None,
    mode: ExamMode,
    total_questions: int,
    **context: Any,
) -> ExamConfig:
    """Decode a stored config, degrading to a default config when missing or malformed."""
    if payload:
        try:
            return decode_config(payload)
        except EncodingFailure as e:
            logger.error(f"Failed to parse config JSON: {e}", extra=context)
    return ExamConfig(mode=mode, number_of_questions=total_questions)
