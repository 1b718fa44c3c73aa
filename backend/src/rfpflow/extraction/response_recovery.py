"""Recovery of structured values from raw generative-service text.

The service is asked for JSON but may still wrap it in markdown fences or
surround it with prose. Recovery only strips whitespace and fences and cuts
the outermost JSON boundaries; it never repairs malformed JSON.
"""

import json
import logging
import re
from typing import Any, Optional, Union

from ..errors import SNIPPET_MAX_CHARS, ExtractionFormatError

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?[ \t]*\r?\n?", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence markers (``` and ```json) anywhere in text."""
    return _FENCE_RE.sub("", text).strip()


def _span(text: str, opener: str, closer: str) -> Optional[tuple[int, int]]:
    start = text.find(opener)
    end = text.rfind(closer)
    if start == -1 or end == -1 or end <= start:
        return None
    return start, end


def locate_json_candidate(text: str) -> str:
    """Cut the outermost object or array out of text.

    Whenever an object span (first '{' to last '}') exists it is the
    candidate, even when brackets surround it. The array span (first '['
    to last ']') is used only when there is no object span. Without any
    span the whole text is returned.
    """
    obj = _span(text, "{", "}")
    if obj:
        return text[obj[0]:obj[1] + 1]
    arr = _span(text, "[", "]")
    if arr:
        return text[arr[0]:arr[1] + 1]
    return text


def _reject_constant(name: str):
    raise ValueError(f"non-standard JSON constant {name}")


def recover_structured_payload(raw_text: Union[str, bytes, None]) -> Any:
    """Decode the JSON value carried by raw service output.

    Args:
        raw_text: Raw text (or UTF-8 bytes) returned by the extraction service

    Returns:
        Decoded JSON value (dict or list for any realistic response)

    Raises:
        ExtractionFormatError: Empty input, undecodable bytes, or the
            candidate text is not strict JSON
    """
    if raw_text is None:
        raise ExtractionFormatError("Empty response from extraction service", snippet="")

    if isinstance(raw_text, (bytes, bytearray)):
        try:
            raw_text = bytes(raw_text).decode("utf-8")
        except UnicodeDecodeError as e:
            raise ExtractionFormatError(
                f"Extraction response is not valid UTF-8: {e}",
                snippet=bytes(raw_text)[:SNIPPET_MAX_CHARS].decode("utf-8", errors="replace"),
            )

    cleaned = strip_code_fences(raw_text.strip().lstrip("﻿"))
    candidate = locate_json_candidate(cleaned)

    try:
        return json.loads(candidate, parse_constant=_reject_constant)
    except ValueError as e:
        # json.JSONDecodeError is a ValueError subclass
        snippet = candidate[:SNIPPET_MAX_CHARS]
        logger.error(f"Failed to decode extraction response: {e}; content: {snippet!r}")
        raise ExtractionFormatError(f"Failed to parse JSON response: {e}", snippet=snippet)
