"""Flatten a raw diagnostic reply into a single character stream."""

from typing import Optional, Union

# Completion marker the modem appends after the measurement records
COMPLETION_MARKER = "OK"

# The device works on a 4 KiB buffer; anything beyond it is never parsed
MAX_RESPONSE_CHARS = 4095


def normalize_response(raw: Optional[Union[str, bytes]]) -> str:
    """Strip the completion marker and all line terminators.

    Everything from the first ``OK`` onwards is dropped, then every
    carriage return and line feed is removed. Missing marker or empty
    input are not errors.

    Args:
        raw: Reply text as returned by the diagnostic query (bytes are
            decoded as UTF-8 with replacement)

    Returns:
        Normalized stream, possibly empty

    Example:
        >>> normalize_response("3\\r\\n-1300\\r\\n\\r\\nOK\\r\\n")
        '3-1300'
    """
    if not raw:
        return ""
    if isinstance(raw, bytes):
        raw = raw.decode('utf-8', errors='replace')

    text = raw[:MAX_RESPONSE_CHARS]

    marker_pos = text.find(COMPLETION_MARKER)
    if marker_pos != -1:
        text = text[:marker_pos]

    return text.replace('\r', '').replace('\n', '')
