"""Small helpers shared by the client and the MCP server."""

from __future__ import annotations

import json
from typing import Any, Union

from fevermcp.main.tools.errors import InvalidIdentifierError


def parse_identifier(value: Union[int, str], kind: str = "feed") -> int:
    """Return *value* as a non-negative integer id.

    Accepts ints and strings of decimal digits (surrounding whitespace is
    ignored).  Anything else raises ``InvalidIdentifierError``.
    """
    if isinstance(value, bool):
        raise InvalidIdentifierError(f"Invalid {kind} identifier: {value!r}")
    if isinstance(value, int):
        if value < 0:
            raise InvalidIdentifierError(f"Invalid {kind} identifier: {value!r}")
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.isascii() and text.isdigit():
            try:
                return int(text)
            except ValueError:
                # longer than the interpreter will convert
                raise InvalidIdentifierError(
                    f"Invalid {kind} identifier: {len(text)}-digit value"
                ) from None
    raise InvalidIdentifierError(f"Invalid {kind} identifier: {value!r}")


def to_json(payload: Any) -> str:
    """Serialise *payload* as indented JSON for a text tool result."""
    if hasattr(payload, "to_dict"):
        payload = payload.to_dict()
    return json.dumps(payload, indent=2)
