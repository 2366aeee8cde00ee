"""Text-safe payload encoding for manual device-to-device transfer.

Payloads are UTF-8 JSON wrapped in base64 so they survive copy/paste and URL
query strings.
"""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any

from ..core.exceptions import CorruptPayload


def encode_payload(data: Any) -> str:
    raw = json.dumps(data, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    return base64.b64encode(raw).decode("ascii")


def decode_payload(encoded: str) -> Any:
    if not encoded or not encoded.strip():
        raise CorruptPayload("Empty data code")
    text = "".join(encoded.split())
    # Links may carry url-safe base64 and lose padding.
    text = text.replace("-", "+").replace("_", "/")
    text += "=" * (-len(text) % 4)
    try:
        raw = base64.b64decode(text, validate=True)
        return json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise CorruptPayload() from e
