"""Body decoding helpers shared by the response adapter and the streams."""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any

from .errors import ProtocolError

PATH_STAT_HEADER = "x-docker-container-path-stat"


def extract_error_message(body: Any) -> str:
    """Pull the daemon's ``{"message": ...}`` out of an error body."""
    if body is None or body == b"" or body == "":
        return "Error occurred"
    if isinstance(body, dict):
        message = body.get("message")
        return str(message) if message is not None else json.dumps(body)
    text = _decode_text(body) if isinstance(body, (bytes, bytearray)) else str(body)
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        return text.strip() or "Error occurred"

    if isinstance(parsed, dict) and "message" in parsed:
        message = parsed["message"]
        if isinstance(message, str):
            return message
        return str(message)
    return text.strip() or "Error occurred"


def decode_error_body(data: bytes) -> Any:
    """Best-effort decoding of an error body: JSON when possible, text otherwise."""
    if not data:
        return None
    text = _decode_text(data)
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def decode_json(data: bytes) -> Any:
    if not data or not data.strip():
        return None
    try:
        return json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ProtocolError(f"Invalid JSON response: {exc}", context=data) from exc


def parse_json_line(line: bytes | str) -> Any:
    try:
        return json.loads(line)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ProtocolError(f"Invalid JSON message in stream: {exc}", context=line) from exc


def parse_json_lines(data: bytes) -> list[Any]:
    """Decode newline-delimited JSON (pull/push progress, events, stats)."""
    records: list[Any] = []
    for line in data.splitlines():
        if line.strip():
            records.append(parse_json_line(line))
    return records


def decode_path_stat(headers: dict[str, str]) -> dict[str, Any] | None:
    """Decode the base64 JSON stat the daemon returns for ``HEAD .../archive``."""
    raw = headers.get(PATH_STAT_HEADER)
    if not raw:
        return None
    try:
        return json.loads(base64.b64decode(raw))
    except (binascii.Error, ValueError) as exc:
        raise ProtocolError(f"Invalid path stat header: {exc}", context=raw) from exc


def _decode_text(body: bytes | bytearray) -> str:
    return bytes(body).decode("utf-8", errors="replace")


__all__ = [
    "decode_error_body",
    "decode_json",
    "decode_path_stat",
    "extract_error_message",
    "parse_json_line",
    "parse_json_lines",
]
