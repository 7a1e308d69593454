"""
Helpers for the hex-encoded fields of encrypted configuration records.
"""

import secrets
from typing import Any, Dict, Optional


def generate_random_bytes(length: int) -> bytes:
    """Return `length` bytes from the operating system CSPRNG."""
    return secrets.token_bytes(length)


def parse_hex(hex_string: Any, expected_length: Optional[int] = None) -> bytes:
    """
    Decode one hex field of a record.

    Args:
        hex_string: Field value; spaces and colons between bytes are ignored
        expected_length: Required decoded length in bytes, if any

    Returns:
        Decoded bytes

    Raises:
        ValueError: If the value is not a hex string of the expected length
    """
    if not isinstance(hex_string, str):
        raise ValueError("Hex field must be a string")

    data = bytes.fromhex(hex_string.replace(" ", "").replace(":", ""))
    if expected_length is not None and len(data) != expected_length:
        raise ValueError(f"Hex field must decode to {expected_length} bytes, got {len(data)}")
    return data


def read_record_field(record: Dict[str, Any], name: str,
                      expected_length: Optional[int] = None) -> bytes:
    """
    Fetch and decode a named hex field.

    Raises:
        ValueError: If the record is not an object, or the field is missing or malformed
    """
    if not isinstance(record, dict):
        raise ValueError("Encrypted record must be a JSON object")
    if name not in record:
        raise ValueError(f"Encrypted record has no {name!r} field")
    return parse_hex(record[name], expected_length)
