"""
Utility functions for the WeaveVM bundler SDK.
"""
import random
from typing import Union

from .exceptions import DecodeError

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# 0x prefix plus a 4-byte function selector
MIN_CALLDATA_LENGTH = 10

_HEX_DIGITS = "0123456789abcdef"


def generate_random_calldata(length: int) -> str:
    """
    Generate random hex calldata for synthetic test traffic.

    Args:
        length: Requested length of the returned string, prefix included

    Returns:
        A "0x"-prefixed string of length max(length, 10)
    """
    actual_length = max(length, MIN_CALLDATA_LENGTH)
    return "0x" + "".join(random.choice(_HEX_DIGITS) for _ in range(actual_length - 2))


def hex_to_bytes(value: Union[str, bytes]) -> bytes:
    """
    Convert a hex string (with or without 0x prefix) to bytes.

    Args:
        value: Hex string or bytes (returned unchanged)

    Returns:
        Decoded bytes

    Raises:
        DecodeError: If the string is not valid hex
    """
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if not isinstance(value, str):
        raise DecodeError(f"Expected hex string, got {type(value).__name__}")

    if value.startswith(("0x", "0X")):
        value = value[2:]
    try:
        return bytes.fromhex(value)
    except ValueError as e:
        raise DecodeError(f"Invalid hex string: {str(e)}")


def encode_calldata(data: bytes) -> str:
    """Render bytes as 0x-prefixed hex calldata."""
    return "0x" + bytes(data).hex()
