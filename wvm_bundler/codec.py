"""
Binary codec for bundles.

Layout (little-endian, borsh style):

    bundle  := u32 count, record * count
    record  := u64 nonce, u64 gas_limit, u128 gas_price, u64 chain_id,
               20-byte target, u256 value,
               u32 payload_len, payload, u32 signature_len, signature

The codec is a structural mirror of Bundle: it never reorders, deduplicates
or interprets fields. Invariant checks belong to the validator.
"""
import struct

from .exceptions import DecodeError, EncodeError
from .models import Bundle, SignedEnvelope
from .utils import hex_to_bytes

ADDRESS_SIZE = 20
_U32 = struct.Struct("<I")

# (field, byte width) of the fixed-width integer fields, in record order
_INT_FIELDS = (
    ("nonce", 8),
    ("gas_limit", 8),
    ("gas_price", 16),
    ("chain_id", 8),
)
_VALUE_SIZE = 32


def _pack_uint(value: int, size: int, name: str) -> bytes:
    try:
        return value.to_bytes(size, "little", signed=False)
    except OverflowError:
        raise EncodeError(f"{name} does not fit in {size * 8} bits: {value}")


def _pack_blob(data: bytes, name: str) -> bytes:
    if len(data) > 0xFFFFFFFF:
        raise EncodeError(f"{name} too long: {len(data)} bytes")
    return _U32.pack(len(data)) + data


def _encode_envelope(envelope: SignedEnvelope) -> bytes:
    parts = [_pack_uint(getattr(envelope, name), size, name) for name, size in _INT_FIELDS]

    target = hex_to_bytes(envelope.target)
    if len(target) != ADDRESS_SIZE:
        raise EncodeError(f"Target address must be {ADDRESS_SIZE} bytes, got {len(target)}")
    parts.append(target)

    parts.append(_pack_uint(envelope.value, _VALUE_SIZE, "value"))
    parts.append(_pack_blob(envelope.payload, "payload"))
    parts.append(_pack_blob(envelope.signature, "signature"))
    return b"".join(parts)


def encode_bundle(bundle: Bundle) -> bytes:
    """
    Serialize a bundle.

    Raises:
        EncodeError: If a field does not fit the layout
    """
    out = [_U32.pack(len(bundle.envelopes))]
    for index, envelope in enumerate(bundle.envelopes):
        try:
            out.append(_encode_envelope(envelope))
        except EncodeError as e:
            raise EncodeError(f"Envelope {index}: {e}") from e
    return b"".join(out)


class _Reader:
    """Cursor over a bytes buffer that raises DecodeError on truncation"""

    def __init__(self, data: bytes):
        self.data = data
        self.offset = 0

    def take(self, size: int, what: str) -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise DecodeError(
                f"Truncated bundle: need {size} bytes for {what} at offset {self.offset}, "
                f"have {len(self.data) - self.offset}"
            )
        chunk = self.data[self.offset:end]
        self.offset = end
        return chunk

    def uint(self, size: int, what: str) -> int:
        return int.from_bytes(self.take(size, what), "little", signed=False)

    def blob(self, what: str) -> bytes:
        (length,) = _U32.unpack(self.take(_U32.size, f"{what} length"))
        return self.take(length, what)

    @property
    def remaining(self) -> int:
        return len(self.data) - self.offset


def _decode_envelope(reader: _Reader) -> SignedEnvelope:
    fields = {name: reader.uint(size, name) for name, size in _INT_FIELDS}
    fields["target"] = "0x" + reader.take(ADDRESS_SIZE, "target").hex()
    fields["value"] = reader.uint(_VALUE_SIZE, "value")
    fields["payload"] = reader.blob("payload")
    fields["signature"] = reader.blob("signature")
    return SignedEnvelope(**fields)


def decode_bundle(data: bytes) -> Bundle:
    """
    Deserialize a bundle.

    Raises:
        DecodeError: If the bytes are truncated, have trailing data or are not a bundle
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise DecodeError(f"Expected bytes, got {type(data).__name__}")

    reader = _Reader(bytes(data))
    (count,) = _U32.unpack(reader.take(_U32.size, "envelope count"))

    envelopes = []
    for index in range(count):
        try:
            envelopes.append(_decode_envelope(reader))
        except DecodeError as e:
            raise DecodeError(f"Envelope {index}: {e}") from e

    if reader.remaining:
        raise DecodeError(f"{reader.remaining} trailing bytes after {count} envelopes")

    return Bundle(envelopes=envelopes)

