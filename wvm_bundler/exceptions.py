"""
Exceptions for the WeaveVM bundler SDK.
"""
from typing import Any, List, Optional


class BundlerError(Exception):
    """Base exception for all bundler errors."""
    pass


class CredentialError(BundlerError):
    """Base exception for signing credential problems."""
    pass


class CredentialRequiredError(CredentialError):
    """Raised when an operation needs a signing credential and none was supplied."""
    pass


class CredentialInvalidError(CredentialError):
    """Raised when a signing credential cannot be parsed."""
    pass


class DataRequiredError(BundlerError):
    """Raised when a leaf has no payload to sign."""
    pass


class TransportError(BundlerError):
    """Raised when the RPC endpoint cannot be reached or returns an error."""
    pass


class NotFoundError(BundlerError):
    """Raised when a transaction hash does not resolve to a transaction."""

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        self.tx_hash = tx_hash
        super().__init__(message)


class CodecError(BundlerError):
    """Base exception for bundle serialization errors."""
    pass


class EncodeError(CodecError):
    """Raised when a bundle cannot be serialized."""
    pass


class DecodeError(CodecError):
    """Raised when bundle bytes are malformed or truncated."""
    pass


class CompressionError(BundlerError):
    """Raised when a compressed stream cannot be decompressed."""
    pass


class BundleInvariantViolation(BundlerError):
    """
    Raised when a decoded envelope carries a non-zero nonce, gas limit or gas price.

    Attributes:
        index: Position of the first offending envelope in the bundle
        field: Name of the offending field
        value: Value found in that field
        violations: Every violation found in the bundle
    """

    def __init__(self, index: int, field: str, value: Any, violations: Optional[List[Any]] = None):
        self.index = index
        self.field = field
        self.value = value
        self.violations = violations or []
        super().__init__(
            f"Envelope {index} violates bundle invariant: {field} must be 0 (got {value})"
        )


class AssemblyError(BundlerError):
    """
    Raised when bundle assembly is not allowed to continue with failed leaves.

    Attributes:
        failures: List of LeafFailure records for the leaves that failed
    """

    def __init__(self, message: str, failures: Optional[List[Any]] = None):
        self.failures = failures or []
        super().__init__(message)
