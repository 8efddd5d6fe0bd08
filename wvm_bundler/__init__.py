"""
WeaveVM bundler SDK.

Packs independently signed leaf transactions into one compressed blob carried
by a single outer transaction, and recovers them again by transaction hash.
"""
from .client import BundlerClient
from .config import NetworkConfig, NetworkSettings
from .models import (
    LeafSpec, SignedEnvelope, Bundle, OuterTransactionMetadata,
    LeafFailure, AssemblyResult, BundleReceipt
)
from .envelope import create_envelope
from .assembler import assemble_bundle
from .codec import encode_bundle, decode_bundle
from .compression import compress, decompress
from .validation import validate_bundle, find_violations
from .gateway import ChainGateway, Web3Gateway
from .signer import Signer, LocalSigner
from .utils import generate_random_calldata
from .exceptions import (
    BundlerError, CredentialError, CredentialRequiredError, CredentialInvalidError,
    DataRequiredError, TransportError, NotFoundError, CodecError, EncodeError,
    DecodeError, CompressionError, BundleInvariantViolation, AssemblyError
)
from .version import __version__

__all__ = [
    "BundlerClient",
    "NetworkConfig",
    "NetworkSettings",
    "LeafSpec",
    "SignedEnvelope",
    "Bundle",
    "OuterTransactionMetadata",
    "LeafFailure",
    "AssemblyResult",
    "BundleReceipt",
    "create_envelope",
    "assemble_bundle",
    "encode_bundle",
    "decode_bundle",
    "compress",
    "decompress",
    "validate_bundle",
    "find_violations",
    "ChainGateway",
    "Web3Gateway",
    "Signer",
    "LocalSigner",
    "generate_random_calldata",
    "BundlerError",
    "CredentialError",
    "CredentialRequiredError",
    "CredentialInvalidError",
    "DataRequiredError",
    "TransportError",
    "NotFoundError",
    "CodecError",
    "EncodeError",
    "DecodeError",
    "CompressionError",
    "BundleInvariantViolation",
    "AssemblyError",
    "__version__",
]
