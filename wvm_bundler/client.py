"""
BundlerClient - Main client for WeaveVM transaction bundles.
"""
import logging
from typing import Optional, Sequence, Union

from .assembler import assemble_bundle
from .codec import decode_bundle, encode_bundle
from .compression import compress, decompress
from .config import DEFAULT_NETWORK, NetworkConfig, NetworkSettings
from .envelope import create_envelope
from .exceptions import AssemblyError
from .gateway import ChainGateway, Web3Gateway
from .models import AssemblyResult, Bundle, BundleReceipt, LeafSpec, OuterTransactionMetadata, SignedEnvelope
from .signer import Signer, resolve_signer
from .utils import hex_to_bytes
from .validation import validate_bundle

Credential = Union[Signer, str, None]


class BundlerClient:
    """
    Client for creating and retrieving WeaveVM bundles.

    This client handles:
    1. Signing leaf envelopes concurrently
    2. Encoding and compressing them into one blob
    3. Broadcasting the blob as the calldata of one outer transaction
    4. Fetching, decoding and validating bundles by transaction hash

    To use this client, you'll need:
    - A network name (or explicit NetworkSettings)
    - Either a private key or a custom signer for creating bundles
    """

    def __init__(
        self,
        network: str = DEFAULT_NETWORK,
        priv_key: Optional[str] = None,
        signer: Optional[Signer] = None,
        settings: Optional[NetworkSettings] = None,
        rpc_url: Optional[str] = None,
        gateway: Optional[ChainGateway] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the BundlerClient

        Args:
            network: Network name from networks.json (ignored if settings given)
            priv_key: Ethereum private key (optional if signer provided)
            signer: Custom signer object (optional if priv_key provided)
            settings: Explicit network settings
            rpc_url: RPC URL override for the named network
            gateway: Chain gateway to use instead of a Web3Gateway
            logger: Optional logger instance to use for debug/info logging

        Raises:
            CredentialInvalidError: If priv_key cannot be parsed
            ValueError: If the RPC URL doesn't use https (unless localhost/127.0.0.1)

        Read-only use (retrieving bundles) needs no credential.
        """
        self.logger = logger or logging.getLogger(__name__)
        self.settings = settings or NetworkConfig.get_settings(network, rpc_url=rpc_url)
        self.gateway = gateway or Web3Gateway(self.settings, logger=self.logger)

        self.signer: Optional[Signer] = signer
        if priv_key:
            self.signer = resolve_signer(priv_key)

    @property
    def address(self) -> str:
        """
        Get the signer address

        Raises:
            ValueError: If no signer is available
        """
        if self.signer:
            return self.signer.address
        raise ValueError("No signer available")

    def create_envelope(self, leaf: LeafSpec) -> SignedEnvelope:
        """Sign a single leaf with the client's signer"""
        return create_envelope(leaf, self.signer, self.settings.chain_id)

    def assemble(
        self,
        leaves: Sequence[LeafSpec],
        signers: Optional[Sequence[Credential]] = None,
        fail_fast: bool = False
    ) -> AssemblyResult:
        """
        Sign leaves concurrently into a bundle without broadcasting it.

        Args:
            leaves: Leaf specs in bundle order
            signers: Optional per-leaf signers (defaults to the client's signer)
            fail_fast: Raise AssemblyError if any leaf fails

        Returns:
            AssemblyResult with the bundle and any dropped leaves
        """
        credential = list(signers) if signers is not None else self.signer
        return assemble_bundle(
            leaves,
            credential,
            chain_id=self.settings.chain_id,
            max_workers=self.settings.max_workers,
            fail_fast=fail_fast
        )

    @staticmethod
    def pack(bundle: Bundle) -> bytes:
        """Encode and compress a bundle into outer transaction calldata"""
        return compress(encode_bundle(bundle))

    def create_bundle(
        self,
        leaves: Sequence[LeafSpec],
        signers: Optional[Sequence[Credential]] = None,
        fail_fast: bool = False,
        allow_empty: bool = True
    ) -> BundleReceipt:
        """
        Sign, pack and broadcast a bundle.

        Blocks until every leaf is signed and the outer transaction is sent.
        Leaves that fail to sign are dropped and reported in the receipt.

        Args:
            leaves: Leaf specs in bundle order
            signers: Optional per-leaf signers (defaults to the client's signer)
            fail_fast: Raise AssemblyError if any leaf fails
            allow_empty: Broadcast even if no leaf was signed successfully

        Returns:
            BundleReceipt with the transaction hash, bundle and dropped leaves

        Raises:
            AssemblyError: If fail_fast is set and a leaf failed, or the
                bundle is empty and allow_empty is False
            CredentialRequiredError: If the client has no signer for the outer transaction
            TransportError: If broadcasting fails (no retry)
        """
        # The outer transaction always needs the client's own signer
        outer_signer = resolve_signer(self.signer)

        result = self.assemble(leaves, signers=signers, fail_fast=fail_fast)
        bundle = result.bundle

        if not bundle.envelopes:
            if not allow_empty:
                raise AssemblyError("No leaves were signed; refusing to broadcast an empty bundle",
                                    failures=result.failures)
            self.logger.warning("Broadcasting an empty bundle")

        calldata = self.pack(bundle)
        self.logger.debug(f"Packed {len(bundle)} envelopes into {len(calldata)} bytes")

        tx_hash = self.gateway.broadcast(calldata, outer_signer)
        return BundleReceipt(tx_hash=tx_hash, bundle=bundle, failures=result.failures)

    def retrieve_bundle_tx(self, tx_hash: str) -> OuterTransactionMetadata:
        """
        Fetch the metadata of any transaction.

        Raises:
            NotFoundError: If the hash does not resolve
            TransportError: If the RPC node cannot be reached
        """
        return self.gateway.fetch(tx_hash)

    def retrieve_bundle_data(self, calldata: Union[str, bytes]) -> Bundle:
        """
        Decode and validate a bundle from outer transaction calldata.

        Args:
            calldata: Hex string (with or without 0x) or raw bytes

        Returns:
            The validated Bundle

        Raises:
            DecodeError: If the calldata is not hex or not a valid bundle
            CompressionError: If the calldata is not a valid brotli stream
                or decompresses past settings.max_decompressed_size
            BundleInvariantViolation: If an envelope has non-zero nonce or gas fields
        """
        raw = hex_to_bytes(calldata)
        bundle = decode_bundle(decompress(raw, max_size=self.settings.max_decompressed_size))
        self.logger.debug(f"Decoded bundle with {len(bundle)} envelopes")
        return validate_bundle(bundle)

    def retrieve_bundle(self, tx_hash: str) -> Bundle:
        """
        Fetch a transaction and decode the bundle in its calldata.

        Raises:
            NotFoundError: If the hash does not resolve (nothing is decoded)
        """
        metadata = self.retrieve_bundle_tx(tx_hash)
        return self.retrieve_bundle_data(metadata.calldata)
