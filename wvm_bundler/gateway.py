"""
Chain gateway: broadcast bundle calldata and fetch transactions by hash.

The gateway is a thin boundary over a JSON-RPC node. It does not retry,
estimate gas or track confirmations.
"""
import logging
import urllib.parse
from typing import Any, Optional, Protocol, Union

import requests
from web3 import Web3
from web3.exceptions import TransactionNotFound, Web3Exception

from .config import NetworkSettings
from .exceptions import (
    CredentialError, CredentialInvalidError, DecodeError, NotFoundError, TransportError
)
from .models import OuterTransactionMetadata
from .signer import Signer, resolve_signer
from .utils import ZERO_ADDRESS, encode_calldata, hex_to_bytes

logger = logging.getLogger(__name__)

TX_HASH_SIZE = 32


class ChainGateway(Protocol):
    """What the bundler needs from the chain"""

    def broadcast(self, calldata: bytes, credential: Union[Signer, str, None]) -> str:
        """Send calldata as the input of a new outer transaction and return its hash"""
        ...

    def fetch(self, tx_hash: str) -> OuterTransactionMetadata:
        """Return the fields of a transaction by hash"""
        ...


def validate_rpc_url(url: str, name: str = "rpc_url") -> None:
    """
    Require https unless the URL points at localhost/127.0.0.1.

    Raises:
        ValueError: If the URL is not secure
    """
    parsed = urllib.parse.urlparse(url)
    netloc_parts = parsed.netloc.split(':')
    host = netloc_parts[0] if netloc_parts else ''
    is_local = host in ('localhost', '127.0.0.1')
    if parsed.scheme != 'https' and not is_local:
        raise ValueError(f"{name} must use https:// for security (got: {parsed.scheme}://)")


def _hex(value: Any, default: str) -> str:
    if value is None:
        return default
    if isinstance(value, (bytes, bytearray)):
        return encode_calldata(value)
    return str(value)


class Web3Gateway:
    """
    ChainGateway implementation over a web3 HTTP provider.

    The outer transaction always goes to settings.bundler_address with the
    fixed gas limit and fees from settings; callers cannot tune them.
    """

    def __init__(
        self,
        settings: NetworkSettings,
        w3: Optional[Web3] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Args:
            settings: Network configuration
            w3: Optional preconfigured Web3 instance
            logger: Optional logger instance

        Raises:
            ValueError: If the RPC URL does not use https (unless local)
        """
        validate_rpc_url(settings.rpc_url)
        self.settings = settings
        self.logger = logger or logging.getLogger(__name__)
        self.w3 = w3 or Web3(Web3.HTTPProvider(settings.rpc_url))

    def build_outer_transaction(self, calldata: bytes, sender: str, nonce: int) -> dict:
        """Transaction dict carrying the bundle to the bundler address"""
        return {
            "type": 2,
            "from": sender,
            "to": Web3.to_checksum_address(self.settings.bundler_address),
            "nonce": nonce,
            "chainId": self.settings.chain_id,
            "data": bytes(calldata),
            "value": 0,
            "gas": self.settings.gas_limit,
            "maxPriorityFeePerGas": self.settings.max_priority_fee_per_gas,
            "maxFeePerGas": self.settings.max_fee_per_gas,
        }

    def broadcast(self, calldata: bytes, credential: Union[Signer, str, None]) -> str:
        """
        Submit calldata as the input of a new outer transaction.

        Args:
            calldata: Compressed, encoded bundle
            credential: Signer or hex private key paying for the transaction

        Returns:
            Transaction hash as 0x hex

        Raises:
            CredentialRequiredError: If no credential is supplied
            CredentialInvalidError: If the credential cannot be parsed or fails to sign
            TransportError: If the RPC node cannot be reached or rejects the transaction
        """
        signer = resolve_signer(credential)

        try:
            nonce = self.w3.eth.get_transaction_count(signer.address)
        except (Web3Exception, requests.RequestException) as e:
            self.logger.error(f"Failed to fetch nonce for {signer.address}: {e}")
            raise TransportError(f"Failed to fetch nonce: {str(e)}") from e

        tx = self.build_outer_transaction(calldata, signer.address, nonce)

        try:
            signed = signer.sign_transaction(tx)
        except CredentialError:
            raise
        except Exception as e:
            self.logger.error(f"Outer transaction signing failed: {e}")
            raise CredentialInvalidError(f"Failed to sign transaction: {str(e)}") from e

        try:
            tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        except (Web3Exception, requests.RequestException) as e:
            self.logger.error(f"Failed to send transaction: {e}")
            raise TransportError(f"Failed to send transaction: {str(e)}") from e

        tx_hash_hex = _hex(tx_hash, "0x")
        self.logger.info(f"Bundle transaction sent: {tx_hash_hex} ({len(calldata)} bytes of calldata)")
        return tx_hash_hex

    def fetch(self, tx_hash: str) -> OuterTransactionMetadata:
        """
        Fetch a transaction by hash.

        Raises:
            ValueError: If tx_hash is not a 32-byte hex string
            NotFoundError: If the hash does not resolve to a transaction
            TransportError: If the RPC node cannot be reached
        """
        try:
            hash_bytes = hex_to_bytes(tx_hash)
        except DecodeError as e:
            raise ValueError(f"Invalid transaction hash {tx_hash!r}: {str(e)}")
        if len(hash_bytes) != TX_HASH_SIZE:
            raise ValueError(f"Transaction hash must be {TX_HASH_SIZE} bytes, got {len(hash_bytes)}")

        tx_hash_hex = encode_calldata(hash_bytes)
        try:
            tx = self.w3.eth.get_transaction(tx_hash_hex)
        except TransactionNotFound as e:
            raise NotFoundError(f"Transaction {tx_hash_hex} not found", tx_hash=tx_hash_hex) from e
        except (Web3Exception, requests.RequestException) as e:
            self.logger.error(f"Failed to fetch transaction {tx_hash_hex}: {e}")
            raise TransportError(f"Failed to fetch transaction: {str(e)}") from e

        if tx is None:
            raise NotFoundError(f"Transaction {tx_hash_hex} not found", tx_hash=tx_hash_hex)

        block_number = tx.get("blockNumber")
        return OuterTransactionMetadata(
            block_hash=_hex(tx.get("blockHash"), "0x"),
            block_number=str(int(block_number)) if block_number is not None else "0",
            calldata=_hex(tx.get("input"), "0x"),
            to=tx.get("to") or ZERO_ADDRESS,
        )
