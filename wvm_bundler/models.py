"""
Data models for the WeaveVM bundler SDK.
"""
from dataclasses import dataclass, field
from typing import Any, List, Optional

import rlp
from eth_account import Account
from pydantic import BaseModel, Field, field_validator
from web3 import Web3

from .exceptions import DecodeError
from .utils import ZERO_ADDRESS, hex_to_bytes

SIGNATURE_SIZE = 65


class LeafSpec(BaseModel):
    """Input for one leaf envelope: optional target address and payload"""
    target: Optional[str] = None
    data: Optional[bytes] = None

    @field_validator("data", mode="before")
    @classmethod
    def _hex_data(cls, v: Any) -> Any:
        # Calldata usually arrives as a 0x-prefixed hex string
        if isinstance(v, str) and v.startswith(("0x", "0X")):
            try:
                return hex_to_bytes(v)
            except DecodeError as e:
                raise ValueError(str(e))
        return v


class SignedEnvelope(BaseModel):
    """
    A signed leaf transaction that only exists inside a bundle.

    nonce, gas_limit and gas_price are sentinel zeros: leaves are never
    broadcast on their own and the outer transaction pays the fees.
    The signature is stored as 65 bytes: r (32) || s (32) || y_parity (1).
    """
    target: str = ZERO_ADDRESS
    payload: bytes = b""
    nonce: int = 0
    gas_limit: int = 0
    gas_price: int = 0
    chain_id: int
    value: int = 0
    signature: bytes

    class Config:
        frozen = True

    @field_validator("target")
    @classmethod
    def _checksum_target(cls, v: str) -> str:
        return Web3.to_checksum_address(v)

    def _signature_bytes(self) -> bytes:
        if len(self.signature) != SIGNATURE_SIZE:
            raise DecodeError(
                f"Signature must be {SIGNATURE_SIZE} bytes, got {len(self.signature)}"
            )
        return self.signature

    @property
    def r(self) -> int:
        return int.from_bytes(self._signature_bytes()[:32], "big")

    @property
    def s(self) -> int:
        return int.from_bytes(self._signature_bytes()[32:64], "big")

    @property
    def y_parity(self) -> int:
        parity = self._signature_bytes()[64]
        if parity not in (0, 1):
            raise DecodeError(f"Signature parity byte must be 0 or 1, got {parity}")
        return parity

    @property
    def v(self) -> int:
        """EIP-155 v value for this envelope's chain id"""
        if self.chain_id:
            return self.y_parity + 35 + 2 * self.chain_id
        return self.y_parity + 27

    def raw_transaction(self) -> bytes:
        """
        Rebuild the RLP-encoded signed legacy transaction.

        Returns:
            The same bytes eth_account produced when the envelope was signed
        """
        return rlp.encode([
            self.nonce,
            self.gas_price,
            self.gas_limit,
            hex_to_bytes(self.target),
            self.value,
            self.payload,
            self.v,
            self.r,
            self.s,
        ])

    def tx_hash(self) -> str:
        """Keccak-256 hash of the signed transaction as 0x hex"""
        return "0x" + bytes(Web3.keccak(self.raw_transaction())).hex()

    def recover_sender(self) -> str:
        """
        Recover the checksum address that signed this envelope.

        Raises:
            DecodeError: If the signature is not 65 bytes with a 0/1 parity byte
        """
        return Account.recover_transaction(self.raw_transaction())


class Bundle(BaseModel):
    """Ordered collection of leaf envelopes"""
    envelopes: List[SignedEnvelope] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.envelopes)


class OuterTransactionMetadata(BaseModel):
    """Fields of any fetched transaction, bundle or not"""
    block_hash: str = Field("0x", alias="blockHash")
    block_number: str = Field("0", alias="blockNumber")
    calldata: str = Field("0x", alias="input")
    to: str = ZERO_ADDRESS

    class Config:
        populate_by_name = True


@dataclass
class LeafFailure:
    """A leaf that could not be signed, identified by its input position"""
    index: int
    error: Exception

    def __str__(self) -> str:
        return f"leaf {self.index}: {type(self.error).__name__}: {self.error}"


@dataclass
class AssemblyResult:
    """Bundle of the successfully signed leaves plus the failures that were dropped"""
    bundle: Bundle
    failures: List[LeafFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass
class BundleReceipt:
    """Outcome of creating and broadcasting a bundle"""
    tx_hash: str
    bundle: Bundle
    failures: List[LeafFailure] = field(default_factory=list)
