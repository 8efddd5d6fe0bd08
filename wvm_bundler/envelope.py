"""
Leaf envelope creation.

A leaf is signed as an EIP-155 legacy transaction with zero nonce, zero gas
and zero value, so it can never be mined on its own.
"""
import logging
from typing import Union

from web3 import Web3

from .exceptions import DataRequiredError
from .models import LeafSpec, SignedEnvelope
from .signer import Signer, resolve_signer
from .utils import ZERO_ADDRESS

logger = logging.getLogger(__name__)


def _resolve_target(target) -> str:
    if not target:
        return ZERO_ADDRESS
    try:
        return Web3.to_checksum_address(target)
    except (ValueError, TypeError):
        logger.warning(f"Unparseable leaf target {target!r}, using the zero address")
        return ZERO_ADDRESS


def _y_parity(v: int, chain_id: int) -> int:
    # Typed-transaction signers report the parity itself
    if v in (0, 1):
        return v
    if v >= 35:
        return (v - 35 - 2 * chain_id) & 1
    return v - 27


def create_envelope(
    leaf: LeafSpec,
    credential: Union[Signer, str, None],
    chain_id: int
) -> SignedEnvelope:
    """
    Sign one leaf into a zero-fee transaction envelope.

    Args:
        leaf: Target and payload of the leaf
        credential: Signer or hex private key
        chain_id: Chain identifier embedded in the signature

    Returns:
        SignedEnvelope with nonce, gas_limit, gas_price and value set to 0

    Raises:
        CredentialRequiredError: If no credential is supplied
        CredentialInvalidError: If the credential cannot be parsed
        DataRequiredError: If the leaf has no payload
    """
    signer = resolve_signer(credential)

    if leaf.data is None:
        raise DataRequiredError("Data Required")

    target = _resolve_target(leaf.target)
    tx = {
        "to": target,
        "nonce": 0,
        "chainId": chain_id,
        "data": leaf.data,
        "value": 0,
        "gas": 0,
        "gasPrice": 0,
    }

    signed = signer.sign_transaction(tx)
    signature = (
        int(signed.r).to_bytes(32, "big")
        + int(signed.s).to_bytes(32, "big")
        + bytes([_y_parity(int(signed.v), chain_id)])
    )

    return SignedEnvelope(
        target=target,
        payload=leaf.data,
        nonce=0,
        gas_limit=0,
        gas_price=0,
        chain_id=chain_id,
        value=0,
        signature=signature,
    )
