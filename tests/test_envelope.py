"""
Tests for the envelope module.
"""
from types import SimpleNamespace

import pytest
from eth_account import Account

from wvm_bundler.envelope import create_envelope
from wvm_bundler.exceptions import (
    CredentialInvalidError, CredentialRequiredError, DataRequiredError, DecodeError
)
from wvm_bundler.models import LeafSpec, SignedEnvelope
from wvm_bundler.utils import ZERO_ADDRESS
from conftest import ADDRESS_A, TEST_CHAIN_ID, TEST_PRIV_KEY


class TestCreateEnvelope:
    """Test signing a single leaf."""

    def test_sentinel_fields(self, signer):
        """Envelope carries zero nonce, gas and value plus the chain id."""
        env = create_envelope(LeafSpec(target=ADDRESS_A, data=b"hello"), signer, TEST_CHAIN_ID)

        assert isinstance(env, SignedEnvelope)
        assert env.nonce == 0
        assert env.gas_limit == 0
        assert env.gas_price == 0
        assert env.value == 0
        assert env.chain_id == TEST_CHAIN_ID
        assert env.target == ADDRESS_A
        assert env.payload == b"hello"
        assert len(env.signature) == 65

    def test_missing_target_uses_zero_address(self, signer):
        env = create_envelope(LeafSpec(data=b"x"), signer, TEST_CHAIN_ID)
        assert env.target == ZERO_ADDRESS

    def test_unparseable_target_uses_zero_address(self, signer, caplog):
        env = create_envelope(LeafSpec(target="not-an-address", data=b"x"), signer, TEST_CHAIN_ID)
        assert env.target == ZERO_ADDRESS
        assert "Unparseable leaf target" in caplog.text

    def test_lowercase_target_is_checksummed(self, signer):
        target = "0x52908400098527886e0f7030069857d2e4169ee7"
        env = create_envelope(LeafSpec(target=target, data=b"x"), signer, TEST_CHAIN_ID)
        assert env.target == "0x52908400098527886E0F7030069857D2E4169EE7"

    def test_hex_string_payload(self, signer):
        env = create_envelope(LeafSpec(data="0xdeadbeef"), signer, TEST_CHAIN_ID)
        assert env.payload == bytes.fromhex("deadbeef")

    def test_empty_payload_is_allowed(self, signer):
        env = create_envelope(LeafSpec(data=b""), signer, TEST_CHAIN_ID)
        assert env.payload == b""

    def test_missing_data(self, signer):
        with pytest.raises(DataRequiredError):
            create_envelope(LeafSpec(target=ADDRESS_A), signer, TEST_CHAIN_ID)

    def test_missing_credential(self):
        with pytest.raises(CredentialRequiredError):
            create_envelope(LeafSpec(data=b"x"), None, TEST_CHAIN_ID)

    def test_invalid_credential(self):
        with pytest.raises(CredentialInvalidError):
            create_envelope(LeafSpec(data=b"x"), "0xnotakey", TEST_CHAIN_ID)

    def test_private_key_string_credential(self):
        env = create_envelope(LeafSpec(data=b"x"), TEST_PRIV_KEY, TEST_CHAIN_ID)
        assert env.recover_sender() == Account.from_key(TEST_PRIV_KEY).address

    def test_object_that_cannot_sign(self):
        with pytest.raises(CredentialInvalidError, match="cannot sign"):
            create_envelope(LeafSpec(data=b"x"), object(), TEST_CHAIN_ID)

    def test_signer_reporting_bare_parity(self, signer):
        """A signer returning v as 0/1 (typed-transaction style) still works."""
        class ParitySigner:
            address = signer.address

            def sign_transaction(self, transaction_dict):
                signed = signer.sign_transaction(transaction_dict)
                return SimpleNamespace(r=signed.r, s=signed.s, v=(signed.v - 35 - 2 * TEST_CHAIN_ID))

        env = create_envelope(LeafSpec(data=b"payload"), ParitySigner(), TEST_CHAIN_ID)
        expected = create_envelope(LeafSpec(data=b"payload"), signer, TEST_CHAIN_ID)

        assert env.signature == expected.signature
        assert env.recover_sender() == signer.address


class TestSignedEnvelope:
    """Test transaction reconstruction from a stored envelope."""

    def test_raw_transaction_matches_eth_account(self, signer):
        """Rebuilt raw transaction is byte-identical to what eth_account signed."""
        env = create_envelope(LeafSpec(target=ADDRESS_A, data=b"payload"), signer, TEST_CHAIN_ID)

        signed = Account.from_key(TEST_PRIV_KEY).sign_transaction({
            "to": ADDRESS_A,
            "nonce": 0,
            "chainId": TEST_CHAIN_ID,
            "data": b"payload",
            "value": 0,
            "gas": 0,
            "gasPrice": 0,
        })

        assert env.raw_transaction() == bytes(signed.raw_transaction)
        assert env.tx_hash() == "0x" + bytes(signed.hash).hex()
        assert env.v == signed.v

    def test_recover_sender(self, signer):
        env = create_envelope(LeafSpec(data=b"payload"), signer, TEST_CHAIN_ID)
        assert env.recover_sender() == signer.address

    def test_envelope_is_immutable(self, signer):
        env = create_envelope(LeafSpec(data=b"payload"), signer, TEST_CHAIN_ID)
        with pytest.raises(Exception):
            env.nonce = 1

    def test_short_signature_is_rejected(self, signer):
        env = create_envelope(LeafSpec(data=b"payload"), signer, TEST_CHAIN_ID)
        truncated = SignedEnvelope(payload=env.payload, chain_id=TEST_CHAIN_ID, signature=env.signature[:64])

        with pytest.raises(DecodeError, match="65 bytes"):
            truncated.recover_sender()
        with pytest.raises(DecodeError):
            truncated.raw_transaction()

    def test_bad_parity_byte_is_rejected(self, signer):
        env = create_envelope(LeafSpec(data=b"payload"), signer, TEST_CHAIN_ID)
        tampered = SignedEnvelope(
            payload=env.payload, chain_id=TEST_CHAIN_ID, signature=env.signature[:64] + b"\x05"
        )
        with pytest.raises(DecodeError, match="parity"):
            tampered.y_parity
