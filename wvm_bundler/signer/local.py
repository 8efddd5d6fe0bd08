"""
Local private-key signer backed by eth_account.
"""
import logging
from typing import Any, Dict

from eth_account import Account
from eth_account.signers.local import LocalAccount

from ..exceptions import CredentialInvalidError

logger = logging.getLogger(__name__)


class LocalSigner:
    """Signs transactions with an in-memory secp256k1 private key"""

    def __init__(self, priv_key: str):
        """
        Args:
            priv_key: Hex private key, with or without 0x prefix

        Raises:
            CredentialInvalidError: If the key cannot be parsed
        """
        try:
            self._account: LocalAccount = Account.from_key(priv_key)
        except Exception as e:
            # Never include the key material in the message
            raise CredentialInvalidError(f"Could not parse private key: {type(e).__name__}") from None
        self.address = self._account.address

    def sign_transaction(self, transaction_dict: Dict[str, Any]) -> Any:
        return self._account.sign_transaction(transaction_dict)

    def __repr__(self) -> str:
        return f"LocalSigner(address={self.address})"
