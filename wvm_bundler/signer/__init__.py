"""
Signer capability for leaf envelopes and outer bundle transactions.
"""
from typing import Any, Dict, Protocol, Union, runtime_checkable

from ..exceptions import CredentialInvalidError, CredentialRequiredError

__all__ = ["Signer", "LocalSigner", "resolve_signer"]


@runtime_checkable
class Signer(Protocol):
    """Protocol for anything able to sign an Ethereum transaction dict"""
    address: str

    def sign_transaction(self, transaction_dict: Dict[str, Any]) -> Any:
        """Sign transaction and return signed tx object (with r, s, v and raw_transaction)"""
        ...


from .local import LocalSigner  # noqa: E402


def resolve_signer(credential: Union[Signer, str, None]) -> Signer:
    """
    Turn a signing credential into a Signer.

    Args:
        credential: A Signer, a hex private key, or None

    Returns:
        Signer instance

    Raises:
        CredentialRequiredError: If no credential is supplied
        CredentialInvalidError: If a private key cannot be parsed or the object
            cannot sign transactions
    """
    if credential is None or credential == "":
        raise CredentialRequiredError("A signing credential is required")
    if isinstance(credential, str):
        return LocalSigner(credential)
    if not callable(getattr(credential, "sign_transaction", None)):
        raise CredentialInvalidError(
            f"Credential of type {type(credential).__name__} cannot sign transactions"
        )
    return credential
