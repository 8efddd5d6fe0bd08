"""
Concurrent bundle assembly.

Every leaf is signed on a bounded thread pool. The call joins on all tasks
before returning: there is no early exit and no cancellation of in-flight
signing, so a signer that hangs blocks assembly (wrap the call in a deadline
if that matters to the caller).
"""
import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import List, Sequence, Union

from ._rate_limited_log import rate_limited_log
from .config import DEFAULT_MAX_WORKERS
from .envelope import create_envelope
from .exceptions import AssemblyError
from .models import AssemblyResult, Bundle, LeafFailure, LeafSpec
from .signer import Signer

logger = logging.getLogger(__name__)

Credential = Union[Signer, str, None]


def _signers_for(leaves: Sequence[LeafSpec], signer) -> List[Credential]:
    # A single credential is shared; a list/tuple gives one signer per leaf
    if isinstance(signer, (list, tuple)):
        if len(signer) != len(leaves):
            raise ValueError(
                f"Got {len(signer)} signers for {len(leaves)} leaves; counts must match"
            )
        return list(signer)
    return [signer] * len(leaves)


def assemble_bundle(
    leaves: Sequence[LeafSpec],
    signer: Union[Credential, Sequence[Credential]],
    chain_id: int,
    max_workers: int = DEFAULT_MAX_WORKERS,
    fail_fast: bool = False
) -> AssemblyResult:
    """
    Sign all leaves concurrently and collect them into a bundle.

    Args:
        leaves: Leaf specs in bundle order
        signer: Shared credential, or a sequence with one credential per leaf
        chain_id: Chain identifier for every envelope
        max_workers: Maximum number of concurrent signing tasks
        fail_fast: Raise AssemblyError instead of dropping failed leaves

    Returns:
        AssemblyResult whose bundle keeps the input order of the leaves that
        signed successfully, and whose failures list the dropped leaves

    Raises:
        AssemblyError: If fail_fast is set and any leaf failed
        ValueError: If a signer sequence does not match the number of leaves
    """
    if max_workers < 1:
        raise ValueError(f"max_workers must be at least 1 (got {max_workers})")

    leaves = list(leaves)
    credentials = _signers_for(leaves, signer)
    if not leaves:
        return AssemblyResult(bundle=Bundle())

    logger.debug(f"Signing {len(leaves)} leaves with up to {max_workers} workers")

    with ThreadPoolExecutor(max_workers=min(max_workers, len(leaves))) as executor:
        futures = [
            executor.submit(create_envelope, leaf, credential, chain_id)
            for leaf, credential in zip(leaves, credentials)
        ]
        wait(futures)

    envelopes = []
    failures = []
    for index, future in enumerate(futures):
        error = future.exception()
        if error is None:
            envelopes.append(future.result())
            logger.debug(f"Created envelope {index}")
            continue

        failures.append(LeafFailure(index=index, error=error))
        logger.debug(f"Leaf {index} failed to sign: {error}")
        rate_limited_log(
            f"Dropping leaf that failed to sign: {type(error).__name__}: {error}",
            logger_instance=logger
        )

    if failures:
        if fail_fast:
            raise AssemblyError(
                f"{len(failures)} of {len(leaves)} leaves failed to sign",
                failures=failures
            )
        logger.warning(f"Bundle assembled with {len(envelopes)} of {len(leaves)} leaves")

    return AssemblyResult(bundle=Bundle(envelopes=envelopes), failures=failures)
