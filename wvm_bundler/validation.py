"""
Invariant checks for decoded bundles.

Decoded bundles come from on-chain calldata anyone can write, so a bad
envelope is reported as a BundleInvariantViolation and never aborts the
process.
"""
from dataclasses import dataclass
from typing import List

from .exceptions import BundleInvariantViolation
from .models import Bundle

# Fields that must be zero on every leaf envelope
SENTINEL_FIELDS = ("nonce", "gas_limit", "gas_price")


@dataclass(frozen=True)
class InvariantViolation:
    index: int
    field: str
    value: int


def find_violations(bundle: Bundle) -> List[InvariantViolation]:
    """List every envelope field that breaks the zero nonce/gas invariant."""
    violations = []
    for index, envelope in enumerate(bundle.envelopes):
        for field in SENTINEL_FIELDS:
            value = getattr(envelope, field)
            if value != 0:
                violations.append(InvariantViolation(index=index, field=field, value=value))
    return violations


def validate_bundle(bundle: Bundle) -> Bundle:
    """
    Check that every envelope has nonce, gas_limit and gas_price equal to 0.

    Returns:
        The bundle, unchanged

    Raises:
        BundleInvariantViolation: Identifying the first offending envelope and field
    """
    violations = find_violations(bundle)
    if violations:
        first = violations[0]
        raise BundleInvariantViolation(first.index, first.field, first.value, violations=violations)
    return bundle
