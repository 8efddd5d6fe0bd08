#!/usr/bin/env python3
"""
Simple example of using the WeaveVM bundler SDK.
"""
import os

from wvm_bundler import BundlerClient, LeafSpec, generate_random_calldata


def main():
    """
    Demonstrate basic usage of the BundlerClient.

    This example shows how to:
    1. Initialize the client
    2. Create a bundle of leaf transactions with random calldata
    3. Read the bundle back from the chain
    """
    PRIVATE_KEY = os.environ.get("PRIVATE_KEY")
    RPC_URL = os.environ.get("WVM_TESTNET_RPC_URL")

    if not PRIVATE_KEY:
        print("ERROR: PRIVATE_KEY environment variable is required")
        return

    client = BundlerClient(network="wvm-testnet", priv_key=PRIVATE_KEY, rpc_url=RPC_URL)
    print(f"Using account: {client.address}")

    leaves = [
        LeafSpec(target=client.address, data=generate_random_calldata(128))
        for _ in range(5)
    ]

    receipt = client.create_bundle(leaves)
    print(f"Bundle transaction: {receipt.tx_hash}")
    print(f"Envelopes: {len(receipt.bundle)}, dropped leaves: {len(receipt.failures)}")

    metadata = client.retrieve_bundle_tx(receipt.tx_hash)
    print(f"Block number: {metadata.block_number}")

    bundle = client.retrieve_bundle(receipt.tx_hash)
    for i, envelope in enumerate(bundle.envelopes):
        print(f"  [{i}] to={envelope.target} tx={envelope.tx_hash()} bytes={len(envelope.payload)}")


if __name__ == "__main__":
    main()
