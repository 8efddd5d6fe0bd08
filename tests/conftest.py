"""
Pytest fixtures for the WeaveVM bundler SDK tests.
"""
import pytest
from web3.providers.rpc import HTTPProvider

from wvm_bundler._rate_limited_log import reset_rate_limited_log
from wvm_bundler.config import NetworkSettings
from wvm_bundler.exceptions import NotFoundError
from wvm_bundler.models import LeafSpec, OuterTransactionMetadata
from wvm_bundler.signer import LocalSigner
from wvm_bundler.utils import encode_calldata

# Constants for testing
TEST_RPC_URL = "https://rpc.example.com"
TEST_CHAIN_ID = 9496
TEST_BUNDLER_ADDRESS = "0xbabe1d25501157043c7b4ea7cbc877b9b4d8a057"
TEST_PRIV_KEY = "0x0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"
TEST_PRIV_KEY_2 = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"

ADDRESS_A = "0x1111111111111111111111111111111111111111"
ADDRESS_B = "0x2222222222222222222222222222222222222222"
ADDRESS_C = "0x3333333333333333333333333333333333333333"


@pytest.fixture(autouse=True)
def _patch_http_provider(monkeypatch):
    """
    Stub every Web3 HTTP call so no DNS / network traffic is triggered.
    """
    def _dummy(self, method, params=None, _=None):
        if method in {"eth_chainId"}:
            return {"jsonrpc": "2.0", "id": 1, "result": hex(TEST_CHAIN_ID)}
        return {"jsonrpc": "2.0", "id": 1, "result": "0x0"}

    monkeypatch.setattr(HTTPProvider, "make_request", _dummy, raising=True)


@pytest.fixture(autouse=True)
def _reset_rate_limited_log():
    reset_rate_limited_log()
    yield
    reset_rate_limited_log()


class StubGateway:
    """In-memory chain: remembers broadcast calldata and serves it back by hash"""

    def __init__(self):
        self.transactions = {}
        self.broadcasts = []

    def broadcast(self, calldata, credential):
        tx_hash = "0x" + format(len(self.transactions) + 1, "064x")
        self.broadcasts.append((bytes(calldata), credential))
        self.transactions[tx_hash] = OuterTransactionMetadata(
            block_hash="0x" + "ab" * 32,
            block_number=str(100 + len(self.transactions)),
            calldata=encode_calldata(calldata),
            to=TEST_BUNDLER_ADDRESS,
        )
        return tx_hash

    def fetch(self, tx_hash):
        if tx_hash not in self.transactions:
            raise NotFoundError(f"Transaction {tx_hash} not found", tx_hash=tx_hash)
        return self.transactions[tx_hash]


@pytest.fixture
def settings():
    return NetworkSettings(
        chain_id=TEST_CHAIN_ID,
        rpc_url=TEST_RPC_URL,
        bundler_address=TEST_BUNDLER_ADDRESS,
        gas_limit=490_000_000,
        max_priority_fee_per_gas=1_000_000_000,
        max_fee_per_gas=2_000_000_000,
        max_workers=4,
    )


@pytest.fixture
def signer():
    return LocalSigner(TEST_PRIV_KEY)


@pytest.fixture
def second_signer():
    return LocalSigner(TEST_PRIV_KEY_2)


@pytest.fixture
def stub_gateway():
    return StubGateway()


@pytest.fixture
def leaves():
    """Three leaves targeting A, B and C"""
    return [
        LeafSpec(target=ADDRESS_A, data=b"\x01payload-one"),
        LeafSpec(target=ADDRESS_B, data=b"\x02payload-two"),
        LeafSpec(target=ADDRESS_C, data=b"\x03payload-three"),
    ]
