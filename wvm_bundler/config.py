"""
Network configuration for the WeaveVM bundler SDK.

Network parameters (chain id, RPC endpoint, bundler address and the fixed
gas parameters of the outer transaction) live in the bundled networks.json
and are handed to the rest of the SDK as a NetworkSettings instance.
"""
import os
import json
import logging
import importlib.resources
from dataclasses import dataclass
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_NETWORK = "wvm-testnet"
DEFAULT_MAX_WORKERS = 16
DEFAULT_MAX_DECOMPRESSED_SIZE = 64 * 1024 * 1024


@dataclass(frozen=True)
class NetworkSettings:
    """
    Injected configuration for bundle creation and retrieval.

    Attributes:
        chain_id: Chain identifier used for leaf envelopes and the outer transaction
        rpc_url: JSON-RPC endpoint
        bundler_address: Well-known recipient of outer bundle transactions
        gas_limit: Fixed gas limit of the outer transaction
        max_priority_fee_per_gas: Fixed priority fee of the outer transaction
        max_fee_per_gas: Fixed max fee of the outer transaction
        max_workers: Ceiling on concurrent leaf signing tasks
        max_decompressed_size: Largest decoded bundle accepted on retrieval
    """
    chain_id: int
    rpc_url: str
    bundler_address: str
    gas_limit: int
    max_priority_fee_per_gas: int
    max_fee_per_gas: int
    max_workers: int = DEFAULT_MAX_WORKERS
    max_decompressed_size: int = DEFAULT_MAX_DECOMPRESSED_SIZE


class NetworkConfig:
    """Loads network parameters from the bundled networks.json."""

    _networks_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @classmethod
    def load_networks(cls) -> Dict[str, Dict[str, Any]]:
        """
        Load all network definitions, caching them after the first read.

        Returns:
            Mapping of network name to its parameters
        """
        if cls._networks_cache is None:
            resource = importlib.resources.files("wvm_bundler").joinpath("networks.json")
            with resource.open("r", encoding="utf-8") as f:
                cls._networks_cache = json.load(f)
            logger.debug(f"Loaded {len(cls._networks_cache)} network definitions")
        return cls._networks_cache

    @classmethod
    def get_network(cls, network: str) -> Dict[str, Any]:
        """
        Get the parameters of a named network.

        Raises:
            ValueError: If the network is unknown
        """
        networks = cls.load_networks()
        if network not in networks:
            available = ", ".join(sorted(networks))
            raise ValueError(f"Unknown network '{network}'. Available networks: {available}")
        return networks[network]

    @classmethod
    def get_rpc_url(cls, network: str, override: Optional[str] = None) -> str:
        """
        Resolve the RPC URL for a network.

        Precedence: explicit override, then the <NETWORK>_RPC_URL environment
        variable (e.g. WVM_TESTNET_RPC_URL), then networks.json.
        """
        if override:
            return override

        env_var = f"{network.upper().replace('-', '_')}_RPC_URL"
        env_url = os.environ.get(env_var)
        if env_url:
            return env_url

        return cls.get_network(network)["rpc"]

    @classmethod
    def get_chain_id(cls, network: str) -> int:
        return int(cls.get_network(network)["chainId"])

    @classmethod
    def get_bundler_address(cls, network: str) -> str:
        return cls.get_network(network)["bundlerAddress"]

    @classmethod
    def get_settings(
        cls,
        network: str = DEFAULT_NETWORK,
        rpc_url: Optional[str] = None,
        max_workers: Optional[int] = None
    ) -> NetworkSettings:
        """
        Build the NetworkSettings for a named network.

        Args:
            network: Network name from networks.json
            rpc_url: Optional RPC URL override
            max_workers: Optional signing concurrency ceiling; defaults to the
                WVM_BUNDLER_MAX_WORKERS environment variable or 16

        Returns:
            NetworkSettings instance
        """
        params = cls.get_network(network)

        if max_workers is None:
            max_workers = int(os.environ.get("WVM_BUNDLER_MAX_WORKERS", DEFAULT_MAX_WORKERS))
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1 (got {max_workers})")

        return NetworkSettings(
            chain_id=int(params["chainId"]),
            rpc_url=cls.get_rpc_url(network, override=rpc_url),
            bundler_address=params["bundlerAddress"],
            gas_limit=int(params["gasLimit"]),
            max_priority_fee_per_gas=int(params["maxPriorityFeePerGas"]),
            max_fee_per_gas=int(params["maxFeePerGas"]),
            max_workers=max_workers,
        )
