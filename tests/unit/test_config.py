"""Unit tests for run configuration."""

import pytest

from governance_deployments.config import RunConfig
from governance_deployments.constants import DEFAULT_LOCAL_RPC_URL
from governance_deployments.exceptions import ConfigurationError


@pytest.fixture
def clean_env(monkeypatch):
    for name in ["SEPOLIA_RPC_URL", "RPC_URL", "DEPLOYER_ADDRESS", "ETHERSCAN_API_KEY", "DEVNET_RPC_URL"]:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestFromEnv:
    """Test RunConfig.from_env."""

    def test_reads_network_specific_rpc_url(self, clean_env):
        """Test that <NETWORK>_RPC_URL is read for the network."""
        clean_env.setenv("SEPOLIA_RPC_URL", "https://sepolia.example.com")
        clean_env.setenv("RPC_URL", "https://generic.example.com")

        config = RunConfig.from_env("sepolia")

        assert config.rpc_url == "https://sepolia.example.com"

    def test_falls_back_to_generic_rpc_url(self, clean_env):
        """Test that RPC_URL is used when no network-specific URL is set."""
        clean_env.setenv("RPC_URL", "https://generic.example.com")

        assert RunConfig.from_env("sepolia").rpc_url == "https://generic.example.com"

    def test_development_chain_uses_local_node(self, clean_env):
        """Test that development chains default to the local node."""
        assert RunConfig.from_env("hardhat").rpc_url == DEFAULT_LOCAL_RPC_URL

    def test_live_network_without_rpc_url(self, clean_env):
        """Test that a live network without an RPC URL raises ConfigurationError."""
        with pytest.raises(ConfigurationError) as exc_info:
            RunConfig.from_env("sepolia")

        assert "SEPOLIA_RPC_URL" in str(exc_info.value)

    def test_reads_credentials(self, clean_env):
        """Test that the deployer and API key are read from the environment."""
        clean_env.setenv("DEPLOYER_ADDRESS", "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266")
        clean_env.setenv("ETHERSCAN_API_KEY", "KEY")

        config = RunConfig.from_env("hardhat")

        assert config.deployer == "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
        assert config.verification_api_key == "KEY"

    def test_missing_credential_is_none(self, clean_env):
        """Test that an unset API key is None."""
        assert RunConfig.from_env("hardhat").verification_api_key is None

    def test_explicit_overrides_win(self, clean_env):
        """Test that explicit values take precedence over the environment."""
        clean_env.setenv("SEPOLIA_RPC_URL", "https://sepolia.example.com")
        clean_env.setenv("ETHERSCAN_API_KEY", "KEY")

        config = RunConfig.from_env(
            "sepolia",
            rpc_url="http://override",
            verification_api_key="OTHER",
            artifacts_dir="build",
        )

        assert config.rpc_url == "http://override"
        assert config.verification_api_key == "OTHER"
        assert config.artifacts_dir == "build"

    def test_none_overrides_are_ignored(self, clean_env):
        """Test that None overrides keep the environment values."""
        config = RunConfig.from_env("hardhat", artifacts_dir=None, deployer=None)

        assert config.artifacts_dir == "artifacts"
        assert config.deployer is None

    def test_custom_profile_rpc_env(self, clean_env):
        """Test that a custom profile reads its own RPC URL variable."""
        clean_env.setenv("DEVNET_RPC_URL", "http://devnet")

        config = RunConfig.from_env("devnet", profiles={"devnet": {}})

        assert config.rpc_url == "http://devnet"
        assert config.profiles == {"devnet": {}}


class TestRunConfig:
    """Test RunConfig value semantics."""

    def test_is_immutable(self):
        """Test that a RunConfig cannot be modified."""
        config = RunConfig(network="hardhat", rpc_url="http://x")

        with pytest.raises(AttributeError):
            config.network = "sepolia"

    def test_with_overrides_returns_copy(self):
        """Test that with_overrides leaves the original unchanged."""
        config = RunConfig(network="hardhat", rpc_url="http://x")

        other = config.with_overrides(poll_interval=0.1)

        assert other.poll_interval == 0.1
        assert config.poll_interval != 0.1
