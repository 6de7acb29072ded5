"""Unit tests for network profile resolution."""

import json
from pathlib import Path

import pytest

from governance_deployments.constants import NETWORK_CONFIG
from governance_deployments.exceptions import ConfigurationError
from governance_deployments.networks import load_profiles, resolve
from governance_deployments.types import NetworkProfile


class TestResolve:
    """Test the resolve function."""

    def test_development_chain_defaults(self):
        """Test that development chains need one confirmation and never verify."""
        profile = resolve("hardhat", verification_credential="KEY")

        assert profile.network_id == "hardhat"
        assert profile.required_confirmations == 1
        assert profile.verification_enabled is False
        assert profile.instant_finality is True

    def test_sepolia_with_credential(self):
        """Test that sepolia waits 6 blocks and verifies when a key is present."""
        profile = resolve("sepolia", verification_credential="KEY")

        assert profile.required_confirmations == 6
        assert profile.verification_enabled is True
        assert profile.chain_id == 11155111
        assert profile.explorer_api_url is not None
        assert profile.instant_finality is False

    def test_verification_disabled_without_credential(self):
        """Test that a missing credential disables verification, not an error."""
        profile = resolve("sepolia")

        assert profile.verification_enabled is False

    def test_verification_disabled_with_empty_credential(self):
        """Test that an empty API key disables verification."""
        profile = resolve("sepolia", verification_credential="")

        assert profile.verification_enabled is False

    def test_unknown_network_raises(self):
        """Test that unconfigured networks fail instead of getting a default."""
        with pytest.raises(ConfigurationError) as exc_info:
            resolve("goerli")

        assert "goerli" in str(exc_info.value)

    def test_unknown_network_is_value_error(self):
        """Test that an unknown network can be caught as ValueError."""
        with pytest.raises(ValueError):
            resolve("not-a-network")

    def test_deterministic(self):
        """Test that repeated resolution yields equal profiles."""
        for network in NETWORK_CONFIG:
            assert resolve(network, verification_credential="KEY") == resolve(
                network, verification_credential="KEY"
            )

    def test_total_over_configured_networks(self):
        """Test that every built-in network resolves to a profile."""
        for network in NETWORK_CONFIG:
            assert isinstance(resolve(network), NetworkProfile)

    def test_custom_table(self):
        """Test resolution against an explicit profile table."""
        table = {"devnet": {"block_confirmations": 3, "verify": True, "explorer_api_url": "x"}}

        profile = resolve("devnet", table, verification_credential="KEY")

        assert profile.required_confirmations == 3
        assert profile.verification_enabled is True

    def test_custom_table_does_not_fall_back_to_builtins(self):
        """Test that a custom table hides the built-in networks."""
        with pytest.raises(ConfigurationError):
            resolve("sepolia", {"devnet": {}})

    def test_missing_confirmations_default_to_one(self):
        """Test that a profile without a confirmation depth waits for one block."""
        profile = resolve("devnet", {"devnet": {}})

        assert profile.required_confirmations == 1

    def test_zero_confirmations_rejected(self):
        """Test that a confirmation depth of zero is rejected."""
        with pytest.raises(ConfigurationError):
            resolve("devnet", {"devnet": {"block_confirmations": 0}})


class TestNetworkProfile:
    """Test NetworkProfile validation."""

    def test_rejects_negative_confirmations(self):
        """Test that a negative confirmation depth is rejected."""
        with pytest.raises(ConfigurationError):
            NetworkProfile(network_id="x", required_confirmations=-1)

    def test_rejects_non_integer_confirmations(self):
        """Test that a non-integer confirmation depth is rejected."""
        with pytest.raises(ConfigurationError):
            NetworkProfile(network_id="x", required_confirmations="6")

    def test_is_immutable(self):
        """Test that a resolved profile cannot be modified."""
        profile = NetworkProfile(network_id="x")

        with pytest.raises(AttributeError):
            profile.required_confirmations = 5


class TestLoadProfiles:
    """Test the load_profiles function."""

    def test_merges_over_builtin_table(self, tmp_path: Path):
        """Test that file entries are merged over the built-in table."""
        path = tmp_path / "profiles.json"
        path.write_text(json.dumps({"sepolia": {"block_confirmations": 2}, "devnet": {}}))

        table = load_profiles(path)

        assert table["sepolia"]["block_confirmations"] == 2
        assert table["sepolia"]["verify"] is True  # kept from built-in entry
        assert "devnet" in table
        assert "hardhat" in table

    def test_does_not_mutate_builtin_table(self, tmp_path: Path):
        """Test that loading a file leaves the built-in table unchanged."""
        path = tmp_path / "profiles.json"
        path.write_text(json.dumps({"sepolia": {"block_confirmations": 2}}))

        load_profiles(path)

        assert NETWORK_CONFIG["sepolia"]["block_confirmations"] == 6

    def test_missing_file(self, tmp_path: Path):
        """Test that a missing profile file raises ConfigurationError."""
        with pytest.raises(ConfigurationError):
            load_profiles(tmp_path / "missing.json")

    def test_corrupted_file(self, tmp_path: Path):
        """Test that an invalid JSON profile file raises ConfigurationError."""
        path = tmp_path / "profiles.json"
        path.write_text("{ invalid json")

        with pytest.raises(ConfigurationError):
            load_profiles(path)

    def test_wrong_shape(self, tmp_path: Path):
        """Test that a profile entry that is not an object raises ConfigurationError."""
        path = tmp_path / "profiles.json"
        path.write_text(json.dumps({"sepolia": 6}))

        with pytest.raises(ConfigurationError):
            load_profiles(path)
