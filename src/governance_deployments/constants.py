"""Configuration constants for governance-deployments library."""

# Networks with instant local inclusion and no public explorer
DEVELOPMENT_CHAINS = ["hardhat", "localhost", "anvil"]

# Per-network operational parameters
# block_confirmations defaults to 1 when omitted
NETWORK_CONFIG = {
    "hardhat": {
        "chain_id": 31337,
    },
    "localhost": {
        "chain_id": 31337,
    },
    "anvil": {
        "chain_id": 31337,
    },
    "sepolia": {
        "chain_id": 11155111,
        "block_confirmations": 6,
        "verify": True,
        "explorer_api_url": "https://api.etherscan.io/v2/api",
        "default_rpc_env": "SEPOLIA_RPC_URL",
    },
    "mainnet": {
        "chain_id": 1,
        "block_confirmations": 6,
        "verify": True,
        "explorer_api_url": "https://api.etherscan.io/v2/api",
        "default_rpc_env": "MAINNET_RPC_URL",
    },
}

# Local node endpoint used when no RPC URL is configured for a development chain
DEFAULT_LOCAL_RPC_URL = "http://127.0.0.1:8545"

# Time-lock delay between a passed vote and execution (seconds)
MIN_DELAY = 3600

# Contract names in the default plan
GOVERNANCE_TOKEN = "GovernanceToken"
TIME_LOCK = "TimeLock"
TOKEN_FACTORY = "TokenFactory"

# Templates accepted in JSON plan files
DEPLOYER_TEMPLATE = "$deployer"
ADDRESS_TEMPLATE_PREFIX = "@"

# Seconds between receipt / block polls while awaiting confirmations
DEFAULT_POLL_INTERVAL = 2.0

# HTTP timeout for RPC and explorer calls
REQUEST_TIMEOUT = 30
