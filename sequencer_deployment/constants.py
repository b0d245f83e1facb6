from enum import Enum
from pathlib import Path

#
# Filesystem
#

ARTIFACTS_DIR = Path("contracts") / "out"

#
# Network
#

DEFAULT_RPC_URL = "http://localhost:8545"
DEFAULT_ORCHESTRATOR_URL = "http://localhost:40001"
DEFAULT_MNEMONIC = "test test test test test test test test test test test junk"
DERIVATION_PATH = "m/44'/60'/0'/0/{}"

RECEIPT_TIMEOUT = 120  # seconds
GENESIS_REQUEST_TIMEOUT = 30  # seconds

LIGHT_CLIENT_GENESIS_ENDPOINT = "api/light_client_genesis"

#
# Contracts
#


class Contract(Enum):
    """The contracts needed to run the sequencer, keyed by their env var name."""

    HOTSHOT = ("ESPRESSO_SEQUENCER_HOTSHOT_ADDRESS", "HotShot")
    PLONK_VERIFIER = ("ESPRESSO_SEQUENCER_PLONK_VERIFIER_ADDRESS", "PlonkVerifier")
    LIGHT_CLIENT_STATE_UPDATE_VK = (
        "ESPRESSO_SEQUENCER_LIGHT_CLIENT_STATE_UPDATE_VK_ADDRESS",
        "LightClientStateUpdateVK",
    )
    LIGHT_CLIENT = ("ESPRESSO_SEQUENCER_LIGHT_CLIENT_ADDRESS", "LightClient")
    LIGHT_CLIENT_PROXY = ("ESPRESSO_SEQUENCER_LIGHT_CLIENT_PROXY_ADDRESS", "ERC1967Proxy")

    def __init__(self, env_var: str, artifact_name: str):
        self.env_var = env_var
        self.artifact_name = artifact_name

    def __str__(self) -> str:
        return self.env_var

    @classmethod
    def from_env_var(cls, env_var: str) -> "Contract":
        for contract in cls:
            if contract.env_var == env_var:
                return contract
        raise ValueError(f"Unknown contract variable '{env_var}'")


# Fully qualified names of the libraries linked into LightClient.sol
PLONK_VERIFIER_FQN = "contracts/src/libraries/PlonkVerifier.sol:PlonkVerifier"
LIGHT_CLIENT_STATE_UPDATE_VK_FQN = (
    "contracts/src/libraries/LightClientStateUpdateVK.sol:LightClientStateUpdateVK"
)

LIGHT_CLIENT_LIBRARIES = {
    Contract.PLONK_VERIFIER: PLONK_VERIFIER_FQN,
    Contract.LIGHT_CLIENT_STATE_UPDATE_VK: LIGHT_CLIENT_STATE_UPDATE_VK_FQN,
}

LIGHT_CLIENT_INITIALIZER = "initialize"

# numBlocksPerEpoch passed to LightClient.initialize (u32::MAX)
MAX_BLOCKS_PER_EPOCH = 2**32 - 1
