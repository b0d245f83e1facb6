import json

import pytest
from eth_utils import to_checksum_address

from sequencer_deployment.artifacts import ArtifactStore
from sequencer_deployment.constants import (
    LIGHT_CLIENT_STATE_UPDATE_VK_FQN,
    PLONK_VERIFIER_FQN,
    Contract,
)
from sequencer_deployment.errors import TransactionFailed
from sequencer_deployment.genesis import LightClientGenesis
from sequencer_deployment.linker import library_placeholder
from sequencer_deployment.resolver import ContractResolver

# Common constants
PLAIN_BYTECODE = "0x6080604052348015600f57600080fd5b50"

GENESIS = LightClientGenesis(
    view_num=0,
    block_height=0,
    block_comm_root=0,
    fee_ledger_comm=0,
    stake_table_bls_key_comm=0x1234,
    stake_table_schnorr_key_comm=0x5678,
    stake_table_amount_comm=0x9ABC,
    threshold=7,
)

LIGHT_CLIENT_STATE_COMPONENTS = [
    {"name": "viewNum", "type": "uint64", "internalType": "uint64"},
    {"name": "blockHeight", "type": "uint64", "internalType": "uint64"},
    {"name": "blockCommRoot", "type": "uint256", "internalType": "BN254.ScalarField"},
    {"name": "feeLedgerComm", "type": "uint256", "internalType": "BN254.ScalarField"},
    {"name": "stakeTableBlsKeyComm", "type": "uint256", "internalType": "BN254.ScalarField"},
    {"name": "stakeTableSchnorrKeyComm", "type": "uint256", "internalType": "BN254.ScalarField"},
    {"name": "stakeTableAmountComm", "type": "uint256", "internalType": "BN254.ScalarField"},
    {"name": "threshold", "type": "uint256", "internalType": "uint256"},
]

LIGHT_CLIENT_ABI = [
    {
        "type": "function",
        "name": "initialize",
        "stateMutability": "nonpayable",
        "inputs": [
            {
                "name": "genesis",
                "type": "tuple",
                "internalType": "struct LightClient.LightClientState",
                "components": LIGHT_CLIENT_STATE_COMPONENTS,
            },
            {"name": "numBlockPerEpoch", "type": "uint32", "internalType": "uint32"},
        ],
        "outputs": [],
    }
]

PROXY_ABI = [
    {
        "type": "constructor",
        "stateMutability": "payable",
        "inputs": [
            {"name": "implementation", "type": "address", "internalType": "address"},
            {"name": "_data", "type": "bytes", "internalType": "bytes"},
        ],
    }
]


# Utility functions
def address(n: int) -> str:
    return to_checksum_address(f"0x{n:040x}")


def light_client_bytecode() -> str:
    return (
        "0x6080"
        + library_placeholder(PLONK_VERIFIER_FQN)
        + "6000"
        + library_placeholder(LIGHT_CLIENT_STATE_UPDATE_VK_FQN)
        + "5b"
        + library_placeholder(PLONK_VERIFIER_FQN)
        + "fe"
    )


def light_client_link_references() -> dict:
    # offsets are irrelevant to placeholder based linking
    return {
        "contracts/src/libraries/PlonkVerifier.sol": {
            "PlonkVerifier": [{"start": 2, "length": 20}, {"start": 45, "length": 20}]
        },
        "contracts/src/libraries/LightClientStateUpdateVK.sol": {
            "LightClientStateUpdateVK": [{"start": 24, "length": 20}]
        },
    }


def write_artifact(directory, contract: Contract, abi, bytecode) -> None:
    name = contract.artifact_name
    artifact_dir = directory / f"{name}.sol"
    artifact_dir.mkdir(parents=True, exist_ok=True)
    with open(artifact_dir / f"{name}.json", "w") as file:
        json.dump({"abi": abi, "bytecode": bytecode}, file)


class FakeL1Client:
    """Records deployments in order and hands out sequential addresses."""

    def __init__(self, fail_on=None):
        self.fail_on = set(fail_on or ())
        self.deployments = list()
        self.code = dict()
        self.address = address(0xD3)
        self.chain_id = 31337
        self._next = 0x1000

    def deploy(self, contract, abi, bytecode, *args):
        if contract in self.fail_on:
            raise TransactionFailed("transaction rejected", contract=contract)
        self._next += 1
        deployed = address(self._next)
        self.deployments.append((contract, bytes(bytecode), args))
        self.code[deployed] = bytes(bytecode)
        return deployed

    def deploy_bytecode(self, contract, bytecode):
        return self.deploy(contract, [], bytecode)

    def get_code(self, address):
        return self.code.get(address, b"")

    @property
    def deployed_contracts(self):
        return [contract for contract, _, _ in self.deployments]


class FakeGenesisProvider:
    def __init__(self, genesis=GENESIS, calls=None):
        self.genesis = genesis
        self.calls = calls if calls is not None else list()

    def fetch(self):
        self.calls.append("genesis")
        return self.genesis


# Fixtures
@pytest.fixture
def artifacts_dir(tmp_path):
    directory = tmp_path / "out"
    write_artifact(directory, Contract.HOTSHOT, [], PLAIN_BYTECODE)
    write_artifact(directory, Contract.PLONK_VERIFIER, [], PLAIN_BYTECODE + "01")
    write_artifact(directory, Contract.LIGHT_CLIENT_STATE_UPDATE_VK, [], PLAIN_BYTECODE + "02")
    write_artifact(
        directory,
        Contract.LIGHT_CLIENT,
        LIGHT_CLIENT_ABI,
        {"object": light_client_bytecode(), "linkReferences": light_client_link_references()},
    )
    write_artifact(directory, Contract.LIGHT_CLIENT_PROXY, PROXY_ABI, {"object": PLAIN_BYTECODE})
    return directory


@pytest.fixture
def artifacts(artifacts_dir):
    return ArtifactStore(artifacts_dir)


@pytest.fixture
def client():
    return FakeL1Client()


@pytest.fixture
def genesis_provider():
    return FakeGenesisProvider()


@pytest.fixture
def resolver(client, artifacts, genesis_provider):
    return ContractResolver(client=client, artifacts=artifacts, genesis=genesis_provider)
