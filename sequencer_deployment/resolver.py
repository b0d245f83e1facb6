import sys
from collections import OrderedDict
from typing import Any, Callable, Dict, List, Sequence

from eth_typing import ChecksumAddress
from eth_utils.abi import collapse_if_tuple
from hexbytes import HexBytes
from web3 import Web3
from web3.exceptions import Web3Exception

from sequencer_deployment.artifacts import ArtifactStore
from sequencer_deployment.constants import (
    LIGHT_CLIENT_INITIALIZER,
    LIGHT_CLIENT_LIBRARIES,
    MAX_BLOCKS_PER_EPOCH,
    Contract,
)
from sequencer_deployment.errors import InitializationError
from sequencer_deployment.genesis import GenesisProvider
from sequencer_deployment.linker import link
from sequencer_deployment.network import DeploymentTransaction, L1Client
from sequencer_deployment.registry import ContractRegistry

w3 = Web3()

# contract -> contracts that must be resolved before it is deployed
DEPENDENCIES = OrderedDict(
    {
        Contract.HOTSHOT: (),
        Contract.PLONK_VERIFIER: (),
        Contract.LIGHT_CLIENT_STATE_UPDATE_VK: (),
        Contract.LIGHT_CLIENT: (
            Contract.PLONK_VERIFIER,
            Contract.LIGHT_CLIENT_STATE_UPDATE_VK,
        ),
        Contract.LIGHT_CLIENT_PROXY: (Contract.LIGHT_CLIENT,),
    }
)

ResolvedDependencies = Dict[Contract, ChecksumAddress]


def _validate_method_args(
    contract: Contract, method_abis: List[Dict[str, Any]], args: Sequence[Any]
) -> Dict[str, Any]:
    """Validates call arguments against the function ABI."""
    if len(method_abis) == 0:
        raise InitializationError("no matching function in ABI", contract=contract)

    abis_matching_args_length = [abi for abi in method_abis if len(abi.get("inputs", [])) == len(args)]
    for abi in abis_matching_args_length:
        named_args = {}
        for arg, abi_input in zip(args, abi["inputs"]):
            if not w3.codec.is_encodable(collapse_if_tuple(abi_input), arg):
                break
            named_args[abi_input.get("name", "")] = arg
        else:
            return named_args
    raise InitializationError(
        f"could not find ABI for '{method_abis[0].get('name')}' with {len(args)} arg(s) "
        "and given type(s)",
        contract=contract,
    )


def encode_call(
    contract: Contract, abi: List[Dict[str, Any]], method_name: str, *args
) -> HexBytes:
    """Encodes calldata for `method_name(*args)` against a contract ABI."""
    method_abis = [
        entry
        for entry in abi
        if entry.get("type") == "function" and entry.get("name") == method_name
    ]
    _validate_method_args(contract, method_abis, args)
    try:
        calldata = w3.eth.contract(abi=abi).encode_abi(method_name, args=list(args))
    except (Web3Exception, TypeError, ValueError) as e:
        raise InitializationError(f"unable to encode {method_name} call: {e}", contract=contract) from e
    return HexBytes(calldata)


class ContractResolver:
    """
    Deploys the sequencer contracts through a registry, each after its dependencies.

    Every contract has a build step taking the addresses of its resolved
    dependencies. Contracts without dependencies are deployed with a single
    transaction.
    """

    def __init__(self, client: L1Client, artifacts: ArtifactStore, genesis: GenesisProvider):
        self.client = client
        self.artifacts = artifacts
        self.genesis = genesis
        self._build_steps: Dict[Contract, Callable[[ResolvedDependencies], ChecksumAddress]] = {
            Contract.LIGHT_CLIENT: self._deploy_light_client,
            Contract.LIGHT_CLIENT_PROXY: self._deploy_light_client_proxy,
        }

    def resolve(self, registry: ContractRegistry, contract: Contract) -> ChecksumAddress:
        """Returns the address of `contract`, deploying it and its dependencies if needed."""
        if not DEPENDENCIES[contract]:
            transaction = DeploymentTransaction(self.client, self.artifacts, contract)
            return registry.resolve_by_transaction(contract, transaction)

        def deploy(registry: ContractRegistry) -> ChecksumAddress:
            dependencies = OrderedDict()
            for dependency in DEPENDENCIES[contract]:
                dependencies[dependency] = self.resolve(registry, dependency)
            return self._build_steps[contract](dependencies)

        return registry.resolve(contract, deploy)

    def _deploy_light_client(self, dependencies: ResolvedDependencies) -> ChecksumAddress:
        artifact = self.artifacts.get(Contract.LIGHT_CLIENT)
        libraries = {
            LIGHT_CLIENT_LIBRARIES[library]: address for library, address in dependencies.items()
        }
        bytecode = link(artifact.bytecode, libraries=libraries)
        return self.client.deploy_bytecode(Contract.LIGHT_CLIENT, bytecode)

    def _deploy_light_client_proxy(self, dependencies: ResolvedDependencies) -> ChecksumAddress:
        light_client_address = dependencies[Contract.LIGHT_CLIENT]
        light_client = self.artifacts.get(Contract.LIGHT_CLIENT)

        genesis = self.genesis.fetch()
        data = encode_call(
            Contract.LIGHT_CLIENT_PROXY,
            light_client.abi,
            LIGHT_CLIENT_INITIALIZER,
            genesis.as_abi_tuple(),
            MAX_BLOCKS_PER_EPOCH,
        )

        print(
            f"\nWrapping {Contract.LIGHT_CLIENT.artifact_name} at {light_client_address} into "
            f"{Contract.LIGHT_CLIENT_PROXY.artifact_name}.",
            file=sys.stderr,
        )
        transaction = DeploymentTransaction(
            self.client, self.artifacts, Contract.LIGHT_CLIENT_PROXY, light_client_address, data
        )
        return transaction.send()
