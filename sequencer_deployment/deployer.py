import sys
from enum import Enum
from pathlib import Path
from typing import Optional

from sequencer_deployment.constants import Contract
from sequencer_deployment.errors import PredeployedContractMissing
from sequencer_deployment.registry import ContractRegistry, write_registry
from sequencer_deployment.resolver import ContractResolver


class DeploymentStage(Enum):
    START = "start"
    STANDALONE_DEPLOYED = "standalone deployed"
    PROXY_CHAIN_RESOLVED = "proxy chain resolved"
    WRITTEN = "written"
    DONE = "done"
    FAILED = "failed"


class Deployer:
    """
    Deploys HotShot and the light client proxy (with everything it depends on),
    then publishes the registry.
    """

    def __init__(
        self,
        resolver: ContractResolver,
        registry: ContractRegistry,
        output_filepath: Optional[Path] = None,
        check_predeployed: bool = False,
    ):
        self.resolver = resolver
        self.registry = registry
        self.output_filepath = output_filepath
        self.check_predeployed = check_predeployed
        self.stage = DeploymentStage.START

    def run(self) -> ContractRegistry:
        try:
            if self.check_predeployed:
                self._check_predeployed()

            self.resolver.resolve(self.registry, Contract.HOTSHOT)
            self.stage = DeploymentStage.STANDALONE_DEPLOYED

            self.resolver.resolve(self.registry, Contract.LIGHT_CLIENT_PROXY)
            self.stage = DeploymentStage.PROXY_CHAIN_RESOLVED

            self.finalize()
            self.stage = DeploymentStage.WRITTEN
        except Exception:
            print(f"Deployment aborted after stage '{self.stage.value}'.", file=sys.stderr)
            self.stage = DeploymentStage.FAILED
            raise

        self.stage = DeploymentStage.DONE
        return self.registry

    def _check_predeployed(self) -> None:
        """Checks that every supplied address hosts contract code."""
        client = self.resolver.client
        for contract in sorted(self.registry.predeployed, key=lambda c: c.env_var):
            address = self.registry.get(contract)
            print(
                f"(i) Checking code of predeployed {contract.name} at {address}",
                file=sys.stderr,
            )
            if not client.get_code(address):
                raise PredeployedContractMissing(f"no contract code at {address}", contract=contract)

    def finalize(self) -> None:
        """Publishes the deployments to the registry."""
        write_registry(entries=self.registry.entries(), filepath=self.output_filepath)
