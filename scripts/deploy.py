#!/usr/bin/python3
"""
Deploy the contracts needed to run the sequencer to an L1.

Outputs a .env style file with the addresses of the deployed contracts.

Deployments are incremental: the only addresses needed to configure the sequencer
network are those of HotShot and the light client proxy, but a full deployment
involves up to five contracts. Addresses of contracts that are already deployed
can be passed in (as options, environment variables, or the output of a previous
run); those are used wherever the contract is required instead of deploying a
new one. The output includes both the passed in and the newly deployed addresses.
"""

import sys
from collections import OrderedDict

import click

from sequencer_deployment.artifacts import ArtifactStore
from sequencer_deployment.confirm import confirm_start
from sequencer_deployment.constants import Contract
from sequencer_deployment.deployer import Deployer
from sequencer_deployment.errors import DeploymentError
from sequencer_deployment.genesis import GenesisProvider
from sequencer_deployment.network import L1Client
from sequencer_deployment.options import (
    account_index_option,
    artifacts_dir_option,
    hotshot_option,
    light_client_option,
    light_client_proxy_option,
    light_client_state_update_vk_option,
    mnemonic_option,
    orchestrator_url_option,
    out_option,
    plonk_verifier_option,
    registry_filepath_option,
    rpc_url_option,
)
from sequencer_deployment.registry import ContractRegistry, read_registry
from sequencer_deployment.resolver import ContractResolver


def _print_deployment_info(client, rpc_url, orchestrator_url, out, registry):
    print(
        f"Account: {client.address}",
        f"RPC: {rpc_url}",
        f"Chain ID: {client.chain_id}",
        f"Orchestrator: {orchestrator_url}",
        f"Output: {out or 'stdout'}",
        f"Predeployed: {', '.join(sorted(c.name for c in registry.predeployed)) or 'none'}",
        sep="\n",
        file=sys.stderr,
    )


@click.command()
@rpc_url_option
@orchestrator_url_option
@mnemonic_option
@account_index_option
@out_option
@artifacts_dir_option
@registry_filepath_option
@hotshot_option
@plonk_verifier_option
@light_client_state_update_vk_option
@light_client_option
@light_client_proxy_option
@click.option(
    "--check-predeployed",
    help="Check that every predeployed address has contract code before deploying.",
    is_flag=True,
    default=False,
)
@click.option(
    "--interactive",
    help="Confirm each deployment transaction before it is broadcast.",
    is_flag=True,
    default=False,
)
def cli(
    rpc_url,
    orchestrator_url,
    mnemonic,
    account_index,
    out,
    artifacts_dir,
    registry_filepath,
    hotshot,
    plonk_verifier,
    light_client_state_update_vk,
    light_client,
    light_client_proxy,
    check_predeployed,
    interactive,
):
    """Deploy the contracts needed to run the sequencer."""
    predeployed = OrderedDict()
    if registry_filepath:
        try:
            predeployed.update(read_registry(registry_filepath))
        except DeploymentError as e:
            raise click.BadParameter(str(e), param_hint="--registry-filepath")

    # explicitly passed addresses take precedence over a previous run's output
    explicit = {
        Contract.HOTSHOT: hotshot,
        Contract.PLONK_VERIFIER: plonk_verifier,
        Contract.LIGHT_CLIENT_STATE_UPDATE_VK: light_client_state_update_vk,
        Contract.LIGHT_CLIENT: light_client,
        Contract.LIGHT_CLIENT_PROXY: light_client_proxy,
    }
    predeployed.update({c: address for c, address in explicit.items() if address})
    registry = ContractRegistry(predeployed)

    client = L1Client.from_mnemonic(
        rpc_url, mnemonic, account_index=account_index, autosign=not interactive
    )
    try:
        _print_deployment_info(client, rpc_url, orchestrator_url, out, registry)
        if interactive:
            # Confirms the start of the deployment.
            confirm_start()

        resolver = ContractResolver(
            client=client,
            artifacts=ArtifactStore(artifacts_dir),
            genesis=GenesisProvider(orchestrator_url),
        )
        deployer = Deployer(
            resolver=resolver,
            registry=registry,
            output_filepath=out,
            check_predeployed=check_predeployed,
        )
        deployer.run()
    except DeploymentError as e:
        raise click.ClickException(str(e))


if __name__ == "__main__":
    cli()
