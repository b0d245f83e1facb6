from pathlib import Path

import click

from sequencer_deployment.constants import (
    ARTIFACTS_DIR,
    DEFAULT_MNEMONIC,
    DEFAULT_ORCHESTRATOR_URL,
    DEFAULT_RPC_URL,
    Contract,
)
from sequencer_deployment.types import AccountIndex, ChecksumAddress

rpc_url_option = click.option(
    "--rpc-url",
    "-r",
    help="A JSON-RPC endpoint for the L1 to deploy to.",
    envvar="ESPRESSO_SEQUENCER_L1_PROVIDER",
    default=DEFAULT_RPC_URL,
    show_default=True,
)

orchestrator_url_option = click.option(
    "--orchestrator-url",
    help="URL of the HotShot orchestrator; used to get the light client genesis stake table.",
    envvar="ESPRESSO_SEQUENCER_ORCHESTRATOR_URL",
    default=DEFAULT_ORCHESTRATOR_URL,
    show_default=True,
)

mnemonic_option = click.option(
    "--mnemonic",
    help="Mnemonic for the L1 wallet used to deploy; the selected account must be funded.",
    envvar="ESPRESSO_SEQUENCER_ETH_MNEMONIC",
    default=DEFAULT_MNEMONIC,
    show_default=False,
)

account_index_option = click.option(
    "--account-index",
    help="Account index in the wallet generated by the mnemonic.",
    envvar="ESPRESSO_DEPLOYER_ACCOUNT_INDEX",
    type=AccountIndex(),
    default=0,
    show_default=True,
)

out_option = click.option(
    "--out",
    "-o",
    help="Write deployment results to this file; stdout if not provided.",
    envvar="ESPRESSO_DEPLOYER_OUT_PATH",
    type=click.Path(dir_okay=False, path_type=Path),
    required=False,
)

artifacts_dir_option = click.option(
    "--artifacts-dir",
    help="Forge build output directory holding <Name>.sol/<Name>.json artifacts.",
    envvar="ESPRESSO_DEPLOYER_ARTIFACTS_DIR",
    type=click.Path(file_okay=False, path_type=Path),
    default=ARTIFACTS_DIR,
    show_default=True,
)

registry_filepath_option = click.option(
    "--registry-filepath",
    "-f",
    help="Output of a previous run; its addresses are used instead of deploying again.",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    required=False,
)


def predeployed_option(flag: str, contract: Contract):
    """Option for the address of an already deployed contract."""
    return click.option(
        flag,
        contract.name.lower(),
        help=f"Use an already-deployed {contract.artifact_name} instead of deploying a new one.",
        envvar=contract.env_var,
        type=ChecksumAddress(),
        required=False,
    )


hotshot_option = predeployed_option("--hotshot", Contract.HOTSHOT)
plonk_verifier_option = predeployed_option("--plonk-verifier", Contract.PLONK_VERIFIER)
light_client_state_update_vk_option = predeployed_option(
    "--light-client-state-update-vk", Contract.LIGHT_CLIENT_STATE_UPDATE_VK
)
light_client_option = predeployed_option("--light-client", Contract.LIGHT_CLIENT)
light_client_proxy_option = predeployed_option("--light-client-proxy", Contract.LIGHT_CLIENT_PROXY)
