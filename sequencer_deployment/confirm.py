import sys
from collections import OrderedDict

from eth_utils import is_address, is_same_address
from web3.constants import ADDRESS_ZERO


def _ask(question: str) -> None:
    """Asks the user a yes/no question; exits on no."""
    print(f"{question} Y/N? ", end="", file=sys.stderr, flush=True)
    answer = input()
    if answer.lower().strip() == "n":
        print("Aborting deployment!", file=sys.stderr)
        exit(-1)


def _is_zero_address(value) -> bool:
    return is_address(value) and is_same_address(value, ADDRESS_ZERO)


def confirm_start() -> None:
    """Asks the user to confirm the start of the deployment."""
    _ask("Continue")


def confirm_transaction(contract_name: str, constructor_params: OrderedDict) -> None:
    """Asks the user to confirm a contract creation transaction before it is broadcast."""
    if len(constructor_params) == 0:
        print(f"(i) No constructor parameters for {contract_name}", file=sys.stderr)
    else:
        print(f"Constructor parameters for {contract_name}", file=sys.stderr)
        for name, value in constructor_params.items():
            print(f"\t{name}={value}", file=sys.stderr)

    _ask(f"Deploy {contract_name}")
    if any(_is_zero_address(value) for value in constructor_params.values()):
        _ask("Zero Address detected for deployment parameter; Continue?")
