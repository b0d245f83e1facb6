import sys
from collections import OrderedDict
from pathlib import Path
from typing import Callable, Dict, Iterator, List, NamedTuple, Optional

from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from sequencer_deployment.constants import Contract
from sequencer_deployment.errors import DeploymentError, RegistryConflict, RegistryWriteError


class RegistryEntry(NamedTuple):
    """Represents a single line of a deployment registry."""

    contract: Contract
    address: ChecksumAddress

    def __str__(self) -> str:
        return f"{self.contract.env_var}={self.address}"


DeployProcedure = Callable[["ContractRegistry"], ChecksumAddress]


class ContractRegistry:
    """
    Addresses of contracts predeployed or deployed during the current run.

    An address is recorded at most once per contract, so resolving a contract
    deploys it only if it is not known yet; repeated resolutions return the
    recorded address. Not safe for concurrent use.
    """

    def __init__(self, predeployed: Optional[Dict[Contract, ChecksumAddress]] = None):
        self._addresses: Dict[Contract, ChecksumAddress] = OrderedDict()
        for contract, address in (predeployed or dict()).items():
            if address:
                self._record(contract, address)
        self._predeployed = frozenset(self._addresses)

    def __contains__(self, contract: Contract) -> bool:
        return contract in self._addresses

    def __len__(self) -> int:
        return len(self._addresses)

    def __iter__(self) -> Iterator[Contract]:
        return iter(self._addresses)

    def get(self, contract: Contract) -> Optional[ChecksumAddress]:
        return self._addresses.get(contract)

    @property
    def predeployed(self) -> frozenset:
        """Contracts whose addresses were supplied before the run."""
        return self._predeployed

    def _record(self, contract: Contract, address: str) -> ChecksumAddress:
        address = to_checksum_address(address)
        existing = self._addresses.get(contract)
        if existing is not None and existing != address:
            raise RegistryConflict(
                f"already recorded at {existing}, refusing to record {address}",
                contract=contract,
            )
        self._addresses[contract] = address
        return address

    def resolve(self, contract: Contract, deploy: DeployProcedure) -> ChecksumAddress:
        """
        Returns the address of a contract, calling `deploy` only if it is not yet known.

        The procedure is handed this registry so that it can resolve its own
        dependencies first. If it raises, nothing is recorded.
        """
        address = self._addresses.get(contract)
        if address is not None:
            print(
                f"Skipping deployment of {contract.name}, already deployed at {address}",
                file=sys.stderr,
            )
            return address

        print(f"\nDeploying {contract.name}...", file=sys.stderr)
        address = self._record(contract, deploy(self))
        print(f"(i) Deployed {contract.name} at {address}", file=sys.stderr)
        return address

    def resolve_by_transaction(self, contract: Contract, transaction) -> ChecksumAddress:
        """Resolves a contract whose deployment is a single transaction."""
        return self.resolve(contract, lambda registry: transaction.send())

    def entries(self) -> List[RegistryEntry]:
        """Returns the registry entries sorted by variable name."""
        entries = [RegistryEntry(contract, address) for contract, address in self._addresses.items()]
        entries.sort(key=lambda entry: entry.contract.env_var)
        return entries


def write_registry(entries: List[RegistryEntry], filepath: Optional[Path] = None) -> None:
    """
    Writes one NAME=ADDRESS line per entry, to `filepath` or to stdout.
    """
    # Sort registry entries to enforce common order
    entries = sorted(entries, key=lambda entry: entry.contract.env_var)
    lines = "".join(f"{entry}\n" for entry in entries)

    if filepath is None:
        sys.stdout.write(lines)
        sys.stdout.flush()
        return

    filepath = Path(filepath)
    try:
        # Create the parent directory if it does not exist
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, "w") as file:
            file.write(lines)
    except OSError as e:
        raise RegistryWriteError(
            f"unable to write registry to {filepath}: {e}", filepath=filepath
        ) from e
    print(f"(i) Registry written to {filepath}!", file=sys.stderr)


def read_registry(filepath: Path) -> Dict[Contract, ChecksumAddress]:
    """Reads addresses back from a registry written by `write_registry`."""
    addresses = OrderedDict()
    with open(filepath, "r") as file:
        for line_number, line in enumerate(file, start=1):
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            name, value = (part.strip() for part in line.split("=", 1))
            try:
                contract = Contract.from_env_var(name)
            except ValueError:
                continue  # not one of ours
            if not value:
                continue  # unset
            try:
                addresses[contract] = to_checksum_address(value)
            except ValueError as e:
                raise DeploymentError(
                    f"invalid address '{value}' at {filepath}:{line_number}", contract=contract
                ) from e
    return addresses
