import sys
from typing import Any, Dict, NamedTuple, Optional, Tuple

import requests
from requests.exceptions import RequestException

from sequencer_deployment.constants import (
    GENESIS_REQUEST_TIMEOUT,
    LIGHT_CLIENT_GENESIS_ENDPOINT,
    Contract,
)
from sequencer_deployment.errors import GenesisUnavailable


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{value!r} is not an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        value = value.strip()
        if value.lower().startswith("0x"):
            return int(value, 16)
        return int(value)
    raise ValueError(f"{value!r} is not an integer")


class LightClientGenesis(NamedTuple):
    """Genesis LightClientState used to initialize the light client contract."""

    view_num: int
    block_height: int
    block_comm_root: int
    fee_ledger_comm: int
    stake_table_bls_key_comm: int
    stake_table_schnorr_key_comm: int
    stake_table_amount_comm: int
    threshold: int

    # LightClientState struct field names, in ABI order
    FIELDS = (
        "viewNum",
        "blockHeight",
        "blockCommRoot",
        "feeLedgerComm",
        "stakeTableBlsKeyComm",
        "stakeTableSchnorrKeyComm",
        "stakeTableAmountComm",
        "threshold",
    )

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "LightClientGenesis":
        if not isinstance(data, dict):
            raise GenesisUnavailable(
                "genesis response is not a JSON object", contract=Contract.LIGHT_CLIENT_PROXY
            )
        values = list()
        for field in cls.FIELDS:
            if field not in data:
                raise GenesisUnavailable(
                    f"genesis response is missing '{field}'", contract=Contract.LIGHT_CLIENT_PROXY
                )
            try:
                values.append(_to_int(data[field]))
            except ValueError as e:
                raise GenesisUnavailable(
                    f"genesis field '{field}' is invalid: {e}",
                    contract=Contract.LIGHT_CLIENT_PROXY,
                ) from e
        return cls(*values)

    def as_abi_tuple(self) -> Tuple[int, ...]:
        return tuple(self)


class GenesisProvider:
    """Fetches the light client genesis state from the HotShot orchestrator."""

    def __init__(self, orchestrator_url: str, timeout: int = GENESIS_REQUEST_TIMEOUT):
        self.orchestrator_url = orchestrator_url
        self.timeout = timeout
        self._genesis: Optional[LightClientGenesis] = None

    @property
    def endpoint(self) -> str:
        return f"{self.orchestrator_url.rstrip('/')}/{LIGHT_CLIENT_GENESIS_ENDPOINT}"

    def fetch(self) -> LightClientGenesis:
        """Returns the genesis state, requesting it from the orchestrator at most once."""
        if self._genesis is not None:
            return self._genesis

        print(f"Fetching light client genesis from {self.endpoint}...", file=sys.stderr)
        try:
            response = requests.get(self.endpoint, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except RequestException as e:
            raise GenesisUnavailable(
                f"unable to fetch light client genesis: {e}",
                contract=Contract.LIGHT_CLIENT_PROXY,
            ) from e

        self._genesis = LightClientGenesis.from_json(data)
        return self._genesis
