from unittest.mock import MagicMock

import pytest
import requests

from sequencer_deployment import genesis
from sequencer_deployment.constants import Contract
from sequencer_deployment.errors import GenesisUnavailable
from sequencer_deployment.genesis import GenesisProvider, LightClientGenesis

GENESIS_JSON = {
    "viewNum": 0,
    "blockHeight": "0",
    "blockCommRoot": "0x0",
    "feeLedgerComm": 0,
    "stakeTableBlsKeyComm": "0x1234",
    "stakeTableSchnorrKeyComm": "22136",
    "stakeTableAmountComm": 39612,
    "threshold": "0x7",
}


def _response(payload=None, status_error=None):
    response = MagicMock()
    response.json.return_value = payload
    if status_error:
        response.raise_for_status.side_effect = status_error
    return response


def test_from_json():
    state = LightClientGenesis.from_json(GENESIS_JSON)
    assert state == LightClientGenesis(0, 0, 0, 0, 0x1234, 22136, 39612, 7)
    assert state.as_abi_tuple() == (0, 0, 0, 0, 0x1234, 22136, 39612, 7)


def test_from_json_missing_field():
    data = dict(GENESIS_JSON)
    del data["threshold"]
    with pytest.raises(GenesisUnavailable) as error:
        LightClientGenesis.from_json(data)
    assert "threshold" in str(error.value)
    assert error.value.contract == Contract.LIGHT_CLIENT_PROXY


def test_from_json_invalid_value():
    with pytest.raises(GenesisUnavailable):
        LightClientGenesis.from_json(dict(GENESIS_JSON, viewNum="zero"))
    with pytest.raises(GenesisUnavailable):
        LightClientGenesis.from_json(dict(GENESIS_JSON, viewNum=True))
    with pytest.raises(GenesisUnavailable):
        LightClientGenesis.from_json([1, 2, 3])


def test_fetch_once(monkeypatch):
    get = MagicMock(return_value=_response(GENESIS_JSON))
    monkeypatch.setattr(genesis.requests, "get", get)

    provider = GenesisProvider("http://orchestrator:40001/", timeout=5)
    first = provider.fetch()
    second = provider.fetch()

    assert first is second
    get.assert_called_once_with("http://orchestrator:40001/api/light_client_genesis", timeout=5)


def test_fetch_http_error(monkeypatch):
    error = requests.exceptions.HTTPError("503 Server Error")
    monkeypatch.setattr(genesis.requests, "get", MagicMock(return_value=_response(status_error=error)))

    with pytest.raises(GenesisUnavailable) as raised:
        GenesisProvider("http://orchestrator:40001").fetch()
    assert raised.value.__cause__ is error


def test_fetch_connection_error(monkeypatch):
    monkeypatch.setattr(
        genesis.requests,
        "get",
        MagicMock(side_effect=requests.exceptions.ConnectionError("refused")),
    )
    with pytest.raises(GenesisUnavailable):
        GenesisProvider("http://orchestrator:40001").fetch()
