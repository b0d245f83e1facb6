import sys
from collections import OrderedDict
from typing import Any, Dict, List, Optional, Sequence

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address
from hexbytes import HexBytes
from requests.exceptions import RequestException
from web3 import Web3
from web3.exceptions import Web3Exception

from sequencer_deployment.artifacts import ArtifactStore
from sequencer_deployment.confirm import confirm_transaction
from sequencer_deployment.constants import DERIVATION_PATH, RECEIPT_TIMEOUT, Contract
from sequencer_deployment.errors import TransactionFailed
from sequencer_deployment.linker import link

NETWORK_ERRORS = (Web3Exception, RequestException)


def _constructor_params(abi: List[Dict[str, Any]], args: Sequence[Any]) -> OrderedDict:
    """Pairs constructor arguments with their ABI names, for display."""
    inputs = list()
    for entry in abi:
        if entry.get("type") == "constructor":
            inputs = entry.get("inputs", [])
            break
    params = OrderedDict()
    for position, value in enumerate(args):
        name = inputs[position].get("name") if position < len(inputs) else None
        if isinstance(value, bytes):
            value = HexBytes(value).to_0x_hex()
        params[name or f"arg{position}"] = value
    return params


class L1Client:
    """
    Represents a local signing account plus a web3 connection to the L1,
    with annotated deployment execution.
    """

    def __init__(
        self,
        w3: Web3,
        account: LocalAccount,
        autosign: bool = True,
        receipt_timeout: int = RECEIPT_TIMEOUT,
    ):
        self.w3 = w3
        self.account = account
        self.receipt_timeout = receipt_timeout
        if not autosign:
            print("(i) Interactive mode: each deployment must be confirmed.", file=sys.stderr)
        self._autosign = autosign
        self._chain_id: Optional[int] = None

    @classmethod
    def from_mnemonic(
        cls, rpc_url: str, mnemonic: str, account_index: int = 0, *args, **kwargs
    ) -> "L1Client":
        Account.enable_unaudited_hdwallet_features()
        account = Account.from_mnemonic(
            mnemonic, account_path=DERIVATION_PATH.format(account_index)
        )
        w3 = Web3(Web3.HTTPProvider(rpc_url))
        return cls(w3, account, *args, **kwargs)

    @property
    def address(self) -> ChecksumAddress:
        return self.account.address

    @property
    def chain_id(self) -> int:
        if self._chain_id is None:
            try:
                self._chain_id = self.w3.eth.chain_id
            except NETWORK_ERRORS as e:
                raise TransactionFailed(f"unable to query chain id: {e}") from e
        return self._chain_id

    def get_code(self, address: ChecksumAddress) -> bytes:
        try:
            return bytes(self.w3.eth.get_code(address))
        except NETWORK_ERRORS as e:
            raise TransactionFailed(f"unable to query code at {address}: {e}") from e

    def deploy(
        self, contract: Contract, abi: List[Dict[str, Any]], bytecode: bytes, *args
    ) -> ChecksumAddress:
        """
        Signs and broadcasts a contract creation transaction and waits for its receipt.
        Returns the address of the deployed contract.
        """
        print(
            f"\nTransacting {contract.artifact_name} creation from {self.address}",
            file=sys.stderr,
        )
        if not self._autosign:
            confirm_transaction(contract.artifact_name, _constructor_params(abi, args))

        factory = self.w3.eth.contract(abi=abi, bytecode=bytecode)
        try:
            transaction = factory.constructor(*args).build_transaction(
                {
                    "from": self.address,
                    "nonce": self.w3.eth.get_transaction_count(self.address, "pending"),
                    "chainId": self.chain_id,
                }
            )
            signed = self.account.sign_transaction(transaction)
            tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
            print(f"(i) Sent transaction {HexBytes(tx_hash).to_0x_hex()}", file=sys.stderr)
            receipt = self.w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.receipt_timeout
            )
        except NETWORK_ERRORS as e:
            raise TransactionFailed(f"deployment transaction failed: {e}", contract=contract) from e

        if receipt["status"] != 1:
            raise TransactionFailed(
                f"deployment transaction {HexBytes(tx_hash).to_0x_hex()} reverted",
                contract=contract,
            )
        contract_address = receipt.get("contractAddress")
        if not contract_address:
            raise TransactionFailed(
                "deployment receipt has no contract address", contract=contract
            )
        return to_checksum_address(contract_address)

    def deploy_bytecode(self, contract: Contract, bytecode: bytes) -> ChecksumAddress:
        """Deploys raw bytecode without a constructor call."""
        return self.deploy(contract, [], bytecode)


class DeploymentTransaction:
    """
    A deferred contract creation transaction for a contract without dependencies.
    The artifact is only loaded when the transaction is sent.
    """

    def __init__(self, client: L1Client, artifacts: ArtifactStore, contract: Contract, *args):
        self.client = client
        self.artifacts = artifacts
        self.contract = contract
        self.args = args

    def send(self) -> ChecksumAddress:
        artifact = self.artifacts.get(self.contract)
        bytecode = link(artifact.bytecode, libraries=dict())
        return self.client.deploy(self.contract, artifact.abi, bytecode, *self.args)
