import json
from pathlib import Path
from typing import Any, Dict, List, NamedTuple

from sequencer_deployment.constants import ARTIFACTS_DIR, Contract
from sequencer_deployment.errors import ArtifactNotFound
from sequencer_deployment.linker import UnlinkedBytecode


class ContractArtifact(NamedTuple):
    """ABI and compiler output for a single contract."""

    contract: Contract
    abi: List[Dict[str, Any]]
    bytecode: UnlinkedBytecode


def _load_json(filepath: Path) -> dict:
    """Loads a JSON file."""
    with open(filepath, "r") as file:
        return json.load(file)


def _parse_bytecode(contract: Contract, raw: Any) -> UnlinkedBytecode:
    # forge emits {"object": ..., "linkReferences": ...}, other toolchains a plain string
    if isinstance(raw, str):
        return UnlinkedBytecode(object=raw, contract=contract)
    if isinstance(raw, dict) and isinstance(raw.get("object"), str):
        return UnlinkedBytecode(
            object=raw["object"],
            link_references=raw.get("linkReferences") or dict(),
            contract=contract,
        )
    raise ArtifactNotFound("malformed build artifact: no bytecode object", contract=contract)


class ArtifactStore:
    """Loads forge build artifacts from <artifacts_dir>/<Name>.sol/<Name>.json."""

    def __init__(self, artifacts_dir: Path = ARTIFACTS_DIR):
        self.artifacts_dir = Path(artifacts_dir)
        self._artifacts: Dict[Contract, ContractArtifact] = dict()

    def filepath(self, contract: Contract) -> Path:
        name = contract.artifact_name
        return self.artifacts_dir / f"{name}.sol" / f"{name}.json"

    def get(self, contract: Contract) -> ContractArtifact:
        if contract in self._artifacts:
            return self._artifacts[contract]

        filepath = self.filepath(contract)
        if not filepath.exists():
            raise ArtifactNotFound(
                f"no build artifact at {filepath}; were the contracts compiled?",
                contract=contract,
            )
        try:
            data = _load_json(filepath)
        except (OSError, ValueError) as e:
            raise ArtifactNotFound(
                f"malformed build artifact at {filepath}: {e}", contract=contract
            ) from e
        if not isinstance(data, dict) or "abi" not in data or "bytecode" not in data:
            raise ArtifactNotFound(f"malformed build artifact at {filepath}", contract=contract)

        artifact = ContractArtifact(
            contract=contract,
            abi=data["abi"],
            bytecode=_parse_bytecode(contract, data["bytecode"]),
        )
        self._artifacts[contract] = artifact
        return artifact
