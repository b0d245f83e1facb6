from pathlib import Path
from typing import Optional

from sequencer_deployment.constants import Contract


class DeploymentError(Exception):
    """Base class for failures that abort a deployment run."""

    def __init__(self, message: str, contract: Optional[Contract] = None):
        super().__init__(message)
        self.message = message
        self.contract = contract

    def __str__(self) -> str:
        if self.contract is None:
            return self.message
        return f"{self.contract.name}: {self.message}"


class TransactionFailed(DeploymentError):
    """Raised when a deployment transaction cannot be broadcast or is reverted."""


class GenesisUnavailable(DeploymentError):
    """Raised when the light client genesis cannot be fetched or parsed."""


class LinkError(DeploymentError):
    """Raised when bytecode still references an unresolved library after linking."""

    def __init__(
        self, message: str, contract: Optional[Contract] = None, library: Optional[str] = None
    ):
        super().__init__(message, contract=contract)
        self.library = library


class InitializationError(DeploymentError):
    """Raised when an initialization call does not match the target contract ABI."""


class ArtifactNotFound(DeploymentError):
    """Raised when a build artifact is missing or malformed."""


class PredeployedContractMissing(DeploymentError):
    """Raised when a supplied address has no contract code."""


class RegistryConflict(DeploymentError):
    """Raised when a different address is recorded for an already recorded contract."""


class RegistryWriteError(DeploymentError):
    """Raised when the deployment registry cannot be written."""

    def __init__(self, message: str, filepath: Optional[Path] = None):
        super().__init__(message)
        self.filepath = filepath
