import re
from typing import Dict, List, NamedTuple, Optional

from eth_typing import ChecksumAddress
from eth_utils import keccak, remove_0x_prefix, to_normalized_address
from hexbytes import HexBytes

from sequencer_deployment.constants import Contract
from sequencer_deployment.errors import LinkError

PLACEHOLDER_PATTERN = re.compile(r"__\$[0-9a-fA-F]{34}\$__")

LinkReferences = Dict[str, Dict[str, List[Dict[str, int]]]]


def library_placeholder(fully_qualified_name: str) -> str:
    """Returns the solc placeholder for a library, e.g. __$<17 byte keccak prefix>$__."""
    digest = keccak(text=fully_qualified_name).hex()
    return f"__${digest[:34]}$__"


class UnlinkedBytecode(NamedTuple):
    """Contract bytecode as emitted by the compiler, possibly with library placeholders."""

    object: str
    link_references: Optional[LinkReferences] = None
    contract: Optional[Contract] = None

    def libraries(self) -> List[str]:
        """Returns the fully qualified names of the libraries this bytecode expects."""
        names = list()
        for source, libraries in (self.link_references or {}).items():
            for library in libraries:
                names.append(f"{source}:{library}")
        return names

    def is_unlinked(self) -> bool:
        return PLACEHOLDER_PATTERN.search(self.object) is not None


def _expected_library(placeholder: str, bytecode: UnlinkedBytecode) -> str:
    for name in bytecode.libraries():
        if library_placeholder(name) == placeholder:
            return name
    return placeholder


def link(bytecode: UnlinkedBytecode, libraries: Dict[str, ChecksumAddress]) -> HexBytes:
    """
    Substitutes library placeholders with the given addresses and
    returns deployable bytecode. Fails if any placeholder remains.
    """
    code = remove_0x_prefix(bytecode.object)
    for name, address in libraries.items():
        code = code.replace(
            library_placeholder(name), remove_0x_prefix(to_normalized_address(address))
        )

    unresolved = PLACEHOLDER_PATTERN.findall(code)
    if unresolved:
        expected = _expected_library(unresolved[0], bytecode)
        raise LinkError(
            f"unresolved library {expected} "
            f"({len(set(unresolved))} unresolved reference(s) after linking)",
            contract=bytecode.contract,
            library=expected,
        )

    try:
        return HexBytes("0x" + code)
    except ValueError as e:
        raise LinkError("bytecode is not valid hex after linking", contract=bytecode.contract) from e
