import logging

from .bytecode import CREATION_PREFIX_LENGTH, RUNTIME_PREFIX_LENGTH, BytecodeSignature, BytecodeSignatureStore

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("unbundle").getChild("identifier")

INIT_CODE_OFFSETS = (0, 20, 52, 84)
"""
Byte offsets where creation code may start inside init code:

* 0 -> raw creation code
* 20 -> 20 byte factory address + creation code
* 52 -> factory + 32 byte length + creation code
* 84 -> factory + 32 byte ABI offset + 32 byte length + creation code
"""

SEARCH_WINDOW_LENGTH = 8192
""" Leading bytes of init code searched for substring matches """


class ContractIdentifier:
    """
    Identifies which known contract a piece of init code deploys, by matching it against the bytecode signatures
    of the schema sources.

    Matching runs three passes and returns the first hit:

    1. Exact creation-code prefix match at each of the ``INIT_CODE_OFFSETS``
    2. Substring search for a short prefix within the first ``SEARCH_WINDOW_LENGTH`` bytes of the init code
    3. The same substring search within each offset-shifted slice

    Signatures are tried in registration order.  Two signatures matching the same init code are not detected; the
    first one wins.
    """

    store: BytecodeSignatureStore

    def __init__(self, store: BytecodeSignatureStore):
        self.store = store

    def identify(self, init_code: bytes) -> str | None:
        """
        Returns the name of the contract deployed by the init code, or None if no signature matches

        :param init_code: Raw creation code, optionally prefixed by a factory address and ABI encoding
        """
        if len(init_code) < RUNTIME_PREFIX_LENGTH:
            return None

        signatures = self.store.signatures()
        if not signatures:
            return None

        candidates = [init_code[offset:] for offset in INIT_CODE_OFFSETS if len(init_code) > offset]

        name = self._match_creation_prefix(candidates, signatures)
        if name:
            return name

        name = self._match_substring(init_code, signatures)
        if name:
            return name

        for creation_code in candidates:
            name = self._match_substring(creation_code, signatures)
            if name:
                return name

        return None

    @staticmethod
    def _match_creation_prefix(candidates: list[bytes], signatures: list[BytecodeSignature]) -> str | None:
        for creation_code in candidates:
            if len(creation_code) < CREATION_PREFIX_LENGTH:
                continue
            for signature in signatures:
                if signature.creation_prefix and creation_code.startswith(signature.creation_prefix):
                    logger.debug(f"Init code matched creation code of {signature.name}")
                    return signature.name
        return None

    @staticmethod
    def _match_substring(code: bytes, signatures: list[BytecodeSignature]) -> str | None:
        search_range = code[:SEARCH_WINDOW_LENGTH]
        for signature in signatures:
            for prefix in signature.search_prefixes:
                if prefix in search_range:
                    logger.debug(f"Init code contains bytecode prefix of {signature.name}")
                    return signature.name
        return None
