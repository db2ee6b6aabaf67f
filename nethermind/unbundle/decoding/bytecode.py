import logging
import threading
from dataclasses import dataclass
from pathlib import Path

from .artifacts import artifact_bytecode, get_artifacts_dir, iter_artifacts

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("unbundle").getChild("bytecode")

CREATION_PREFIX_LENGTH = 128
""" Bytes of creation code compared by exact prefix matching """

RUNTIME_PREFIX_LENGTH = 64
""" Bytes of runtime code searched for as a substring of init code """


@dataclass(frozen=True)
class BytecodeSignature:
    """Bytecode prefixes of a compiled contract, used to identify contracts from their creation code"""

    name: str
    creation_prefix: bytes | None = None
    runtime_prefix: bytes | None = None

    @property
    def search_prefixes(self) -> list[bytes]:
        """Short prefixes used for substring matching.  Runtime prefix first, then the creation code's"""
        prefixes = []
        if self.runtime_prefix:
            prefixes.append(self.runtime_prefix)
        if self.creation_prefix:
            prefixes.append(self.creation_prefix[:RUNTIME_PREFIX_LENGTH])
        return prefixes


def signature_from_bytecode(
    name: str, creation_code: bytes | None, runtime_code: bytes | None
) -> BytecodeSignature | None:
    """
    Builds a signature from creation and runtime code.  Creation code shorter than ``CREATION_PREFIX_LENGTH`` and
    runtime code shorter than ``RUNTIME_PREFIX_LENGTH`` are ignored.  Returns None if neither is usable.
    """
    creation_prefix = None
    if creation_code and len(creation_code) >= CREATION_PREFIX_LENGTH:
        creation_prefix = creation_code[:CREATION_PREFIX_LENGTH]

    runtime_prefix = None
    if runtime_code and len(runtime_code) >= RUNTIME_PREFIX_LENGTH:
        runtime_prefix = runtime_code[:RUNTIME_PREFIX_LENGTH]

    if creation_prefix is None and runtime_prefix is None:
        return None

    return BytecodeSignature(name=name, creation_prefix=creation_prefix, runtime_prefix=runtime_prefix)


class BytecodeSignatureStore:
    """
    Lazily loads bytecode signatures from every schema source in the artifacts directory that carries compiled
    bytecode.  Signatures are loaded on first use and kept for the lifetime of the store; schema sources are assumed
    not to change while the process runs.
    """

    artifacts_dir: Path

    _signatures: list[BytecodeSignature] | None
    _lock: threading.Lock

    def __init__(self, artifacts_dir: str | Path | None = None):
        self.artifacts_dir = get_artifacts_dir(artifacts_dir)
        self._signatures = None
        self._lock = threading.Lock()

    def signatures(self) -> list[BytecodeSignature]:
        """Returns the bytecode signatures, in schema-source traversal order"""
        with self._lock:
            if self._signatures is None:
                self._signatures = self._load_signatures()
            return self._signatures

    def _load_signatures(self) -> list[BytecodeSignature]:
        signatures = []
        for name, artifact in iter_artifacts(self.artifacts_dir):
            signature = signature_from_bytecode(
                name,
                artifact_bytecode(artifact, "bytecode"),
                artifact_bytecode(artifact, "deployedBytecode"),
            )
            if signature is not None:
                signatures.append(signature)

        logger.debug(f"Loaded {len(signatures)} bytecode signatures from {self.artifacts_dir}")
        return signatures

    def reset(self):
        """Drops the loaded signatures.  Used by tests"""
        with self._lock:
            self._signatures = None


_stores: dict[Path, BytecodeSignatureStore] = {}
_stores_lock = threading.Lock()


def get_signature_store(artifacts_dir: str | Path | None = None) -> BytecodeSignatureStore:
    """Returns the process-wide signature store for an artifacts directory"""
    resolved = get_artifacts_dir(artifacts_dir)
    with _stores_lock:
        store = _stores.get(resolved)
        if store is None:
            store = BytecodeSignatureStore(resolved)
            _stores[resolved] = store
        return store


def reset_signature_stores():
    """Drops every process-wide signature store.  Used by tests"""
    with _stores_lock:
        _stores.clear()
