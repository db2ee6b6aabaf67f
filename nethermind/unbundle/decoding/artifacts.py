import json
import logging
import os
from pathlib import Path
from typing import Any, Iterator, TypedDict

from eth_utils import decode_hex

from nethermind.unbundle.exceptions import SchemaSourceError

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("unbundle").getChild("artifacts")

ARTIFACTS_DIR_ENV = "UNBUNDLE_ARTIFACTS_DIR"
DEBUG_ARTIFACT_SUFFIX = ".dbg.json"


class BytecodeJson(TypedDict, total=False):
    """Compiled bytecode entry of an artifact"""

    object: str


class ArtifactJson(TypedDict, total=False):
    """Subset of a compiler artifact read by the decoder"""

    abi: list[dict[str, Any]]
    methodIdentifiers: dict[str, str]
    bytecode: BytecodeJson
    deployedBytecode: BytecodeJson


def get_artifacts_dir(artifacts_dir: str | Path | None = None) -> Path:
    """
    Resolves the schema-source directory.  An explicit directory wins, then the ``UNBUNDLE_ARTIFACTS_DIR``
    environment variable.  Otherwise the first existing candidate of ``<package>/artifacts`` and
    ``./artifacts`` is returned, falling back to ``./artifacts`` even if it does not exist.

    :param artifacts_dir: explicit directory
    :return: Path to the directory
    """
    if artifacts_dir:
        return Path(artifacts_dir)

    env_dir = os.environ.get(ARTIFACTS_DIR_ENV)
    if env_dir:
        return Path(env_dir)

    candidates = [
        Path(__file__).parent.parent / "artifacts",
        Path.cwd() / "artifacts",
    ]
    for candidate in candidates:
        if candidate.is_dir():
            return candidate

    return Path.cwd() / "artifacts"


def find_artifact_files(artifacts_dir: Path) -> list[Path]:
    """
    Recursively lists the JSON schema sources under a directory, excluding ``.dbg.json`` debug files.  Traversal
    order is deterministic: directory entries are visited in sorted order.

    :param artifacts_dir:
    :return: list of artifact paths.  Empty if the directory does not exist
    """
    if not artifacts_dir.is_dir():
        return []

    results = []
    for root, dirs, files in os.walk(artifacts_dir):
        dirs.sort()
        for file_name in sorted(files):
            if file_name.endswith(".json") and not file_name.endswith(DEBUG_ARTIFACT_SUFFIX):
                results.append(Path(root) / file_name)
    return results


def artifact_name(artifact_path: Path) -> str:
    """
    Returns the contract name for an artifact.  Hardhat & Foundry store artifacts as ``<Contract>.sol/<Contract>.json``,
    so the parent directory name is used with the ``.sol`` suffix removed, falling back to the file stem.

    >>> artifact_name(Path("artifacts/contracts/KAMI721C.sol/KAMI721C.json"))
    'KAMI721C'
    """
    parent_name = artifact_path.parent.name.removesuffix(".sol")
    return parent_name or artifact_path.stem


def load_artifact(artifact_path: Path) -> ArtifactJson:
    """
    Reads and parses an artifact JSON file

    :raises SchemaSourceError: if the file cannot be read or is not a JSON object
    """
    try:
        with open(artifact_path, "r", encoding="utf-8") as json_file:
            artifact = json.load(json_file)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SchemaSourceError(f"Could not read artifact {artifact_path}: {e}") from e

    if not isinstance(artifact, dict):
        raise SchemaSourceError(f"Artifact {artifact_path} is not a JSON object")

    return artifact  # type: ignore


def iter_artifacts(artifacts_dir: Path) -> Iterator[tuple[str, ArtifactJson]]:
    """
    Yields (name, artifact) pairs for every readable schema source in a directory.  Unreadable files are logged and
    skipped.
    """
    for artifact_path in find_artifact_files(artifacts_dir):
        try:
            artifact = load_artifact(artifact_path)
        except SchemaSourceError as e:
            logger.warning(f"Skipping schema source: {e}")
            continue

        yield artifact_name(artifact_path), artifact


def artifact_bytecode(artifact: ArtifactJson, key: str) -> bytes | None:
    """
    Returns the ``bytecode`` or ``deployedBytecode`` object of an artifact as bytes.  Returns None if the entry is
    missing, empty, or contains unlinked library placeholders.
    """
    entry = artifact.get(key)
    if not isinstance(entry, dict):
        return None

    hex_code = entry.get("object")
    if not hex_code or not isinstance(hex_code, str):
        return None

    try:
        return decode_hex(hex_code)
    except ValueError:
        logger.debug(f"Bytecode for {key} is not valid hex (unlinked libraries?).  Skipping")
        return None
