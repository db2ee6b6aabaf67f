import logging
import threading
from functools import cache
from pathlib import Path

from nethermind.unbundle.exceptions import SchemaSourceError

from .abis import FALLBACK_ABIS
from .artifacts import get_artifacts_dir, iter_artifacts
from .table import SchemaTable

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("unbundle").getChild("registry")


@cache
def _fallback_table() -> SchemaTable:
    table = SchemaTable()
    for abi_name, abi_data in FALLBACK_ABIS.items():
        table.add_abi(abi_name, abi_data)
    return table


class SchemaRegistry:
    """
    Builds the selector-keyed function table used for decoding.

    The **fallback table** is built from the ABIs embedded in the package and is always available.  The
    **merged table** is seeded with the fallback table, then extended with every function of every schema source
    found in the artifacts directory.  Selector collisions keep the first registered function, so fallback entries
    win over discovered ones, and discovered entries are ordered by directory traversal.

    The merged table is rebuilt on each request until a build contains more functions than the fallback table.
    That build is cached for the rest of the process.  A missing or empty artifacts directory is not an error: the
    merged table is then the fallback table.
    """

    artifacts_dir: Path
    """ Directory scanned for schema sources """

    _cached_table: SchemaTable | None
    _lock: threading.RLock

    def __init__(self, artifacts_dir: str | Path | None = None):
        self.artifacts_dir = get_artifacts_dir(artifacts_dir)
        self._cached_table = None
        self._lock = threading.RLock()

    @staticmethod
    def fallback_table() -> SchemaTable:
        """Returns a copy of the process-wide fallback table.  Changes to the copy do not affect later decodes"""
        return _fallback_table().copy()

    @staticmethod
    def fallback_function_count() -> int:
        """Number of functions in the fallback table"""
        return len(_fallback_table())

    def build_merged_table(self) -> SchemaTable:
        """Builds a fresh merged table.  Does not touch the cache"""
        table = self.fallback_table()

        for abi_name, artifact in iter_artifacts(self.artifacts_dir):
            abi_data = artifact.get("abi") or []
            if not isinstance(abi_data, list):
                logger.warning(f"Schema source {abi_name} has a malformed 'abi' entry.  Skipping")
                continue

            method_identifiers = artifact.get("methodIdentifiers") or {}
            try:
                added = table.add_abi(abi_name, abi_data, method_identifiers)
            except SchemaSourceError as e:
                logger.warning(f"Skipping schema source: {e}")
                continue
            logger.debug(f"Added {added} functions from schema source {abi_name}")

        return table

    def merged_table(self) -> SchemaTable:
        """
        Returns the merged table.  Returns the cached table if one exists, otherwise builds a new table and
        caches it if it improves on the fallback table.
        """
        with self._lock:
            if self._cached_table is not None:
                return self._cached_table

            table = self.build_merged_table()
            if len(table) > self.fallback_function_count():
                logger.info(f"Loaded {len(table)} functions from schema sources in {self.artifacts_dir}")
                self._cached_table = table
            else:
                logger.debug(f"No schema sources found in {self.artifacts_dir}.  Using fallback table")

            return table

    @property
    def is_cached(self) -> bool:
        """True once a merged table has been cached"""
        return self._cached_table is not None

    def reset(self):
        """Drops the cached merged table"""
        with self._lock:
            self._cached_table = None


_registries: dict[Path, SchemaRegistry] = {}
_registries_lock = threading.Lock()


def get_registry(artifacts_dir: str | Path | None = None) -> SchemaRegistry:
    """Returns the process-wide registry for an artifacts directory"""
    resolved = get_artifacts_dir(artifacts_dir)
    with _registries_lock:
        registry = _registries.get(resolved)
        if registry is None:
            registry = SchemaRegistry(resolved)
            _registries[resolved] = registry
        return registry


def reset_registries():
    """Drops every process-wide registry and its cached table.  Used by tests"""
    with _registries_lock:
        _registries.clear()


def verify_registry(table: SchemaTable, min_functions: int, required_names: list[str]) -> list[str]:
    """
    Checks that a table is large enough and contains a set of required function names.  Used to verify that schema
    sources were loaded.

    :param table: Function table to verify
    :param min_functions: Minimum number of functions expected
    :param required_names: Function names that must be present
    :return: List of problems.  Empty if verification passed
    """
    problems = []
    if len(table) < min_functions:
        problems.append(
            f"Expected at least {min_functions} functions in merged ABI, got {len(table)}. "
            f"Artifact loading may have failed."
        )

    names = table.function_names()
    for name in required_names:
        if name not in names:
            problems.append(f"Missing required function in merged ABI: {name}")

    return problems
