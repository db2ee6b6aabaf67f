from pathlib import Path

import pytest

from nethermind.unbundle.decoding import reset_registries, reset_signature_stores
from nethermind.unbundle.decoding.artifacts import ARTIFACTS_DIR_ENV
from tests.utils import CREATION_CODE, KAMI_ABI, RUNTIME_CODE, write_artifact


@pytest.fixture(autouse=True)
def reset_process_caches(monkeypatch):
    monkeypatch.delenv(ARTIFACTS_DIR_ENV, raising=False)
    reset_registries()
    reset_signature_stores()
    yield
    reset_registries()
    reset_signature_stores()


@pytest.fixture(name="empty_artifacts_dir")
def fixture_empty_artifacts_dir(tmp_path) -> Path:
    artifacts_dir = tmp_path / "artifacts"
    artifacts_dir.mkdir()
    return artifacts_dir


@pytest.fixture(name="artifacts_dir")
def fixture_artifacts_dir(tmp_path) -> Path:
    artifacts_dir = tmp_path / "artifacts"
    write_artifact(artifacts_dir, "KAMI721C", KAMI_ABI, bytecode=CREATION_CODE, deployed_bytecode=RUNTIME_CODE)
    return artifacts_dir
