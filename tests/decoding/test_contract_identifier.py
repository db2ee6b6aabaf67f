from nethermind.unbundle.decoding import (
    BytecodeSignatureStore,
    ContractIdentifier,
    get_signature_store,
)
from nethermind.unbundle.decoding.bytecode import signature_from_bytecode
from tests.utils import CREATION_CODE, RUNTIME_CODE, make_address, write_artifact

FACTORY = bytes.fromhex(make_address(0xFAC7)[2:])


def test_signature_from_bytecode():
    signature = signature_from_bytecode("KAMI721C", CREATION_CODE, RUNTIME_CODE)
    assert signature.creation_prefix == CREATION_CODE[:128]
    assert signature.runtime_prefix == RUNTIME_CODE[:64]
    assert signature.search_prefixes == [RUNTIME_CODE[:64], CREATION_CODE[:64]]

    assert signature_from_bytecode("Short", CREATION_CODE[:100], None) is None
    assert signature_from_bytecode("RuntimeOnly", None, RUNTIME_CODE).creation_prefix is None


def test_signatures_loaded_from_artifacts(artifacts_dir):
    write_artifact(artifacts_dir, "Interface", [])
    signatures = BytecodeSignatureStore(artifacts_dir).signatures()

    assert [signature.name for signature in signatures] == ["KAMI721C"]


def test_short_init_code_not_identified(artifacts_dir):
    identifier = ContractIdentifier(get_signature_store(artifacts_dir))

    assert identifier.identify(CREATION_CODE[:63]) is None
    assert identifier.identify(b"") is None


def test_identify_raw_creation_code(artifacts_dir):
    identifier = ContractIdentifier(get_signature_store(artifacts_dir))
    assert identifier.identify(CREATION_CODE) == "KAMI721C"


def test_identify_factory_prefixed_init_code(artifacts_dir):
    identifier = ContractIdentifier(get_signature_store(artifacts_dir))

    assert identifier.identify(FACTORY + CREATION_CODE) == "KAMI721C"
    assert identifier.identify(FACTORY + bytes(32) + CREATION_CODE) == "KAMI721C"
    assert identifier.identify(FACTORY + bytes(64) + CREATION_CODE) == "KAMI721C"


def test_identify_by_runtime_substring(artifacts_dir):
    identifier = ContractIdentifier(get_signature_store(artifacts_dir))

    init_code = b"\xff" * 37 + RUNTIME_CODE[:64] + bytes(100)
    assert identifier.identify(init_code) == "KAMI721C"


def test_substring_outside_search_window(artifacts_dir):
    identifier = ContractIdentifier(get_signature_store(artifacts_dir))

    init_code = b"\xff" * 8300 + RUNTIME_CODE[:64]
    assert identifier.identify(init_code) is None


def test_unknown_init_code(artifacts_dir):
    identifier = ContractIdentifier(get_signature_store(artifacts_dir))
    assert identifier.identify(bytes(500)) is None


def test_no_signatures(empty_artifacts_dir):
    identifier = ContractIdentifier(get_signature_store(empty_artifacts_dir))
    assert identifier.identify(CREATION_CODE) is None


def test_first_signature_wins(artifacts_dir):
    write_artifact(artifacts_dir, "ZCopy", [], bytecode=CREATION_CODE)
    identifier = ContractIdentifier(BytecodeSignatureStore(artifacts_dir))

    assert identifier.identify(CREATION_CODE) == "KAMI721C"
