import logging

from nethermind.unbundle.exceptions import DecodingError
from nethermind.unbundle.types.decoding import CallShape, DecodedCall, DecodeFailure, FailureReason

from .identifier import ContractIdentifier
from .table import SchemaTable
from .utils import format_arg

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("unbundle").getChild("decoding")


def _selector_hex(payload: bytes) -> str:
    return "0x" + payload[:4].hex()


class CallDecoder:
    """
    Decodes call payloads against a function table.  Never raises on bad input: every decode returns either a
    :class:`DecodedCall` or a :class:`DecodeFailure`.

    If the decoded function is ``deploy``, the first argument is treated as init code and passed to the contract
    identifier, and the identified contract name is attached to the result.
    """

    identifier: ContractIdentifier | None

    def __init__(self, identifier: ContractIdentifier | None = None):
        self.identifier = identifier

    def decode(self, table: SchemaTable, payload: bytes, target: str = "") -> DecodedCall | DecodeFailure:
        """
        Decodes a call payload.

        :param table: Function table to look the selector up in
        :param payload: Calldata, including the 4 byte selector
        :param target: Address the payload is sent to
        """
        descriptor = table.get(payload[:4]) if len(payload) >= 4 else None
        if descriptor is None:
            return DecodeFailure(
                reason=FailureReason.unknown_selector,
                selector=_selector_hex(payload),
                byte_length=len(payload),
                message=f"Function with selector {_selector_hex(payload)} not found in table",
            )

        try:
            raw_args = descriptor.decode(payload)
        except DecodingError as e:
            logger.debug(f"Error Decoding {descriptor.function_signature} sent to {target}: {e}")
            return DecodeFailure(
                reason=FailureReason.malformed_payload,
                selector=descriptor.selector_hex,
                byte_length=len(payload),
                message=str(e),
            )

        decoded = DecodedCall(
            function_name=descriptor.name,
            target=target,
            args={name: format_arg(value) for name, value in raw_args.items()},
            abi_name=descriptor.abi_name,
            raw_args=raw_args,
        )

        if decoded.shape == CallShape.deploy and self.identifier is not None:
            init_code = next(iter(raw_args.values()), None)
            if isinstance(init_code, bytes):
                decoded.contract_kind = self.identifier.identify(init_code)

        return decoded
