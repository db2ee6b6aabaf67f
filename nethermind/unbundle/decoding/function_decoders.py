import logging
from dataclasses import dataclass, field
from typing import Any

from eth_typing import ABIFunction
from eth_utils.abi import function_signature_to_4byte_selector

from .utils import abi_to_signature, collapse_if_tuple, decode_evm_abi_from_types, name_decoded_value

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("unbundle").getChild("decoding")


@dataclass(frozen=True)
class FunctionDescriptor:
    """
    Represents a single EVM function selector.  Parses input types once so that calldata sent to the selector
    can be decoded into a named argument map.  Immutable once constructed.
    """

    name: str
    inputs: tuple[dict[str, Any], ...]
    selector: bytes
    function_signature: str
    abi_name: str = ""
    kind: str = "function"

    _input_types: list[str] = field(default_factory=list, repr=False, compare=False)
    _input_names: list[str] = field(default_factory=list, repr=False, compare=False)

    @classmethod
    def from_abi(
        cls,
        abi_function: ABIFunction | dict[str, Any],
        abi_name: str = "",
        selector: bytes | None = None,
    ) -> "FunctionDescriptor":
        """
        Builds a descriptor from an ABI function item.

        :param abi_function: ABI item with ``name`` and ``inputs``
        :param abi_name: Name of the schema source the function was loaded from
        :param selector: Explicit selector.  If None, the selector is computed from the canonical signature
        """
        inputs = tuple(dict(param) for param in abi_function.get("inputs", []))
        signature = abi_to_signature(abi_function)

        return cls(
            name=abi_function["name"],
            inputs=inputs,
            selector=selector if selector is not None else function_signature_to_4byte_selector(signature),
            function_signature=signature,
            abi_name=abi_name,
            _input_types=[collapse_if_tuple(param) for param in inputs],
            _input_names=[param.get("name") or f"arg{index}" for index, param in enumerate(inputs)],
        )

    @property
    def selector_hex(self) -> str:
        """0x prefixed selector"""
        return "0x" + self.selector.hex()

    @property
    def input_names(self) -> list[str]:
        """Parameter names, with positional placeholders for unnamed parameters"""
        return list(self._input_names)

    def decode(self, calldata: bytes) -> dict[str, Any]:
        """
        Decodes the arguments of a call to this function.

        :param calldata: Calldata bytes, including the 4 byte selector
        :return: Mapping of parameter name to decoded value.  Tuples are converted into dicts
        :raises DecodingError: if the argument bytes do not match the parameter types
        """
        decoded = decode_evm_abi_from_types(self._input_types, calldata[4:])

        return {
            name: name_decoded_value(value, param)
            for name, value, param in zip(self._input_names, decoded, self.inputs, strict=True)
        }

    def id_str(self, full_signature: bool = True) -> str:
        """
        Returns ID string for function.  If full_signature is True, returns the function name & parameter types.
        If full_signature is false, returns function name
        """
        if full_signature:
            return self.function_signature
        return self.name
