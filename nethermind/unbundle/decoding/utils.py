import logging
import traceback
from typing import Any, Sequence

from eth_abi import decode as eth_abi_decode
from eth_abi.exceptions import InsufficientDataBytes, NonEmptyPaddingBytes
from eth_typing import ABIComponent, ABIElement, ABIFunction
from eth_utils import to_checksum_address
from eth_utils.abi import function_signature_to_4byte_selector

from nethermind.unbundle.exceptions import DecodingError

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("unbundle").getChild("decoding")

MAX_FORMAT_DEPTH = 32
""" Nesting depth after which decoded values are rendered as '...' """

MAX_INLINE_HEX_LENGTH = 74
""" Hex strings longer than this (0x + 36 bytes) are truncated for display """


def collapse_if_tuple(abi_params: ABIComponent | dict[str, Any]) -> str:
    """
    Converts a tuple from a dict to a parenthesized list of its types.  Nested tuples are expanded
    recursively, and array dimensions after ``tuple`` are preserved.

    >>> collapse_if_tuple(
    ...     {
    ...         'components': [
    ...             {'name': 'receiver', 'type': 'address'},
    ...             {'name': 'feeNumerator', 'type': 'uint96'},
    ...         ],
    ...         'type': 'tuple[]',
    ...     }
    ... )
    '(address,uint96)[]'
    """

    typ = abi_params["type"]
    if not isinstance(typ, str):
        raise TypeError(f"The 'type' must be a string, but got {typ} of type {type(typ)}")

    if not typ.startswith("tuple"):
        return typ

    delimited = ",".join(collapse_if_tuple(c) for c in abi_params.get("components", []))  # type: ignore
    # Whatever comes after "tuple" is the array dims.  The ABI spec states that
    # this will have the form "", "[]", or "[k]".
    array_dim = typ[5:]
    return f"({delimited}){array_dim}"


def function_signature(name: str, params: Sequence[ABIComponent | dict[str, Any]]) -> str:
    """
    Returns the canonical type signature of a function

    >>> function_signature("transfer", [{"name": "to", "type": "address"}, {"name": "amount", "type": "uint256"}])
    'transfer(address,uint256)'
    """
    return f"{name}({','.join(collapse_if_tuple(param) for param in params)})"


def function_selector(name: str, params: Sequence[ABIComponent | dict[str, Any]]) -> bytes:
    """Returns the 4 byte selector of a function: the first 4 bytes of the keccak hash of its signature"""
    return function_signature_to_4byte_selector(function_signature(name, params))


def abi_to_signature(abi: ABIFunction | dict[str, Any]) -> str:
    """
    Converts ABI to signature.

    >>> abi_to_signature({"name": "transferFrom", "type": "function", "inputs": [
    ...     {"name": "from", "type": "address"},
    ...     {"name": "to", "type": "address"},
    ...     {"name": "amount", "type": "uint256"},
    ... ]})
    'transferFrom(address,address,uint256)'

    """
    return function_signature(abi["name"], abi.get("inputs", []))


def signature_to_name(function_sig: str) -> str:
    """
    Removes types from function signature

    >>> signature_to_name("swap(address,address,uint256,uint256,int128)")
    'swap'
    """
    index = function_sig.find("(")
    if index != -1:
        return function_sig[:index]
    return function_sig


def filter_functions(contract_abi: Sequence[ABIElement | dict[str, Any]]) -> list[ABIFunction]:
    """Filters out all non-function ABI items, and function items without a name"""
    return [abi for abi in contract_abi if abi.get("type") == "function" and abi.get("name")]  # type: ignore


def decode_evm_abi_from_types(types: list[str], data: bytes | bytearray) -> tuple[Any, ...]:
    """
    Decodes ABI data from types and data bytes.  Codec errors are logged and re-raised as DecodingError, with
    the codec message preserved.

    :param types:
    :param data:
    :return:
    """
    try:
        return eth_abi_decode(types, data)
    except InsufficientDataBytes as e:
        logger.debug(f"Insufficient data bytes while decoding {data.hex()} for types {types}")
        raise DecodingError(str(e)) from e
    except NonEmptyPaddingBytes as e:
        logger.debug(f"Non-empty padding bytes while decoding {data.hex()} for types {types}")
        raise DecodingError(str(e)) from e
    except OverflowError as e:
        logger.debug(f"Overflow error while decoding {data.hex()} for types {types}")
        raise DecodingError(str(e)) from e
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.debug(
            f"Unknown error while decoding {data.hex()} for types {types}: "
            f"{traceback.format_exception(type(e), e, e.__traceback__)}"
        )
        raise DecodingError(str(e) or e.__class__.__name__) from e


def name_decoded_value(value: Any, param: ABIComponent | dict[str, Any]) -> Any:
    """
    Walks a decoded value alongside its ABI parameter.  Tuples become dicts keyed by component name, arrays
    become lists, and addresses are checksummed.
    """
    typ: str = param["type"]

    if typ.endswith("]"):
        element_param = dict(param, type=typ[: typ.rfind("[")])
        return [name_decoded_value(element, element_param) for element in value]

    if typ == "tuple":
        components = param.get("components", [])
        return {
            component.get("name") or f"arg{index}": name_decoded_value(element, component)
            for index, (element, component) in enumerate(zip(value, components, strict=True))
        }

    if typ == "address":
        return to_checksum_address(value)

    return value


def format_arg(value: Any, depth: int = 0) -> str:
    """
    Renders a decoded argument as a display string.  Sequences and records are formatted recursively, and long
    byte strings are truncated.

    >>> format_arg([1, {"receiver": "0xabc", "flag": True}])
    '[1, {receiver: 0xabc, flag: true}]'
    >>> format_arg(bytes(100))
    '0x0000000000...0000 (100 bytes)'
    """
    if depth > MAX_FORMAT_DEPTH:
        return "..."

    match value:
        case None:
            return "null"
        case bool():
            return "true" if value else "false"
        case int():
            return str(value)
        case bytes() | bytearray():
            return format_arg("0x" + bytes(value).hex(), depth)
        case str() if value.startswith("0x"):
            if len(value) > MAX_INLINE_HEX_LENGTH:
                return f"{value[:12]}...{value[-4:]} ({(len(value) - 2) // 2} bytes)"
            return value
        case dict():
            return "{" + ", ".join(f"{k}: {format_arg(v, depth + 1)}" for k, v in value.items()) + "}"
        case list() | tuple():
            return "[" + ", ".join(format_arg(v, depth + 1) for v in value) + "]"
        case _:
            return str(value)
