from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

# pylint: disable=invalid-name

AbiSource = Literal["merged", "fallback"]


class CallShape(Enum):
    """Closed set of call shapes the transaction analyzer knows how to treat"""

    handle_ops = "handle_ops"
    execute = "execute"
    execute_batch = "execute_batch"
    transfer = "transfer"
    transfer_from = "transfer_from"
    deploy = "deploy"
    generic = "generic"
    unrecognized = "unrecognized"

    @classmethod
    def from_function_name(cls, function_name: str | None) -> "CallShape":
        """Maps a decoded function name onto a call shape"""
        match function_name:
            case None | "":
                return cls.unrecognized
            case "handleOps":
                return cls.handle_ops
            case "execute":
                return cls.execute
            case "executeBatch":
                return cls.execute_batch
            case "transfer":
                return cls.transfer
            case "transferFrom":
                return cls.transfer_from
            case "deploy":
                return cls.deploy
            case _:
                return cls.generic


class FailureReason(Enum):
    """Reason a call payload could not be decoded"""

    unknown_selector = "unknown_selector"
    malformed_payload = "malformed_payload"


@dataclass
class DecodedCall:
    """Successfully decoded call"""

    function_name: str
    target: str

    args: dict[str, str]
    """ Argument name -> human readable value """

    contract_kind: str | None = None
    """ Name of the contract being deployed.  Only set for deploy calls whose init code was identified """

    abi_name: str = ""
    """ Schema source that supplied the function descriptor """

    raw_args: dict[str, Any] = field(default_factory=dict, repr=False)
    """ Argument name -> decoded python value (ints, checksummed addresses, bytes, lists & dicts) """

    @property
    def shape(self) -> CallShape:
        """Call shape of the decoded function"""
        return CallShape.from_function_name(self.function_name)

    @property
    def display_name(self) -> str:
        """Function name, suffixed with the contract kind for identified deploy calls"""
        if self.shape == CallShape.deploy and self.contract_kind:
            return f"deploy ({self.contract_kind})"
        return self.function_name


@dataclass
class DecodeFailure:
    """Typed failure returned when a payload cannot be decoded"""

    reason: FailureReason
    selector: str
    """ 0x prefixed 4 byte selector (or the full payload if shorter than 4 bytes) """

    byte_length: int
    message: str

    @property
    def placeholder(self) -> str:
        """Display name for the undecodable call"""
        return f"{self.selector}... (unknown, {self.byte_length} bytes)"


@dataclass
class CallSummary:
    """Single user-facing entry in the decoded call list"""

    function: str
    target: str
    args: dict[str, str] = field(default_factory=dict)


@dataclass
class TransferSummary:
    """Canonical summary of the first value-transfer call found in a transaction"""

    amount: str
    from_address: str
    beneficiary: str


@dataclass
class AbiUsage:
    """Which function table decoded the first call, and its size"""

    source: AbiSource
    function_count: int

    def describe(self) -> str:
        """Human readable line for the verbose trace"""
        if self.source == "merged":
            return f"ABI: merged ({self.function_count} functions)"
        return f"ABI: fallback only ({self.function_count} functions)"


@dataclass
class DecodeResult:
    """Structured result returned by the transaction analyzer"""

    success: bool
    calls: list[CallSummary] = field(default_factory=list)
    summary: TransferSummary | None = None
    verbose_output: str | None = None
    abi_used: AbiUsage | None = None
    gas_used: str | None = None
    gas_price_gwei: str | None = None
    error: str | None = None
