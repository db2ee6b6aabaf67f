import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from eth_utils import encode_hex, is_same_address

from nethermind.unbundle.decoding.abis import ENTRY_POINT_V07_ABI, ENTRY_POINT_V07_ADDRESS, SIMPLE_ACCOUNT_EXECUTE_ABI
from nethermind.unbundle.decoding.bytecode import get_signature_store
from nethermind.unbundle.decoding.call_decoder import CallDecoder
from nethermind.unbundle.decoding.identifier import ContractIdentifier
from nethermind.unbundle.decoding.registry import SchemaRegistry, get_registry
from nethermind.unbundle.decoding.table import SchemaTable
from nethermind.unbundle.exceptions import RPCError
from nethermind.unbundle.rpc import fetch_transaction
from nethermind.unbundle.tokens import format_token_amount
from nethermind.unbundle.types.decoding import (
    AbiUsage,
    CallShape,
    CallSummary,
    DecodedCall,
    DecodeFailure,
    DecodeResult,
    FailureReason,
    TransferSummary,
)
from nethermind.unbundle.types.transactions import InnerCall, TransactionData, UserOperation
from nethermind.unbundle.utils import format_units

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("unbundle").getChild("analyzer")

NO_DATA_MESSAGE = "This is a simple ETH transfer with no data."
UNDECODABLE_MESSAGE = "Could not decode transaction."

TO_ARG_NAMES = ("to", "recipient", "dst", "_to")
AMOUNT_ARG_NAMES = ("amount", "value", "wad", "_value")
FROM_ARG_NAMES = ("from", "sender", "src", "_from")

SEPARATOR = "-" * 40


def _first_present(args: dict, names: tuple[str, ...]):
    for name in names:
        if args.get(name) is not None:
            return args[name]
    return None


def summarize_transfer(
    decoded: DecodedCall,
    token_address: str,
    default_from: str,
    beneficiary: str,
) -> TransferSummary | None:
    """
    Builds a transfer summary from a decoded call, if the call is transfer-shaped.

    :param decoded: Decoded call
    :param token_address: Address the call was sent to.  Used to resolve the token symbol & decimals
    :param default_from: Sender to report when the call has no ``from`` argument
    :param beneficiary: Beneficiary to report
    :return: TransferSummary, or None if the call is not a transfer
    """
    if decoded.shape not in (CallShape.transfer, CallShape.transfer_from):
        return None

    to_address = _first_present(decoded.raw_args, TO_ARG_NAMES)
    amount = _first_present(decoded.raw_args, AMOUNT_ARG_NAMES)
    if not to_address or not isinstance(amount, int) or isinstance(amount, bool):
        return None

    from_address = _first_present(decoded.raw_args, FROM_ARG_NAMES) or default_from

    return TransferSummary(
        amount=format_token_amount(token_address, amount),
        from_address=from_address,
        beneficiary=beneficiary,
    )


@dataclass
class _Analysis:
    """Accumulates decoded calls, the summary, and the verbose trace while walking a transaction"""

    calls: list[CallSummary] = field(default_factory=list)
    summary: TransferSummary | None = None
    abi_used: AbiUsage | None = None
    trace: list[str] = field(default_factory=list)

    def log(self, line: str):
        self.trace.append(line)


class TransactionAnalyzer:
    """
    Decodes a transaction into a call list and an optional transfer summary.

    The outer call is classified in order:

    1. No input data -> not decodable
    2. Sent to the EntryPoint and decodes as ``handleOps`` -> each user operation's calldata is decoded as a smart
       account ``execute``/``executeBatch``, and every forwarded call is decoded against the function tables
    3. Decodes as a smart account ``execute``/``executeBatch`` -> forwarded calls are decoded as in (2)
    4. Anything else -> the input is decoded directly against the function tables
    5. Nothing applies -> not decodable

    Forwarded calls are decoded against the merged table first, then the fallback table.  A call that fails both is
    kept in the call list as an unknown placeholder.
    """

    registry: SchemaRegistry
    call_decoder: CallDecoder
    identifier: ContractIdentifier

    _entry_point_table: SchemaTable
    _account_table: SchemaTable

    def __init__(
        self,
        artifacts_dir: str | Path | None = None,
        registry: SchemaRegistry | None = None,
        identifier: ContractIdentifier | None = None,
    ):
        self.registry = registry or get_registry(artifacts_dir)
        self.identifier = identifier or ContractIdentifier(get_signature_store(self.registry.artifacts_dir))
        self.call_decoder = CallDecoder(self.identifier)

        self._entry_point_table = SchemaTable()
        self._entry_point_table.add_abi("EntryPointV07", ENTRY_POINT_V07_ABI)
        self._account_table = SchemaTable()
        self._account_table.add_abi("SimpleAccount", SIMPLE_ACCOUNT_EXECUTE_ABI)

    def decode_with_fallback(self, payload: bytes, target: str) -> tuple[DecodedCall | DecodeFailure, AbiUsage]:
        """
        Decodes a payload against the merged table, retrying against the fallback table on failure.

        :return: (decoded call or failure, table used)
        """
        merged = self.registry.merged_table()
        fallback = self.registry.fallback_table()
        # A merged table without schema-source functions is reported as the fallback
        merged_usage = (
            AbiUsage("merged", len(merged)) if len(merged) > len(fallback) else AbiUsage("fallback", len(fallback))
        )

        result = self.call_decoder.decode(merged, payload, target)
        if isinstance(result, DecodedCall):
            return result, merged_usage

        fallback_result = self.call_decoder.decode(fallback, payload, target)
        if isinstance(fallback_result, DecodedCall):
            return fallback_result, AbiUsage("fallback", len(fallback))

        # Prefer the codec error over an unknown selector when reporting
        if fallback_result.reason == FailureReason.malformed_payload:
            result = fallback_result
        return result, merged_usage

    def decode_account_call(self, calldata: bytes) -> tuple[CallShape, list[InnerCall]] | None:
        """
        Classifies calldata as a smart account ``execute`` or ``executeBatch``.

        :return: (call shape, forwarded calls), or None if the calldata is neither
        """
        decoded = self.call_decoder.decode(self._account_table, calldata)
        if not isinstance(decoded, DecodedCall):
            return None

        args = decoded.raw_args
        match decoded.shape:
            case CallShape.execute:
                return decoded.shape, [InnerCall(args["dest"], args["value"], args["func"])]
            case CallShape.execute_batch:
                values = args["value"]
                return decoded.shape, [
                    InnerCall(dest, values[index] if index < len(values) else 0, func)
                    for index, (dest, func) in enumerate(zip(args["dest"], args["func"]))
                ]
            case _:
                return None

    def analyze(self, tx: TransactionData, verbose: bool = False) -> DecodeResult:
        """
        Decodes a transaction.

        :param tx: Transaction (and receipt) data
        :param verbose: If True, the result carries a human readable trace
        :return: DecodeResult
        """
        gas_used = str(tx.gas_used) if tx.gas_used is not None else None
        gas_price = tx.effective_gas_price if tx.effective_gas_price is not None else tx.gas_price
        gas_price_gwei = format_units(gas_price, 9) if gas_price is not None else None

        if not tx.input:
            return DecodeResult(success=False, error=NO_DATA_MESSAGE, gas_used=gas_used, gas_price_gwei=gas_price_gwei)

        analysis = _Analysis()
        success = self._analyze_input(tx, analysis)

        if not success:
            return DecodeResult(
                success=False,
                error=UNDECODABLE_MESSAGE,
                verbose_output=self._verbose_output(analysis, gas_used, gas_price_gwei) if verbose else None,
                gas_used=gas_used,
                gas_price_gwei=gas_price_gwei,
            )

        return DecodeResult(
            success=True,
            calls=analysis.calls,
            summary=analysis.summary,
            verbose_output=self._verbose_output(analysis, gas_used, gas_price_gwei) if verbose else None,
            abi_used=analysis.abi_used,
            gas_used=gas_used,
            gas_price_gwei=gas_price_gwei,
        )

    def _analyze_input(self, tx: TransactionData, analysis: _Analysis) -> bool:
        if not tx.to:
            analysis.log("Contract creation transaction.  Nothing to decode")
            return False

        if is_same_address(tx.to, ENTRY_POINT_V07_ADDRESS):
            handle_ops = self.call_decoder.decode(self._entry_point_table, tx.input, tx.to)
            if isinstance(handle_ops, DecodedCall) and handle_ops.shape == CallShape.handle_ops:
                self._analyze_bundle(handle_ops, analysis)
                return True
            logger.debug(f"Transaction {tx.hash} sent to EntryPoint is not a handleOps call")

        account_call = self.decode_account_call(tx.input)
        if account_call is not None:
            shape, inner_calls = account_call
            label = "execute" if shape == CallShape.execute else "executeBatch"
            analysis.log(f"Direct {label} to {tx.to}")
            for index, inner_call in enumerate(inner_calls):
                analysis.log(f"  [{index}] -> {inner_call.target}, {format_units(inner_call.value, 18)} ETH")
                self._record_call(analysis, inner_call, tx.from_address, tx.from_address, "      ")
            if analysis.calls:
                return True

        decoded, usage = self.decode_with_fallback(tx.input, tx.to)
        if isinstance(decoded, DecodeFailure):
            analysis.log(f"Direct call to {tx.to}")
            analysis.log(f"Decode error: {decoded.message}")
            analysis.abi_used = usage
            return False

        self._add_decoded(analysis, decoded, usage, tx.to, tx.from_address, tx.from_address)
        analysis.log(f"Direct call to {tx.to}")
        analysis.log(f"Function: {decoded.display_name}")
        analysis.log(f"Args: {json.dumps(decoded.args, indent=2)}")
        return True

    def _analyze_bundle(self, handle_ops: DecodedCall, analysis: _Analysis):
        operations = [UserOperation.from_decoded(op) for op in handle_ops.raw_args["ops"]]
        beneficiary = handle_ops.raw_args["beneficiary"]

        analysis.log("Account Abstraction Transaction (Entry Point 0.7.0)")
        analysis.log(SEPARATOR)
        analysis.log("Function: handleOps")
        analysis.log(f"Beneficiary: {beneficiary}")
        analysis.log(f"User Operations: {len(operations)}")
        analysis.log(SEPARATOR)

        for index, operation in enumerate(operations):
            analysis.log("")
            analysis.log(f"UserOp #{index + 1}")
            analysis.log(f"   Sender (Smart Account): {operation.sender}")
            analysis.log(f"   Nonce: {operation.nonce}")

            if operation.factory:
                account_kind = self.identifier.identify(operation.init_code[20:])
                analysis.log(f"   Account deployed by factory {operation.factory}")
                if account_kind:
                    analysis.log(f"   Account contract: {account_kind}")

            if not operation.call_data:
                continue

            account_call = self.decode_account_call(operation.call_data)
            if account_call is None:
                analysis.log(f"   Call data: {encode_hex(operation.call_data[:9])}...")
                self._record_call(
                    analysis, InnerCall(operation.sender, 0, operation.call_data), operation.sender, beneficiary, "   "
                )
                continue

            shape, inner_calls = account_call
            if shape == CallShape.execute:
                inner_call = inner_calls[0]
                analysis.log(f"   Execute -> {inner_call.target}")
                analysis.log(f"   Value: {format_units(inner_call.value, 18)} ETH")
                self._record_call(analysis, inner_call, operation.sender, beneficiary, "   ")
                continue

            analysis.log(f"   ExecuteBatch: {len(inner_calls)} calls")
            for call_index, inner_call in enumerate(inner_calls):
                analysis.log(f"     [{call_index}] -> {inner_call.target}, {format_units(inner_call.value, 18)} ETH")
                self._record_call(analysis, inner_call, operation.sender, beneficiary, "         ")

    def _record_call(
        self,
        analysis: _Analysis,
        inner_call: InnerCall,
        default_from: str,
        beneficiary: str,
        indent: str,
    ):
        if not inner_call.data:
            return

        decoded, usage = self.decode_with_fallback(inner_call.data, inner_call.target)
        if isinstance(decoded, DecodeFailure):
            analysis.calls.append(CallSummary(function=decoded.placeholder, target=inner_call.target))
            analysis.log(f"{indent}Inner call: {decoded.placeholder}")
            analysis.log(f"{indent}Decode error: {decoded.message}")
            return

        self._add_decoded(analysis, decoded, usage, inner_call.target, default_from, beneficiary)
        args_str = ", ".join(f"{k}={v}" for k, v in decoded.args.items())
        analysis.log(f"{indent}Inner call: {decoded.display_name}({args_str})")

    @staticmethod
    def _add_decoded(
        analysis: _Analysis,
        decoded: DecodedCall,
        usage: AbiUsage,
        target: str,
        default_from: str,
        beneficiary: str,
    ):
        if analysis.abi_used is None:
            analysis.abi_used = usage

        analysis.calls.append(CallSummary(function=decoded.display_name, target=target, args=decoded.args))

        if analysis.summary is None:
            analysis.summary = summarize_transfer(decoded, target, default_from, beneficiary)

    def _verbose_output(self, analysis: _Analysis, gas_used: str | None, gas_price_gwei: str | None) -> str:
        header = [f"Artifacts dir: {self.registry.artifacts_dir}"]
        if analysis.abi_used:
            header.append(analysis.abi_used.describe())

        gas_parts = []
        if gas_used:
            gas_parts.append(f"Gas used: {gas_used}")
        if gas_price_gwei:
            gas_parts.append(f"Gas price: {gas_price_gwei} Gwei")

        lines = ([" | ".join(gas_parts)] if gas_parts else []) + header + analysis.trace
        return "\n".join(lines)


def decode_transaction(
    tx_hash: str,
    json_rpc: str,
    verbose: bool = False,
    artifacts_dir: str | Path | None = None,
) -> DecodeResult:
    """
    Fetches a transaction and its receipt from a JSON RPC node and decodes it.  Retrieval failures are returned as
    an unsuccessful result.

    :param tx_hash: 0x prefixed transaction hash
    :param json_rpc: JSON RPC url
    :param verbose: If True, the result carries a human readable trace
    :param artifacts_dir: Schema source directory.  Resolved from the environment if not provided
    """
    try:
        tx = fetch_transaction(tx_hash, json_rpc)
    except RPCError as e:
        logger.error(f"Failed to fetch transaction {tx_hash}: {e}")
        return DecodeResult(success=False, error=str(e))

    return TransactionAnalyzer(artifacts_dir=artifacts_dir).analyze(tx, verbose=verbose)
