import asyncio
import logging
from typing import Any

import aiohttp
from aiohttp.client_exceptions import ClientConnectionError, ContentTypeError
from eth_utils import decode_hex, to_int

from nethermind.unbundle.exceptions import RPCError, RPCHostError, RPCRateLimitError
from nethermind.unbundle.types.transactions import TransactionData

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("unbundle").getChild("rpc")

DEFAULT_HEADERS = {"Content-Type": "application/json"}
DEFAULT_TIMEOUT = 30

# pylint: disable=raise-missing-from


def _handle_rpc_error(response_json: dict[str, Any]) -> None:
    if "error" in response_json.keys():
        logger.debug(f"Error in RPC response: {response_json}")
        raise RPCError("Error in RPC response: " + response_json["error"]["message"])


async def batch_post_request(
    request_objects: list[dict[str, Any]],
    host_address: str,
    request_headers: dict[str, str] | None = None,
    max_concurrency: int = 20,
    timeout: int = DEFAULT_TIMEOUT,
) -> list[Any]:
    """
    Batch Post a host address.  Used for concurrent JSON RPC Queries.  Errors are returned in place of the result
    of the failing request, so one failure does not cancel its siblings.

    :param request_objects:
        List[dict].  Each dictionary is passed to the json field of the POST request.  Number of requests in batch
        determined by length of this list
    :param host_address: host address
    :param request_headers: headers for request.   Default: {"Content-Type": "application/json"}
    :param max_concurrency: Max number of concurrent connections.   Default: 20
    :param timeout: Total timeout in seconds for each request
    :return: List[response["result"] | Exception ...]
    """
    connector = aiohttp.TCPConnector(limit=max_concurrency)
    logger.debug(f"Sending {len(request_objects)} requests to {host_address}")
    aiohttp_timeout = aiohttp.ClientTimeout(total=timeout)

    async with aiohttp.ClientSession(
        headers=request_headers or DEFAULT_HEADERS,
        connector=connector,
        timeout=aiohttp_timeout,
    ) as session:

        async def query_rpc(request: dict[str, Any]):
            try:
                async with session.post(host_address, json=request) as response:
                    try:
                        response_json = await response.json()
                    except ContentTypeError:
                        match response.status:
                            case 1015 | 429:
                                raise RPCRateLimitError("JSON RPC Server Initializing Rate Limits")
                            case 500 | 502 | 503 | 504:
                                raise RPCHostError("Internal Server Error")
                            case _:
                                logger.error(f"Unexpected response status {response.status} for request {request}")
                                raise RPCError(f"Unexpected response from RPC host (HTTP {response.status})")
            except (ClientConnectionError, asyncio.TimeoutError) as e:
                raise RPCHostError(f"Could not connect to RPC host {host_address}: {e}")

            _handle_rpc_error(response_json)
            return response_json["result"]

        return [
            *await asyncio.gather(
                *[query_rpc(request_obj) for request_obj in request_objects],
                return_exceptions=True,
            )
        ]


def rpc_request(method: str, params: list[Any], request_id: int = 1) -> dict[str, Any]:
    """Builds a JSON RPC request object"""
    return {"jsonrpc": "2.0", "method": method, "params": params, "id": request_id}


def _quantity(value: str | int | None) -> int | None:
    if value is None or isinstance(value, int):
        return value
    return to_int(hexstr=value)


def parse_transaction_response(
    tx_json: dict[str, Any],
    receipt_json: dict[str, Any] | None = None,
) -> TransactionData:
    """
    Parses an ``eth_getTransactionByHash`` response, and optionally its receipt, into TransactionData

    :param tx_json: Transaction result JSON
    :param receipt_json: Receipt result JSON.  Gas used and effective gas price are omitted if None
    :raises RPCError: if the response carries malformed hex data or quantities
    """
    receipt_json = receipt_json or {}

    try:
        return TransactionData(
            hash=tx_json["hash"],
            to=tx_json.get("to"),
            from_address=tx_json["from"],
            input=decode_hex(tx_json.get("input") or tx_json.get("data") or "0x"),
            value=_quantity(tx_json.get("value")) or 0,
            gas_price=_quantity(tx_json.get("gasPrice")),
            gas_used=_quantity(receipt_json.get("gasUsed")),
            effective_gas_price=_quantity(receipt_json.get("effectiveGasPrice")),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise RPCError(f"Malformed transaction response for {tx_json.get('hash')}: {e}")


def fetch_transaction(tx_hash: str, json_rpc: str) -> TransactionData:
    """
    Fetches a transaction and its receipt concurrently.  The receipt is best-effort: if it cannot be fetched the
    transaction is returned without gas-used fields.

    :param tx_hash: 0x prefixed transaction hash
    :param json_rpc: JSON RPC url
    :raises RPCError: if the transaction cannot be fetched, or does not exist
    """
    tx_response, receipt_response = asyncio.run(
        batch_post_request(
            request_objects=[
                rpc_request("eth_getTransactionByHash", [tx_hash], 1),
                rpc_request("eth_getTransactionReceipt", [tx_hash], 2),
            ],
            host_address=json_rpc,
            max_concurrency=2,
        )
    )

    if isinstance(tx_response, RPCError):
        raise tx_response
    if isinstance(tx_response, Exception):
        raise RPCError(f"Unexpected Error Type: {type(tx_response)}({tx_response})")
    if tx_response is None:
        raise RPCError(f"Transaction {tx_hash} not found")

    if isinstance(receipt_response, Exception):
        logger.debug(f"Could not fetch receipt for {tx_hash}: {receipt_response}")
        receipt_response = None

    return parse_transaction_response(tx_response, receipt_response)
