class DecodingError(Exception):
    """

    Raised when calldata cannot be decoded against a function table, either because the selector is unknown
    or because the argument bytes do not match the parameter types of the selected function

    """


class SchemaSourceError(Exception):
    """

    Raised when a schema source (compiled contract artifact) cannot be read or parsed.  Schema loaders skip the
    offending file after logging this error.

    """


class RPCError(Exception):
    """

    Raised when a transaction cannot be retrieved from the JSON RPC node

    """


class RPCRateLimitError(RPCError):
    """Raised when gateway rate limits are implemented by the remote host"""


class RPCHostError(RPCError):
    """Raised when the remote host returns error, fails to provide correct data, or when timeout occurs"""
