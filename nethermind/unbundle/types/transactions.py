from dataclasses import dataclass


@dataclass
class TransactionData:
    """Transaction & receipt fields consumed by the transaction analyzer"""

    hash: str
    to: str | None
    from_address: str
    input: bytes
    value: int = 0
    gas_price: int | None = None

    gas_used: int | None = None
    """ Set from the receipt when available """

    effective_gas_price: int | None = None
    """ Set from the receipt when available """


@dataclass
class UserOperation:
    """
    Packed user operation bundled in an EntryPoint v0.7 handleOps call.  Gas fields are opaque to the decoder
    and are only passed through for display.
    """

    sender: str
    nonce: int
    init_code: bytes
    call_data: bytes
    account_gas_limits: bytes = b""
    pre_verification_gas: int = 0
    gas_fees: bytes = b""
    paymaster_and_data: bytes = b""
    signature: bytes = b""

    @classmethod
    def from_decoded(cls, decoded: dict) -> "UserOperation":
        """Builds a UserOperation from the record produced by decoding a PackedUserOperation tuple"""
        return cls(
            sender=decoded["sender"],
            nonce=decoded["nonce"],
            init_code=decoded["initCode"],
            call_data=decoded["callData"],
            account_gas_limits=decoded["accountGasLimits"],
            pre_verification_gas=decoded["preVerificationGas"],
            gas_fees=decoded["gasFees"],
            paymaster_and_data=decoded["paymasterAndData"],
            signature=decoded["signature"],
        )

    @property
    def factory(self) -> str | None:
        """Factory address prefixed to the init code, if the operation deploys its account"""
        if len(self.init_code) < 20:
            return None
        return "0x" + self.init_code[:20].hex()


@dataclass
class InnerCall:
    """Call forwarded by a smart account execute / executeBatch"""

    target: str
    value: int
    data: bytes
