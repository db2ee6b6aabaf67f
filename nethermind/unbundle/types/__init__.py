from .decoding import (
    AbiUsage,
    CallShape,
    CallSummary,
    DecodedCall,
    DecodeFailure,
    DecodeResult,
    FailureReason,
    TransferSummary,
)
from .transactions import InnerCall, TransactionData, UserOperation
