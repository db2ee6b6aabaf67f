from .bytecode import BytecodeSignature, BytecodeSignatureStore, get_signature_store, reset_signature_stores
from .call_decoder import CallDecoder
from .function_decoders import FunctionDescriptor
from .identifier import ContractIdentifier
from .registry import SchemaRegistry, get_registry, reset_registries, verify_registry
from .table import SchemaTable
from .utils import function_selector, function_signature
