from .call_executor import CallExecutor
from .provider import InvokeTransaction, JsonRpcProvider, StarknetProvider, StarknetRpcError
from .resolver import AddressResolver
from .state_reader import StateReader
from .submitter import TransactionSubmitter
from .translator import ErrorTranslator

__all__ = [
    "AddressResolver",
    "CallExecutor",
    "ErrorTranslator",
    "InvokeTransaction",
    "JsonRpcProvider",
    "StarknetProvider",
    "StarknetRpcError",
    "StateReader",
    "TransactionSubmitter",
]
