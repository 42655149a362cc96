from .decoder import RawSignedTransaction, decode_transaction, recover_sender
from .models import DecodedTransaction

__all__ = [
    "DecodedTransaction",
    "RawSignedTransaction",
    "decode_transaction",
    "recover_sender",
]
