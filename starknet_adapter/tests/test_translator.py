"""Ledger error translation tests."""

import unittest

from bridge_core.errors import (
    AccountNotDeployedError,
    BlockNotFoundError,
    PreconditionFailedError,
    ProtocolError,
    RevertedError,
    TransactionNotFoundError,
)
from starknet_adapter.provider import StarknetRpcError
from starknet_adapter.translator import ErrorTranslator, revert_reason


class ErrorTranslatorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.translator = ErrorTranslator()

    def test_contract_not_found_is_not_deployed(self) -> None:
        error = self.translator.translate(
            StarknetRpcError(20, "Contract not found"), "nonce", "0xabc"
        )
        self.assertIsInstance(error, AccountNotDeployedError)
        self.assertIsInstance(error, PreconditionFailedError)
        self.assertEqual(error.address, "0xabc")

    def test_block_and_transaction_lookups(self) -> None:
        self.assertIsInstance(
            self.translator.translate(StarknetRpcError(24, "Block not found"), "nonce"),
            BlockNotFoundError,
        )
        self.assertIsInstance(
            self.translator.translate(StarknetRpcError(29, "Transaction hash not found"), "receipt"),
            TransactionNotFoundError,
        )

    def test_invalid_transaction_hash_is_not_pending(self) -> None:
        error = self.translator.translate(
            StarknetRpcError(25, "Invalid transaction hash"), "receipt", "0xfeed"
        )
        self.assertIsInstance(error, ProtocolError)
        self.assertNotIsInstance(error, TransactionNotFoundError)

    def test_execution_failures_are_reverts(self) -> None:
        error = self.translator.translate(
            StarknetRpcError(40, "Contract error", {"revert_error": "Kakarot: revert"}),
            "call",
        )
        self.assertIsInstance(error, RevertedError)
        self.assertEqual(error.reason, "Kakarot: revert")

        error = self.translator.translate(StarknetRpcError(52, "Invalid transaction nonce"), "send")
        self.assertIsInstance(error, RevertedError)
        self.assertEqual(error.reason, "Invalid transaction nonce")

    def test_unknown_codes_are_protocol_errors(self) -> None:
        for code in (-32601, -32602, 63, 999):
            with self.subTest(code=code):
                self.assertIsInstance(
                    self.translator.translate(StarknetRpcError(code, "bad"), "call"),
                    ProtocolError,
                )

    def test_revert_reason_extraction(self) -> None:
        self.assertIsNone(revert_reason(None))
        self.assertEqual(revert_reason("boom"), "boom")
        self.assertEqual(revert_reason({"execution_error": "panic"}), "panic")
        self.assertEqual(revert_reason({"revert_error": "a", "execution_error": "b"}), "a")


if __name__ == "__main__":
    unittest.main()
