"""Read-only call execution tests."""

import unittest

from bridge_core.config import SystemConfiguration
from bridge_core.errors import PreconditionFailedError, ProtocolError, RevertedError
from bridge_core.felt import get_selector_from_name
from starknet_adapter.call_executor import DEFAULT_CALL_GAS_LIMIT, CallExecutor
from starknet_adapter.provider import StarknetRpcError

KAKAROT = 0x7A7A
CONTRACT = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
CONTRACT_ACCOUNT = 0xC0DE
GHOST = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"

RESOLVE = get_selector_from_name("get_starknet_contract_address")
ETH_CALL = get_selector_from_name("eth_call")


class ExecutionProvider:
    def __init__(self) -> None:
        self.accounts = {int(CONTRACT, 16): CONTRACT_ACCOUNT}
        self.return_data = b"\x00" * 31 + b"\x01"
        self.failure = None
        self.calls = []

    async def call(self, contract_address, entry_point_selector, calldata, block_id):
        self.calls.append((contract_address, entry_point_selector, list(calldata), block_id))
        if entry_point_selector == RESOLVE:
            return [self.accounts.get(calldata[0], 0)]
        if self.failure is not None:
            raise self.failure
        return [len(self.return_data), *self.return_data]


class CallExecutorTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.config = SystemConfiguration.create("http://localhost:5050", KAKAROT, 0xBB)
        self.provider = ExecutionProvider()
        self.executor = CallExecutor(self.provider, self.config)

    async def test_call_returns_output_bytes(self) -> None:
        result = await self.executor.call(CONTRACT, "0x06661abd", block=5)

        self.assertEqual(result, b"\x00" * 31 + b"\x01")
        contract, selector, calldata, block_id = self.provider.calls[-1]
        self.assertEqual(contract, KAKAROT)
        self.assertEqual(selector, ETH_CALL)
        self.assertEqual(
            calldata,
            [CONTRACT_ACCOUNT, DEFAULT_CALL_GAS_LIMIT, 0, 0, 4, 0x06, 0x66, 0x1A, 0xBD],
        )
        self.assertEqual(block_id, {"block_number": 5})

    async def test_value_and_gas_are_forwarded(self) -> None:
        await self.executor.call(CONTRACT, b"", value=3, gas_limit=100, gas_price=2)

        _, _, calldata, _ = self.provider.calls[-1]
        self.assertEqual(calldata, [CONTRACT_ACCOUNT, 100, 2, 3, 0])

    async def test_undeployed_target_is_a_precondition_failure(self) -> None:
        with self.assertRaises(PreconditionFailedError):
            await self.executor.call(GHOST, b"")
        self.assertEqual(len(self.provider.calls), 1)

    async def test_missing_core_contract_is_a_deployment_fault(self) -> None:
        self.provider.failure = StarknetRpcError(20, "Contract not found")

        with self.assertRaises(ProtocolError) as ctx:
            await self.executor.call(CONTRACT, b"")
        self.assertNotIsInstance(ctx.exception, PreconditionFailedError)
        self.assertIn(hex(KAKAROT), str(ctx.exception))

    async def test_execution_failure_is_reverted(self) -> None:
        self.provider.failure = StarknetRpcError(
            40, "Contract error", {"revert_error": "Kakarot: eth_call failed"}
        )

        with self.assertRaises(RevertedError) as ctx:
            await self.executor.call(CONTRACT, b"")
        self.assertEqual(ctx.exception.reason, "Kakarot: eth_call failed")

    async def test_empty_return_data(self) -> None:
        self.provider.return_data = b""

        self.assertEqual(await self.executor.call(CONTRACT, b""), b"")

    async def test_malformed_reply(self) -> None:
        executor = CallExecutor(_EmptyReply(self.provider), self.config)
        with self.assertRaises(ProtocolError):
            await executor.call(CONTRACT, b"")

    async def test_invalid_calldata(self) -> None:
        with self.assertRaises(ValueError):
            await self.executor.call(CONTRACT, "0xabc")


class _EmptyReply:
    def __init__(self, inner: ExecutionProvider) -> None:
        self.inner = inner

    async def call(self, contract_address, entry_point_selector, calldata, block_id):
        if entry_point_selector == ETH_CALL:
            return []
        return await self.inner.call(contract_address, entry_point_selector, calldata, block_id)


if __name__ == "__main__":
    unittest.main()
