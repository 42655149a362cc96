"""State query tests: deployed decoding and the zero-value convention."""

import unittest

from bridge_core.config import SystemConfiguration
from bridge_core.errors import ProtocolError, RevertedError
from bridge_core.felt import get_selector_from_name
from starknet_adapter.provider import StarknetRpcError
from starknet_adapter.state_reader import StateReader

OWNER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
GHOST = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
ZERO = "0x0000000000000000000000000000000000000000"
OWNER_ACCOUNT = 0xACC0

RESOLVE = get_selector_from_name("get_starknet_contract_address")
BALANCE_OF = get_selector_from_name("balanceOf")
BYTECODE = get_selector_from_name("bytecode")
STORAGE = get_selector_from_name("storage")


class LedgerProvider:
    """Minimal ledger: one deployed account holding code, storage and a balance."""

    def __init__(self, config: SystemConfiguration) -> None:
        self.config = config
        self.accounts = {int(OWNER, 16): OWNER_ACCOUNT}
        self.nonces = {OWNER_ACCOUNT: 7}
        self.balances = {OWNER_ACCOUNT: 2**128 + 5}
        self.code = {OWNER_ACCOUNT: b"\x60\x80\x60\x40"}
        self.storage = {(OWNER_ACCOUNT, 2**130): 9}
        self.read_failure = None
        self.calls = []

    async def call(self, contract_address, entry_point_selector, calldata, block_id):
        self.calls.append((contract_address, entry_point_selector, list(calldata), block_id))
        if entry_point_selector == RESOLVE:
            return [self.accounts.get(calldata[0], 0)]
        if self.read_failure is not None:
            raise self.read_failure
        if entry_point_selector == BALANCE_OF:
            value = self.balances.get(calldata[0], 0)
            return [value % 2**128, value // 2**128]
        if entry_point_selector == BYTECODE:
            code = self.code[contract_address]
            return [len(code), *code]
        if entry_point_selector == STORAGE:
            key = calldata[0] + calldata[1] * 2**128
            value = self.storage.get((contract_address, key), 0)
            return [value % 2**128, value // 2**128]
        raise StarknetRpcError(21, "Invalid message selector")

    async def get_nonce(self, contract_address, block_id):
        self.calls.append((contract_address, "nonce", [], block_id))
        if self.read_failure is not None:
            raise self.read_failure
        return self.nonces[contract_address]


class StateReaderTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.config = SystemConfiguration.create("http://localhost:5050", 0xAA, 0xBB)
        self.provider = LedgerProvider(self.config)
        self.reader = StateReader(self.provider, self.config)

    async def test_deployed_account_reads(self) -> None:
        self.assertEqual(await self.reader.nonce(OWNER), 7)
        self.assertEqual(await self.reader.balance(OWNER), 2**128 + 5)
        self.assertEqual(await self.reader.get_code(OWNER), b"\x60\x80\x60\x40")
        self.assertEqual(await self.reader.storage_at(OWNER, 2**130), 9)
        self.assertEqual(await self.reader.storage_at(OWNER, 0), 0)

    async def test_balance_is_read_from_fee_token(self) -> None:
        await self.reader.balance(OWNER)

        contract, selector, calldata, _ = self.provider.calls[-1]
        self.assertEqual(contract, self.config.fee_token_address)
        self.assertEqual(selector, BALANCE_OF)
        self.assertEqual(calldata, [OWNER_ACCOUNT])

    async def test_storage_key_is_split_into_limbs(self) -> None:
        await self.reader.storage_at(OWNER, 2**130)

        _, _, calldata, _ = self.provider.calls[-1]
        self.assertEqual(calldata, [0, 4])

    async def test_undeployed_account_reads_as_empty(self) -> None:
        for address in (GHOST, ZERO):
            with self.subTest(address=address):
                self.provider.calls.clear()
                self.assertEqual(await self.reader.nonce(address), 0)
                self.assertEqual(await self.reader.balance(address), 0)
                self.assertEqual(await self.reader.get_code(address), b"")
                self.assertEqual(await self.reader.storage_at(address, 1), 0)
                # Only the registry was consulted.
                self.assertTrue(all(call[1] == RESOLVE for call in self.provider.calls))

    async def test_resolution_and_read_share_the_block(self) -> None:
        await self.reader.nonce(OWNER, "0x10")

        self.assertEqual(
            [call[3] for call in self.provider.calls],
            [{"block_number": 16}, {"block_number": 16}],
        )

    async def test_contract_not_found_reads_as_empty(self) -> None:
        self.provider.read_failure = StarknetRpcError(20, "Contract not found")

        self.assertEqual(await self.reader.nonce(OWNER), 0)
        self.assertEqual(await self.reader.get_code(OWNER), b"")

    async def test_missing_fee_token_is_not_a_zero_balance(self) -> None:
        self.provider.read_failure = StarknetRpcError(20, "Contract not found")

        with self.assertRaises(ProtocolError) as ctx:
            await self.reader.balance(OWNER)
        self.assertIn("Fee token", str(ctx.exception))

    async def test_other_failures_propagate(self) -> None:
        self.provider.read_failure = StarknetRpcError(40, "Contract error", "boom")
        with self.assertRaises(RevertedError):
            await self.reader.balance(OWNER)

        self.provider.read_failure = StarknetRpcError(-32603, "Internal error")
        with self.assertRaises(ProtocolError):
            await self.reader.nonce(OWNER)

    async def test_malformed_uint256_reply(self) -> None:
        reader = StateReader(_ShortBalance(self.provider), self.config)
        with self.assertRaises(ProtocolError):
            await reader.balance(OWNER)


class _ShortBalance:
    def __init__(self, inner: LedgerProvider) -> None:
        self.inner = inner

    async def call(self, contract_address, entry_point_selector, calldata, block_id):
        if entry_point_selector == BALANCE_OF:
            return [1]
        return await self.inner.call(contract_address, entry_point_selector, calldata, block_id)


if __name__ == "__main__":
    unittest.main()
