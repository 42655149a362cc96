"""Block reference parsing and StarkNet translation tests."""

import unittest

from bridge_core.blocks import BlockReference, BlockTag
from bridge_core.errors import InvalidBlockReferenceError
from bridge_core.felt import FIELD_PRIME


class BlockReferenceTests(unittest.TestCase):
    def test_tags_translate(self) -> None:
        self.assertEqual(BlockReference.parse("latest").to_starknet(), "latest")
        self.assertEqual(BlockReference.parse("pending").to_starknet(), "pending")
        self.assertEqual(BlockReference.parse("safe").to_starknet(), "latest")
        self.assertEqual(BlockReference.parse("finalized").to_starknet(), "latest")
        self.assertEqual(BlockReference.parse("earliest").to_starknet(), {"block_number": 0})
        self.assertEqual(BlockReference.parse(None).tag, BlockTag.LATEST)

    def test_numbers_map_one_to_one(self) -> None:
        self.assertEqual(BlockReference.parse(12).to_starknet(), {"block_number": 12})
        self.assertEqual(BlockReference.parse("0x1a").to_starknet(), {"block_number": 26})
        self.assertEqual(BlockReference.parse("7").to_starknet(), {"block_number": 7})

    def test_hash_translation(self) -> None:
        block_hash = "0x" + "00" * 31 + "ab"
        reference = BlockReference.parse(block_hash)
        self.assertEqual(reference.block_hash, 0xAB)
        self.assertEqual(reference.to_starknet(), {"block_hash": "0xab"})

    def test_hash_outside_field_rejected(self) -> None:
        reference = BlockReference(block_hash=FIELD_PRIME + 1)
        with self.assertRaises(InvalidBlockReferenceError):
            reference.to_starknet()

    def test_dict_forms(self) -> None:
        self.assertEqual(
            BlockReference.parse({"blockNumber": "0x2"}).to_starknet(), {"block_number": 2}
        )
        self.assertEqual(
            BlockReference.parse({"blockHash": "0x" + "11" * 2}).block_hash, 0x1111
        )

    def test_invalid_references(self) -> None:
        for value in ("newest", "0xzz", -1, True, 1.5, {"foo": 1}):
            with self.subTest(value=value):
                with self.assertRaises(InvalidBlockReferenceError):
                    BlockReference.parse(value)

    def test_exactly_one_field(self) -> None:
        with self.assertRaises(InvalidBlockReferenceError):
            BlockReference()
        with self.assertRaises(InvalidBlockReferenceError):
            BlockReference(tag=BlockTag.LATEST, number=1)


if __name__ == "__main__":
    unittest.main()
