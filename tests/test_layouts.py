"""
Tests for the Automation and Miner account layouts.
"""
import struct

import pytest

from protocol.layouts import (
    DELEGATION_EXECUTOR_OFFSET,
    DELEGATION_LAYOUT,
    MINING_RECORD_LAYOUT,
    DecodeError,
    FieldSpec,
    StructLayout,
    TooShortError,
    U64,
    decode_delegation,
    decode_mining_record,
)
from tests.common import build_delegation_bytes, build_mining_record_bytes


class TestDelegationLayout:
    """Tests for decode_delegation."""

    def test_decodes_all_fields(self, authority, executor_pubkey):
        """Test every field lands at its documented offset."""
        data = build_delegation_bytes(
            authority=authority,
            executor=executor_pubkey,
            amount=1_000_000_000,
            balance=2_000_000_000,
            fee=5_000,
            strategy=3,
            mask=0x1FFFFFF,
        )
        assert len(data) == 112

        record = decode_delegation(data)

        assert record.amount == 1_000_000_000
        assert record.authority == authority
        assert record.balance == 2_000_000_000
        assert record.executor == executor_pubkey
        assert record.fee == 5_000
        assert record.strategy == 3
        assert record.mask == 0x1FFFFFF

    def test_executor_offset_matches_layout(self, authority, executor_pubkey):
        """Test the discovery filter offset points at the executor bytes."""
        data = build_delegation_bytes(authority=authority, executor=executor_pubkey)
        assert DELEGATION_EXECUTOR_OFFSET == 56
        assert data[56:88] == bytes(executor_pubkey)

    def test_trailing_bytes_ignored(self, authority, executor_pubkey):
        """Test longer buffers decode the same as exact-length ones."""
        data = build_delegation_bytes(authority=authority, executor=executor_pubkey)
        assert decode_delegation(data + b"\xff" * 40) == decode_delegation(data)

    def test_max_u64_values(self, authority, executor_pubkey):
        """Test u64 fields decode as unsigned."""
        max_u64 = 2**64 - 1
        data = build_delegation_bytes(
            authority=authority, executor=executor_pubkey, amount=max_u64, balance=max_u64
        )
        record = decode_delegation(data)
        assert record.amount == max_u64
        assert record.balance == max_u64

    @pytest.mark.parametrize("length", [0, 1, 8, 56, 88, 111])
    def test_too_short(self, length):
        """Test buffers under 112 bytes raise TooShortError and nothing else."""
        with pytest.raises(TooShortError) as exc_info:
            decode_delegation(b"\x01" * length)
        assert exc_info.value.length == length
        assert exc_info.value.minimum == 112

    def test_every_short_length_is_too_short(self):
        """Test all lengths below the minimum are rejected the same way."""
        for length in range(DELEGATION_LAYOUT.min_length):
            with pytest.raises(TooShortError):
                decode_delegation(bytes(length))

    def test_too_short_is_decode_error(self):
        """Test TooShortError can be caught as DecodeError or ValueError."""
        assert issubclass(TooShortError, DecodeError)
        assert issubclass(DecodeError, ValueError)


class TestMiningRecordLayout:
    """Tests for decode_mining_record."""

    def test_decodes_all_fields(self, authority):
        """Test every field of the Miner account."""
        deployed = list(range(1, 26))
        cumulative = [i * 10 for i in range(25)]
        factor = bytes(range(16))
        data = build_mining_record_bytes(
            authority=authority,
            checkpoint_id=4,
            round_id=5,
            deployed=deployed,
            cumulative=cumulative,
            checkpoint_fee=7,
            last_claim_ore_at=-1,
            last_claim_sol_at=1_700_000_000,
            rewards_factor=factor,
            rewards_sol=11,
            rewards_ore=12,
            refined_ore=13,
        )
        assert len(data) == 536

        record = decode_mining_record(data)

        assert record.authority == authority
        assert record.deployed == deployed
        assert record.cumulative == cumulative
        assert record.checkpoint_fee == 7
        assert record.checkpoint_id == 4
        assert record.last_claim_ore_at == -1
        assert record.last_claim_sol_at == 1_700_000_000
        assert record.rewards_factor == factor
        assert record.rewards_sol == 11
        assert record.rewards_ore == 12
        assert record.refined_ore == 13
        assert record.round_id == 5
        assert record.needs_checkpoint is True

    def test_round_id_offset(self, authority):
        """Test round_id is read from bytes 512..520."""
        data = bytearray(build_mining_record_bytes(authority=authority, checkpoint_id=0, round_id=0))
        data[512:520] = struct.pack("<Q", 99)
        assert decode_mining_record(bytes(data)).round_id == 99

    @pytest.mark.parametrize("length", [0, 112, 520, 535])
    def test_too_short(self, length):
        """Test buffers under 536 bytes raise TooShortError."""
        with pytest.raises(TooShortError) as exc_info:
            decode_mining_record(bytes(length))
        assert exc_info.value.minimum == 536

    def test_checkpoint_current(self, authority):
        """Test needs_checkpoint is False when checkpoint_id equals round_id."""
        data = build_mining_record_bytes(authority=authority, checkpoint_id=5, round_id=5)
        assert decode_mining_record(data).needs_checkpoint is False


class TestStructLayout:
    """Tests for the layout descriptor itself."""

    def test_field_past_minimum_rejected(self):
        """Test a descriptor cannot declare a field beyond its minimum length."""
        with pytest.raises(ValueError):
            StructLayout("Bad", 1, (FieldSpec("x", 8, 8, U64),), min_length=12)

    def test_unknown_kind(self):
        """Test an unknown field kind raises DecodeError."""
        layout = StructLayout("Odd", 1, (FieldSpec("x", 0, 4, "u32"),), min_length=4)
        with pytest.raises(DecodeError):
            layout.decode(b"\x00" * 4)

    def test_layouts_are_versioned(self):
        assert DELEGATION_LAYOUT.version == 1
        assert MINING_RECORD_LAYOUT.version == 1
        assert MINING_RECORD_LAYOUT.field("round_id").offset == 512

    def test_unknown_field_lookup(self):
        with pytest.raises(KeyError):
            DELEGATION_LAYOUT.field("nope")
