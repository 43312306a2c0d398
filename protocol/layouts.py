"""
Fixed-offset binary layouts of ORE program accounts.

Each layout is a versioned list of field descriptors (offset, width, kind).
Decoding checks the buffer length up front and every read is bounds-checked,
so a malformed account raises DecodeError instead of producing garbage that
would end up in a transaction.
"""
import struct
from typing import Any, Dict, NamedTuple, Tuple

from solders.pubkey import Pubkey

from protocol.models import SQUARE_COUNT, DelegationRecord, MiningRecord


class DecodeError(ValueError):
    """Raised when an account buffer cannot be decoded."""


class TooShortError(DecodeError):
    """Buffer is shorter than the layout's minimum length."""

    def __init__(self, layout: str, length: int, minimum: int):
        self.layout = layout
        self.length = length
        self.minimum = minimum
        super().__init__(
            f"{layout} account data too short: {length} bytes (need {minimum})"
        )


U64 = "u64"
I64 = "i64"
PUBKEY = "pubkey"
U64_ARRAY = "u64[]"
RAW = "raw"

_STRUCT_FORMATS = {U64: "<Q", I64: "<q"}


class FieldSpec(NamedTuple):
    name: str
    offset: int
    size: int
    kind: str

    @property
    def end(self) -> int:
        return self.offset + self.size


class StructLayout:
    """Descriptor for one account type."""

    def __init__(self, name: str, version: int, fields: Tuple[FieldSpec, ...], min_length: int):
        self.name = name
        self.version = version
        self.fields = fields
        self.min_length = min_length
        for spec in fields:
            if spec.end > min_length:
                raise ValueError(
                    f"{name}.{spec.name} ends at {spec.end}, past minimum length {min_length}"
                )

    def field(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise KeyError(name)

    def decode(self, data: bytes) -> Dict[str, Any]:
        """Decode every field of the layout into a dict of Python values."""
        data = bytes(data)
        if len(data) < self.min_length:
            raise TooShortError(self.name, len(data), self.min_length)
        return {spec.name: _read(data, spec) for spec in self.fields}


def _read(data: bytes, spec: FieldSpec) -> Any:
    if spec.end > len(data):
        raise DecodeError(f"field {spec.name} [{spec.offset}:{spec.end}] out of range")
    if spec.kind in _STRUCT_FORMATS:
        (value,) = struct.unpack_from(_STRUCT_FORMATS[spec.kind], data, spec.offset)
        return value
    raw = data[spec.offset:spec.end]
    if spec.kind == PUBKEY:
        return Pubkey.from_bytes(raw)
    if spec.kind == U64_ARRAY:
        return list(struct.unpack(f"<{spec.size // 8}Q", raw))
    if spec.kind == RAW:
        return raw
    raise DecodeError(f"unknown field kind {spec.kind!r} for {spec.name}")


# Automation account. The 8-byte header is the account discriminator.
DELEGATION_LAYOUT = StructLayout(
    name="Automation",
    version=1,
    fields=(
        FieldSpec("amount", 8, 8, U64),
        FieldSpec("authority", 16, 32, PUBKEY),
        FieldSpec("balance", 48, 8, U64),
        FieldSpec("executor", 56, 32, PUBKEY),
        FieldSpec("fee", 88, 8, U64),
        FieldSpec("strategy", 96, 8, U64),
        FieldSpec("mask", 104, 8, U64),
    ),
    min_length=112,
)

# Miner account. min_length leaves margin past round_id.
MINING_RECORD_LAYOUT = StructLayout(
    name="Miner",
    version=1,
    fields=(
        FieldSpec("authority", 8, 32, PUBKEY),
        FieldSpec("deployed", 40, SQUARE_COUNT * 8, U64_ARRAY),
        FieldSpec("cumulative", 240, SQUARE_COUNT * 8, U64_ARRAY),
        FieldSpec("checkpoint_fee", 440, 8, U64),
        FieldSpec("checkpoint_id", 448, 8, U64),
        FieldSpec("last_claim_ore_at", 456, 8, I64),
        FieldSpec("last_claim_sol_at", 464, 8, I64),
        FieldSpec("rewards_factor", 472, 16, RAW),
        FieldSpec("rewards_sol", 488, 8, U64),
        FieldSpec("rewards_ore", 496, 8, U64),
        FieldSpec("refined_ore", 504, 8, U64),
        FieldSpec("round_id", 512, 8, U64),
    ),
    min_length=536,
)

# Offset used by the discovery memcmp filter.
DELEGATION_EXECUTOR_OFFSET = DELEGATION_LAYOUT.field("executor").offset


def decode_delegation(data: bytes) -> DelegationRecord:
    """
    Decode an Automation account.

    Raises:
        TooShortError: If data is shorter than 112 bytes.
    """
    return DelegationRecord(**DELEGATION_LAYOUT.decode(data))


def decode_mining_record(data: bytes) -> MiningRecord:
    """
    Decode a Miner account.

    Raises:
        TooShortError: If data is shorter than 536 bytes.
    """
    return MiningRecord(**MINING_RECORD_LAYOUT.decode(data))
