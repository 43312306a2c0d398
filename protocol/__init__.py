"""
Package containing the on-chain protocol logic for the ORE automation executor.

This package defines the account models, their binary layouts, and the ORE
program bindings (PDAs and instructions) shared by the executor.
"""

from protocol.models import (
    SQUARE_COUNT,
    RoundStatus,
    RoundSnapshot,
    DelegationRecord,
    MiningRecord,
)

from protocol.layouts import (
    DecodeError,
    TooShortError,
    DELEGATION_LAYOUT,
    MINING_RECORD_LAYOUT,
    DELEGATION_EXECUTOR_OFFSET,
    decode_delegation,
    decode_mining_record,
)

__all__ = [
    # Models
    "SQUARE_COUNT",
    "RoundStatus",
    "RoundSnapshot",
    "DelegationRecord",
    "MiningRecord",
    # Layouts
    "DecodeError",
    "TooShortError",
    "DELEGATION_LAYOUT",
    "MINING_RECORD_LAYOUT",
    "DELEGATION_EXECUTOR_OFFSET",
    "decode_delegation",
    "decode_mining_record",
]
