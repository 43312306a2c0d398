"""
ORE program bindings: program ids, PDA derivation and instruction builders.

Instruction data uses the Steel framework format: a 1-byte enum
discriminator followed by the little-endian instruction struct.
"""
import struct
from typing import List, Sequence, Tuple

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID

from protocol.models import SQUARE_COUNT

ORE_PROGRAM_ID = Pubkey.from_string("LBUZKhRxPF3XUpBCjp4YzTKgLccjZhTSDM9YuVaPwxo")
ENTROPY_API_PROGRAM_ID = Pubkey.from_string("3jSkUuYBoJzQPMEzTvkDFXCZUBksPamrVhrnHR9igu2X")
ORE_TREASURY = Pubkey.from_string("45db2FSR4mcXdSVVZbKbwojU6uYDpMyhpEi7cC8nHaWG")

CHECKPOINT_DISCRIMINATOR = 2
DEPLOY_DISCRIMINATOR = 6


def encode_u64(value: int) -> bytes:
    return struct.pack("<Q", value)


def encode_u32(value: int) -> bytes:
    return struct.pack("<I", value)


def automation_pda(authority: Pubkey) -> Tuple[Pubkey, int]:
    return Pubkey.find_program_address([b"automation", bytes(authority)], ORE_PROGRAM_ID)


def miner_pda(authority: Pubkey) -> Tuple[Pubkey, int]:
    return Pubkey.find_program_address([b"miner", bytes(authority)], ORE_PROGRAM_ID)


def board_pda() -> Tuple[Pubkey, int]:
    return Pubkey.find_program_address([b"board"], ORE_PROGRAM_ID)


def round_pda(round_id: int) -> Tuple[Pubkey, int]:
    return Pubkey.find_program_address([b"round", encode_u64(round_id)], ORE_PROGRAM_ID)


def entropy_var_pda(board: Pubkey, var_id: int = 0) -> Tuple[Pubkey, int]:
    return Pubkey.find_program_address(
        [b"var", bytes(board), encode_u64(var_id)], ENTROPY_API_PROGRAM_ID
    )


def squares_to_mask(squares: Sequence[bool]) -> int:
    """Pack the 25 square flags into a u32 bitmask, square 0 in bit 0."""
    if len(squares) != SQUARE_COUNT:
        raise ValueError(f"squares must have length {SQUARE_COUNT}, got {len(squares)}")
    mask = 0
    for i, selected in enumerate(squares):
        if selected:
            mask |= 1 << i
    return mask


def checkpoint_instruction(signer: Pubkey, authority: Pubkey, round_id: int) -> Instruction:
    """
    Build a Checkpoint instruction realizing the miner's rewards for round_id.

    Accounts: signer, board, miner, round, treasury, system program.
    """
    board = board_pda()[0]
    miner = miner_pda(authority)[0]
    round_address = round_pda(round_id)[0]
    accounts: List[AccountMeta] = [
        AccountMeta(signer, is_signer=True, is_writable=True),
        AccountMeta(board, is_signer=False, is_writable=True),
        AccountMeta(miner, is_signer=False, is_writable=True),
        AccountMeta(round_address, is_signer=False, is_writable=True),
        AccountMeta(ORE_TREASURY, is_signer=False, is_writable=True),
        AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
    ]
    return Instruction(ORE_PROGRAM_ID, bytes([CHECKPOINT_DISCRIMINATOR]), accounts)


def deploy_instruction(
    signer: Pubkey,
    authority: Pubkey,
    amount: int,
    round_id: int,
    squares: Sequence[bool],
) -> Instruction:
    """
    Build a Deploy instruction committing `amount` lamports into round_id.

    Data: discriminator (1) + amount u64 (8) + square mask u32 (4) = 13 bytes.
    """
    mask = squares_to_mask(squares)
    board = board_pda()[0]
    accounts: List[AccountMeta] = [
        AccountMeta(signer, is_signer=True, is_writable=True),
        AccountMeta(authority, is_signer=False, is_writable=True),
        AccountMeta(automation_pda(authority)[0], is_signer=False, is_writable=True),
        AccountMeta(board, is_signer=False, is_writable=True),
        AccountMeta(miner_pda(authority)[0], is_signer=False, is_writable=True),
        AccountMeta(round_pda(round_id)[0], is_signer=False, is_writable=True),
        AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(entropy_var_pda(board, 0)[0], is_signer=False, is_writable=True),
        AccountMeta(ENTROPY_API_PROGRAM_ID, is_signer=False, is_writable=False),
    ]
    data = bytes([DEPLOY_DISCRIMINATOR]) + encode_u64(amount) + encode_u32(mask)
    return Instruction(ORE_PROGRAM_ID, data, accounts)
