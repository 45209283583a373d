"""
Transaction builder for the benchmark transfer.

A transfer is always bound to a blockhash the caller just queried from the
endpoint it will be submitted to; blockhashes are never shared across
endpoints.
"""

from __future__ import annotations

from typing import List, Optional

from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer
from solders.transaction import Transaction

from solbench.domain.errors import InvalidAmountError

MEMO_PROGRAM_ID = Pubkey.from_string("MemoSq4gqABAXKb96qnH8TysNcWxMyWCqXgDLGmfcHr")
MAX_LAMPORTS = 2**64 - 1


def validate_lamports(lamports: int) -> int:
    if isinstance(lamports, bool) or not isinstance(lamports, int):
        raise InvalidAmountError(f"Transfer amount must be an integer, got {lamports!r}")
    if lamports <= 0:
        raise InvalidAmountError(f"Transfer amount must be positive, got {lamports}")
    if lamports > MAX_LAMPORTS:
        raise InvalidAmountError(f"Transfer amount {lamports} exceeds u64 range")
    return lamports


def build_transfer(
    sender: Pubkey,
    recipient: Pubkey,
    lamports: int,
    blockhash: Hash,
    memo: Optional[str] = None,
) -> Message:
    """
    Build an unsigned transfer message paid for by `sender`.

    Parameters
    ----------
    sender : Pubkey
        Payer and source account.
    recipient : Pubkey
        Destination account.
    lamports : int
        Amount to move; must be a positive u64.
    blockhash : Hash
        Recent blockhash queried from the target endpoint.
    memo : str, optional
        Text for an SPL Memo instruction appended after the transfer.

    Raises
    ------
    InvalidAmountError
        If `lamports` is not a positive u64.
    """
    validate_lamports(lamports)
    instructions: List[Instruction] = [
        transfer(TransferParams(from_pubkey=sender, to_pubkey=recipient, lamports=lamports))
    ]
    if memo:
        instructions.append(
            Instruction(program_id=MEMO_PROGRAM_ID, data=memo.encode("utf-8"), accounts=[])
        )
    return Message.new_with_blockhash(instructions, sender, blockhash)


def sign_transfer(message: Message, signer: Keypair) -> Transaction:
    """Sign a transfer message with the payer's keypair."""
    return Transaction([signer], message, message.recent_blockhash)


__all__ = ["MEMO_PROGRAM_ID", "build_transfer", "sign_transfer", "validate_lamports"]
