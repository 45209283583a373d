from __future__ import annotations

import secrets

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.signature import Signature
from solders.system_program import ID as SYSTEM_PROGRAM_ID

from solbench.domain.errors import InvalidAmountError
from solbench.workers.builder import MEMO_PROGRAM_ID, build_transfer, sign_transfer

LAMPORTS = 1


def _blockhash() -> Hash:
    return Hash(secrets.token_bytes(32))


def test_build_transfer_binds_blockhash_and_payer(sender: Keypair, recipient) -> None:
    blockhash = _blockhash()

    message = build_transfer(sender.pubkey(), recipient, LAMPORTS, blockhash)

    assert message.recent_blockhash == blockhash
    assert message.account_keys[0] == sender.pubkey()
    assert recipient in message.account_keys
    assert len(message.instructions) == 1
    transfer_ix = message.instructions[0]
    assert message.account_keys[transfer_ix.program_id_index] == SYSTEM_PROGRAM_ID


def test_build_transfer_appends_memo_instruction(sender: Keypair, recipient) -> None:
    message = build_transfer(
        sender.pubkey(), recipient, LAMPORTS, _blockhash(), memo="solbench:abcd:0"
    )

    assert len(message.instructions) == 2
    memo_ix = message.instructions[1]
    assert message.account_keys[memo_ix.program_id_index] == MEMO_PROGRAM_ID
    assert bytes(memo_ix.data) == b"solbench:abcd:0"


@pytest.mark.parametrize("lamports", [0, -1, -1_000, 2**64, True, 1.5])
def test_build_transfer_rejects_invalid_amounts(sender: Keypair, recipient, lamports) -> None:
    with pytest.raises(InvalidAmountError):
        build_transfer(sender.pubkey(), recipient, lamports, _blockhash())


def test_sign_transfer_produces_verifiable_signature(sender: Keypair, recipient) -> None:
    message = build_transfer(sender.pubkey(), recipient, LAMPORTS, _blockhash())

    transaction = sign_transfer(message, sender)

    assert transaction.signatures[0] != Signature.default()
    transaction.verify()


def test_distinct_memos_give_distinct_signatures_for_same_blockhash(
    sender: Keypair, recipient
) -> None:
    blockhash = _blockhash()
    first = sign_transfer(
        build_transfer(sender.pubkey(), recipient, LAMPORTS, blockhash, memo="solbench:a:0"),
        sender,
    )
    second = sign_transfer(
        build_transfer(sender.pubkey(), recipient, LAMPORTS, blockhash, memo="solbench:a:1"),
        sender,
    )

    assert first.signatures[0] != second.signatures[0]
