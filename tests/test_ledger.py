# Area: Chain Tests
"""Tests for the web3 ledger adapter (no node required)."""

import asyncio
import json
from unittest.mock import AsyncMock, Mock

import pytest
from web3.exceptions import ContractLogicError

from tests.helpers import ALICE, created, resolved
from rps_dapp._chain.ledger import Web3Ledger, Web3Wallet, _to_record, load_abi
from rps_dapp.errors import LedgerCallError
from rps_dapp.types import ROUND_CREATED, ROUND_RESOLVED, Choice

ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
ABI = [{"type": "function", "name": "jackpot", "inputs": [], "outputs": []}]


def make_ledger():
    w3 = Mock()
    ledger = Web3Ledger(w3, ADDRESS.lower(), ABI)
    return ledger, w3, w3.eth.contract.return_value


def raw_event(name, block, log_index, args):
    return {
        "event": name,
        "blockNumber": block,
        "logIndex": log_index,
        "args": args,
        "transactionHash": b"\x01" * 32,
    }


class TestLoadAbi:
    """Tests for load_abi()."""

    def test_truffle_artifact(self, tmp_path):
        path = tmp_path / "RPS.json"
        path.write_text(json.dumps({"contractName": "RPS", "abi": ABI}))
        assert load_abi(path) == ABI

    def test_bare_list(self, tmp_path):
        path = tmp_path / "abi.json"
        path.write_text(json.dumps(ABI))
        assert load_abi(str(path)) == ABI

    def test_no_abi(self, tmp_path):
        path = tmp_path / "x.json"
        path.write_text(json.dumps({"bytecode": "0x"}))
        with pytest.raises(ValueError):
            load_abi(path)


class TestToRecord:
    """Tests for decoding web3 event data."""

    def test_fields(self):
        record = _to_record(raw_event(ROUND_CREATED, 7, 2, {"roundId": 5}))
        assert record.topic == ROUND_CREATED
        assert record.log_id == (7, 2)
        assert record.args == {"roundId": 5}
        assert record.tx_hash == "0x" + "01" * 32


class TestWeb3Ledger:
    """Tests for Web3Ledger calls and error wrapping."""

    def test_address_checksummed(self):
        ledger, w3, _ = make_ledger()
        assert ledger.address == ADDRESS
        w3.eth.contract.assert_called_once_with(address=ADDRESS, abi=ABI)

    def test_jackpot(self):
        ledger, _, contract = make_ledger()
        contract.functions.jackpot.return_value.call = AsyncMock(return_value=42)
        assert asyncio.run(ledger.jackpot()) == 42

    def test_jackpot_failure_wrapped(self):
        ledger, _, contract = make_ledger()
        contract.functions.jackpot.return_value.call = AsyncMock(side_effect=OSError("refused"))
        with pytest.raises(LedgerCallError) as exc_info:
            asyncio.run(ledger.jackpot())
        assert exc_info.value.reverted is False

    def test_revert_marked(self):
        ledger, _, contract = make_ledger()
        contract.functions.revealChoice.return_value.transact = AsyncMock(
            side_effect=ContractLogicError("execution reverted: Invalid commitment")
        )
        with pytest.raises(LedgerCallError) as exc_info:
            asyncio.run(ledger.reveal_choice(5, Choice.ROCK, "secret", ALICE))
        assert exc_info.value.reverted is True
        assert "Invalid commitment" in exc_info.value.reason

    def test_failed_receipt_marked_reverted(self):
        ledger, w3, contract = make_ledger()
        contract.functions.joinSecretRound.return_value.transact = AsyncMock(return_value=b"\x12" * 32)
        w3.eth.wait_for_transaction_receipt = AsyncMock(return_value={"status": 0})
        with pytest.raises(LedgerCallError) as exc_info:
            asyncio.run(ledger.join_secret_round(5, Choice.PAPER, 1, ALICE))
        assert exc_info.value.reverted is True

    def test_transact_decodes_receipt_events(self):
        ledger, w3, contract = make_ledger()
        call = contract.functions.createSecretRound.return_value
        call.transact = AsyncMock(return_value=b"\x12" * 32)
        w3.eth.wait_for_transaction_receipt = AsyncMock(return_value={"status": 1})
        contract.events.RoundCreated.return_value.process_receipt.return_value = [
            raw_event(ROUND_CREATED, 9, 0, {"roundId": 5}),
        ]
        contract.events.RoundResolved.return_value.process_receipt.return_value = []

        result = asyncio.run(ledger.create_secret_round(b"\x00" * 32, 7, ALICE))
        assert result.tx_hash == "0x" + "12" * 32
        assert [e.topic for e in result.events] == [ROUND_CREATED]
        call.transact.assert_awaited_once_with({"from": ALICE, "value": 7})
        contract.functions.createSecretRound.assert_called_once_with(b"\x00" * 32)

    def test_stream_polls_from_next_block(self):
        ledger, _, _ = make_ledger()
        ledger.block_number = AsyncMock(side_effect=[5, 5, 8])
        ledger._get_logs = AsyncMock(side_effect=[
            [created(2, block=5, log_index=1), created(1, block=4)],
            [created(3, block=7)],
        ])

        async def scenario():
            seen = []
            stream = ledger.stream(ROUND_CREATED, 4, poll_interval=0)
            async for record in stream:
                seen.append(record.log_id)
                if len(seen) == 3:
                    break
            await stream.aclose()
            return seen

        assert asyncio.run(scenario()) == [(4, 0), (5, 1), (7, 0)]
        calls = [c.args for c in ledger._get_logs.await_args_list]
        assert calls == [(ROUND_CREATED, 4, 5), (ROUND_CREATED, 6, 8)]

    def test_all_events_merges_topics(self):
        ledger, _, _ = make_ledger()
        ledger._get_logs = AsyncMock(side_effect=[[created(1, block=1)], [resolved(1, block=2)]])
        records = asyncio.run(ledger.all_events(0, 10))
        assert {r.topic for r in records} == {ROUND_CREATED, ROUND_RESOLVED}


class TestWeb3Wallet:
    """Tests for Web3Wallet."""

    def test_first_account(self):
        w3 = Mock()

        async def accounts():
            return [ALICE]

        type(w3.eth).accounts = property(lambda self: accounts())
        assert asyncio.run(Web3Wallet(w3).get_active_account()) == ALICE
