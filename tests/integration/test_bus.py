"""End-to-end tests for src/integration/bus.py: hub and ledger wired together."""

import logging

import pytest

from src.core.errors import ErrorCode
from src.core.share_ledger import (
    Burn,
    Mint,
    Rebase,
    TransferShares,
    get_balance_of,
    get_shares_of,
    get_total_pooled_value,
    get_total_shares,
)
from src.core.vault_hub import (
    ApplyVaultReport,
    BurnShares,
    ConnectVault,
    DisconnectVault,
    MintShares,
    Pause,
    get_total_shares_minted,
    get_vault_record,
    initial_state as hub_initial_state,
)
from src.core.share_ledger import initial_state as ledger_initial_state
from src.integration import MessageBus, build_bus, parse_config

HUB = "hub"
LEDGER = "ledger"
ADMIN = "admin"
ORACLE = "oracle"
VAULT = "vault-1"
T0 = 1_700_000_000


def _bus() -> MessageBus:
    return build_bus(
        parse_config(
            {
                "schema": "vaulthub/deployment/v1",
                "hub": {"address": HUB, "admin": ADMIN, "oracle": ORACLE},
                "ledger": {"address": LEDGER},
            }
        )
    )


def _live_bus(total_value: int = 500) -> MessageBus:
    bus = _bus()
    assert bus.send(ADMIN, HUB, ConnectVault(1, VAULT, 1000, 5000, 100, 50), now=T0).accepted
    assert bus.send(ORACLE, HUB, ApplyVaultReport(1, VAULT, total_value, total_value), now=T0).accepted
    return bus


class TestWiring:
    def test_build_bus_binds_both_sides(self):
        bus = _bus()
        assert bus.hub_state.share_ledger == LEDGER
        assert bus.ledger_state.registry == HUB
        assert bus.ledger_state.deployer == ADMIN

    def test_same_address_rejected(self):
        with pytest.raises(ValueError):
            MessageBus(
                hub_address="x",
                ledger_address="x",
                hub_state=hub_initial_state(ADMIN, ORACLE),
                ledger_state=ledger_initial_state(ADMIN),
            )

    def test_unknown_destination(self):
        with pytest.raises(ValueError):
            _bus().send(ADMIN, "nowhere", Pause(1), now=T0)


class TestMintFlow:
    def test_report_rebases_ledger(self):
        bus = _live_bus()
        assert get_total_pooled_value(bus.ledger_state) == 500
        assert bus.last_accepted(Rebase).sender == HUB

    def test_mint_reaches_ledger(self):
        bus = _live_bus()
        d = bus.send(ADMIN, HUB, MintShares(2, VAULT, 100, "alice"), now=T0)
        assert d.accepted
        assert get_shares_of(bus.ledger_state, "alice") == 100
        assert get_balance_of(bus.ledger_state, "alice") == 500
        assert get_total_shares_minted(bus.hub_state) == 100
        assert bus.is_consistent()

    def test_rejected_mint_sends_nothing(self):
        bus = _live_bus()
        d = bus.send(ADMIN, HUB, MintShares(2, VAULT, 1001, "alice"), now=T0)
        assert not d.accepted
        assert d.rejection.code is ErrorCode.MAX_LIABILITY
        assert bus.pending() == 0
        assert get_total_shares(bus.ledger_state) == 0
        assert bus.dead_letters == [d]

    def test_value_drop_rebases_holders(self):
        bus = _live_bus()
        bus.send(ADMIN, HUB, MintShares(2, VAULT, 400, "alice"), now=T0)
        bus.send(ORACLE, HUB, ApplyVaultReport(2, VAULT, 100, 500), now=T0 + 60)
        assert get_balance_of(bus.ledger_state, "alice") == 100
        assert bus.is_consistent()

    def test_holder_transfer_independent_of_hub(self):
        bus = _live_bus()
        bus.send(ADMIN, HUB, MintShares(2, VAULT, 100, "alice"), now=T0)
        assert bus.send("alice", LEDGER, TransferShares(1, "bob", 25), now=T0).accepted
        assert get_shares_of(bus.ledger_state, "bob") == 25
        assert bus.is_consistent()

    def test_outsider_cannot_mint_on_ledger(self):
        bus = _live_bus()
        d = bus.send(ADMIN, LEDGER, Mint(99, ADMIN, 1), now=T0)
        assert d.rejection.code is ErrorCode.LEDGER_UNAUTHORIZED


class TestBurnFlow:
    def test_burn_from_holder(self):
        bus = _live_bus()
        bus.send(ADMIN, HUB, MintShares(2, VAULT, 100, "alice"), now=T0)
        assert bus.send(ADMIN, HUB, BurnShares(3, VAULT, 40, account="alice"), now=T0).accepted
        assert get_shares_of(bus.ledger_state, "alice") == 60
        assert get_vault_record(bus.hub_state, VAULT).liability_shares == 60
        assert bus.is_consistent()

    def test_burn_from_empty_account_dead_letters(self, caplog):
        bus = _live_bus()
        bus.send(ADMIN, HUB, MintShares(2, VAULT, 100, "alice"), now=T0)
        with caplog.at_level(logging.WARNING, logger="src.integration.bus"):
            assert bus.send(ADMIN, HUB, BurnShares(3, VAULT, 40), now=T0).accepted
        # Hub accepted; the ledger refused because the vault holds no shares.
        last = bus.dead_letters[-1]
        assert isinstance(last.message, Burn)
        assert last.rejection.code is ErrorCode.INSUFFICIENT_BALANCE
        assert not bus.is_consistent()
        assert "rejected" in caplog.text

    def test_dead_lettered_id_stops_holding_replay_state(self):
        bus = _live_bus()
        bus.send(ADMIN, HUB, MintShares(2, VAULT, 100, "alice"), now=T0)
        bus.send(ADMIN, HUB, BurnShares(3, VAULT, 40), now=T0)
        gap = bus.dead_letters[-1].message.query_id
        for query_id in range(2, 1032):
            assert bus.send(ORACLE, HUB, ApplyVaultReport(query_id, VAULT, 500, 500), now=T0).accepted
        window = bus.ledger_state.replay.windows[HUB]
        assert window.pending == frozenset()
        assert window.consumed_below == bus.hub_state.outbound_seq
        assert bus.ledger_state.replay.seen(HUB, gap)
        # Oracle ids started at 1 and still compact.
        assert bus.hub_state.replay.windows[ORACLE].pending == frozenset()
        assert bus.hub_state.replay.windows[ORACLE].consumed_below == 1032


class TestAtLeastOnceDelivery:
    def test_redelivered_mint_is_replay(self, caplog):
        bus = _live_bus()
        bus.send(ADMIN, HUB, MintShares(2, VAULT, 100, "alice"), now=T0)
        original = bus.last_accepted(Mint)
        with caplog.at_level(logging.WARNING, logger="src.integration.bus"):
            again = bus.redeliver(original)
        assert not again.accepted
        assert again.rejection.code is ErrorCode.REPLAY
        assert get_shares_of(bus.ledger_state, "alice") == 100
        assert bus.is_consistent()
        assert "duplicate" in caplog.text

    def test_redelivered_external_message_is_replay(self):
        bus = _live_bus()
        first = bus.send(ADMIN, HUB, MintShares(2, VAULT, 100, "alice"), now=T0)
        again = bus.redeliver(first)
        assert again.rejection.code is ErrorCode.REPLAY
        assert get_total_shares_minted(bus.hub_state) == 100
        assert bus.pending() == 0

    def test_eventual_consistency(self):
        bus = _live_bus()
        bus.send(ADMIN, HUB, MintShares(2, VAULT, 100, "alice"), now=T0, drain=False)
        bus.send(ADMIN, HUB, MintShares(3, VAULT, 50, "bob"), now=T0, drain=False)
        assert bus.pending() == 2
        assert get_total_shares(bus.ledger_state) == 0
        assert not bus.is_consistent()
        delivered = bus.drain(now=T0)
        assert [type(d.message) for d in delivered] == [Mint, Mint]
        assert [d.message.recipient for d in delivered] == ["alice", "bob"]
        assert bus.is_consistent()

    def test_disconnect_rebases_remaining_value(self):
        bus = _live_bus()
        assert bus.send(ADMIN, HUB, DisconnectVault(2, VAULT), now=T0).accepted
        assert get_total_pooled_value(bus.ledger_state) == 0
        assert bus.is_consistent()
