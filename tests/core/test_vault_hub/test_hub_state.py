"""Tests for src/core/vault_hub/state.py: state construction and serialization."""

import json

import pytest

from src.core.messages import Envelope
from src.core.vault_hub import (
    ApplyVaultReport,
    ConnectVault,
    MintShares,
    RegistryParams,
    step,
)
from src.core.vault_hub.state import (
    RECORD_VAR_NAMES,
    initial_state,
    record_from_dict,
    state_digest,
    state_from_dict,
    state_to_dict,
)
from src.core.vault_hub.types import HubState, VaultRecord

T0 = 1_700_000_000


def _busy_state() -> HubState:
    s = initial_state("admin", "oracle", share_ledger="ledger", factory="factory")
    for sender, msg in [
        ("admin", ConnectVault(1, "v1", 1000, 5000, 100, 50)),
        ("oracle", ApplyVaultReport(1, "v1", 500, 480)),
        ("admin", MintShares(4, "v1", 250, "alice")),
    ]:
        r = step(s, Envelope(sender, T0, msg))
        assert r.accepted, r.rejection
        s = r.state
    return s


class TestInitialState:
    def test_returns_hub_state(self):
        s = initial_state("admin", "oracle")
        assert isinstance(s, HubState)
        assert s.vaults == {}
        assert s.paused is False
        assert s.share_ledger is None
        assert s.total_shares_minted == 0
        assert s.params == RegistryParams()

    def test_requires_identities(self):
        with pytest.raises(ValueError):
            initial_state("", "oracle")
        with pytest.raises(ValueError):
            initial_state("admin", "")

    def test_frozen(self):
        s = initial_state("admin", "oracle")
        with pytest.raises(AttributeError):
            s.paused = True  # type: ignore


class TestRecordVarNames:
    def test_count(self):
        assert len(RECORD_VAR_NAMES) == 10

    def test_record_from_dict_rejects_bool_int_mixup(self):
        d = {name: 0 for name in RECORD_VAR_NAMES}
        d["connected"] = 1
        with pytest.raises(TypeError):
            record_from_dict(d)
        d["connected"] = True
        d["share_limit"] = True
        with pytest.raises(TypeError):
            record_from_dict(d)


class TestRoundTrip:
    def test_initial_state_round_trip(self):
        s = initial_state("admin", "oracle")
        assert state_from_dict(state_to_dict(s)) == s

    def test_busy_state_round_trip(self):
        s = _busy_state()
        assert state_from_dict(state_to_dict(s)) == s

    def test_survives_json(self):
        s = _busy_state()
        d = json.loads(json.dumps(state_to_dict(s)))
        assert state_from_dict(d) == s

    def test_replay_window_preserved(self):
        d = state_to_dict(_busy_state())
        assert d["replay"]["admin"] == {"consumed_below": 0, "pending": [1, 4]}

    def test_missing_field(self):
        d = state_to_dict(_busy_state())
        del d["outbound_seq"]
        with pytest.raises(KeyError):
            state_from_dict(d)

    def test_invariant_violation_rejected(self):
        d = state_to_dict(_busy_state())
        d["total_shares_minted"] = 1
        with pytest.raises(ValueError, match="inv_total_minted_matches_liabilities"):
            state_from_dict(d)

    def test_paused_must_be_bool(self):
        d = state_to_dict(_busy_state())
        d["paused"] = 1
        with pytest.raises(TypeError, match="paused"):
            state_from_dict(d)

    def test_params_reject_type_mixups(self):
        for name, bad in (
            ("report_freshness_seconds", True),
            ("report_freshness_seconds", "3600"),
            ("allow_disconnect_with_liability", 0),
        ):
            d = state_to_dict(_busy_state())
            d["params"][name] = bad
            with pytest.raises(TypeError, match=name):
                state_from_dict(d)

    def test_params_missing_field(self):
        d = state_to_dict(_busy_state())
        del d["params"]["allow_disconnect_with_liability"]
        with pytest.raises(KeyError):
            state_from_dict(d)


class TestDigest:
    def test_deterministic(self):
        assert state_digest(_busy_state()) == state_digest(_busy_state())

    def test_format(self):
        digest = state_digest(initial_state("admin", "oracle"))
        assert digest.startswith("0x")
        assert len(digest) == 66

    def test_changes_with_state(self):
        s = _busy_state()
        r = step(s, Envelope("admin", T0, MintShares(5, "v1", 1, "alice")))
        assert state_digest(r.state) != state_digest(s)

    def test_record_order_irrelevant(self):
        a = VaultRecord(connected=True, share_limit=1)
        b = VaultRecord(connected=True, share_limit=2)
        s1 = HubState(admin="admin", oracle="oracle", vaults={"a": a, "b": b})
        s2 = HubState(admin="admin", oracle="oracle", vaults={"b": b, "a": a})
        assert state_digest(s1) == state_digest(s2)
