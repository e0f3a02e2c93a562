"""Tests for src/state/canonical.py."""

import pytest

from src.state.canonical import (
    canonical_json_bytes,
    digest_document,
    domain_separator,
    sha256_hex,
)


class TestCanonicalJson:
    def test_key_order_irrelevant(self):
        assert canonical_json_bytes({"b": 1, "a": 2}) == canonical_json_bytes({"a": 2, "b": 1})

    def test_compact(self):
        assert canonical_json_bytes({"a": [1, 2], "b": None}) == b'{"a":[1,2],"b":null}'

    def test_big_ints_exact(self):
        assert canonical_json_bytes(2**255) == str(2**255).encode("ascii")

    def test_utf8(self):
        assert canonical_json_bytes("é") == '"é"'.encode("utf-8")

    def test_rejects_floats_with_path(self):
        with pytest.raises(TypeError, match=r"\$\.vaults\.v1\.total_value"):
            canonical_json_bytes({"vaults": {"v1": {"total_value": 1.5}}})

    def test_rejects_non_str_keys(self):
        with pytest.raises(TypeError):
            canonical_json_bytes({1: "a"})

    def test_rejects_surrogates(self):
        with pytest.raises(TypeError):
            canonical_json_bytes(["\ud800"])

    def test_rejects_sets(self):
        with pytest.raises(TypeError, match="frozenset"):
            canonical_json_bytes({"pending": frozenset({1})})


class TestDomainSeparation:
    def test_format(self):
        assert domain_separator("hub-state") == b"vaulthub:hub-state:v1\x00"

    def test_rejects_bad_labels(self):
        for label in ("", "Hub", "a\x00b", "-x", "a b"):
            with pytest.raises(ValueError):
                domain_separator(label)

    def test_rejects_non_str(self):
        with pytest.raises(TypeError):
            domain_separator(b"hub-state")


class TestDigest:
    def test_sha256_prefix(self):
        assert sha256_hex(b"").startswith("0x")
        assert len(sha256_hex(b"")) == 66

    def test_label_separates_documents(self):
        assert digest_document("hub-state", {}) != digest_document("ledger-state", {})

    def test_stable(self):
        assert digest_document("hub-state", {"a": 1}) == digest_document("hub-state", {"a": 1})
