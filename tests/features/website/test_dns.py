"""Tests for the namesdao DNS record model."""

import json

import pytest

from namesdao_wallet.features.website.dns import (
    DEFAULT_TTL,
    get_hostname_for_name,
    merge_name,
    namesdao_blob_from_metadata,
    normalize_hostname,
    parse_namesdao_string,
    resolve_existing_host,
    serialize_namesdao,
    strip_protocol,
    verify_name_configured,
)


def _model(fqdn, host, ttl=DEFAULT_TTL, record_type="CNAME", record_host="@"):
    return {fqdn: {"dns": {"default": [{"type": record_type, "host": record_host, "value": host, "ttl": ttl}]}}}


class TestHostnameNormalization:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("https://example.com/", "example.com"),
            ("http://example.com", "example.com"),
            ("HTTPS://Example.com/path?q=1", "example.com"),
            ("example.com/", "example.com"),
            ("  my-site.pages.dev  ", "my-site.pages.dev"),
        ],
    )
    def test_strip_protocol(self, raw, expected):
        assert normalize_hostname(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   ", "https://", "exa mple.com"])
    def test_invalid(self, raw):
        assert normalize_hostname(raw) is None

    def test_strip_protocol_empty(self):
        assert strip_protocol(None) == ""


class TestParseAndSerialize:
    @pytest.mark.parametrize("value", [None, "", "not json", "[1, 2]", 42])
    def test_malformed_reads_as_empty(self, value):
        assert parse_namesdao_string(value) == {}

    def test_compact_serialization(self):
        model = _model("alice.xch", "example.com")
        text = serialize_namesdao(model)
        assert " " not in text
        assert parse_namesdao_string(text) == model

    def test_blob_from_metadata(self):
        assert namesdao_blob_from_metadata({"namesdao": "{}"}) == "{}"
        assert namesdao_blob_from_metadata(None) is None


class TestMergeName:
    def test_replaces_existing_record(self):
        model = {
            "alice.xch": {"dns": {"default": [
                {"type": "CNAME", "host": "@", "value": "old.com", "ttl": 60},
                {"type": "TXT", "host": "@", "value": "hello", "ttl": 60},
            ]}},
            "bob.xch": {"dns": {"default": []}},
        }

        merged = merge_name(model, "alice.xch", "new.com")

        assert merged["alice.xch"]["dns"]["default"] == [
            {"type": "CNAME", "host": "@", "value": "new.com", "ttl": DEFAULT_TTL}
        ]
        assert merged["bob.xch"] == model["bob.xch"]
        assert model["alice.xch"]["dns"]["default"][0]["value"] == "old.com"

    def test_idempotent(self):
        once = merge_name({}, "alice.xch", "example.com")
        twice = merge_name(once, "alice.xch", "example.com")
        assert once == twice
        assert json.loads(serialize_namesdao(once)) == json.loads(serialize_namesdao(twice))


class TestVerifyNameConfigured:
    def test_exact_match(self):
        assert verify_name_configured(_model("alice.xch", "example.com"), "alice.xch", "example.com") is True

    @pytest.mark.parametrize(
        "model",
        [
            _model("alice.xch", "other.com"),
            _model("alice.xch", "example.com", record_type="A"),
            _model("alice.xch", "example.com", record_host="www"),
            _model("alice.xch", "example.com", ttl="3600"),
            _model("bob.xch", "example.com"),
            {"alice.xch": {"dns": "broken"}},
        ],
    )
    def test_mismatch(self, model):
        assert verify_name_configured(model, "alice.xch", "example.com") is False


class TestResolveExistingHost:
    def test_fully_qualified_key(self):
        assert resolve_existing_host(_model("alice.xch", "example.com"), "alice") == "example.com"

    def test_bare_key(self):
        assert resolve_existing_host(_model("alice", "example.com"), "alice.xch") == "example.com"

    def test_missing(self):
        assert resolve_existing_host({}, "alice") is None
        assert get_hostname_for_name(_model("alice.xch", ""), "alice.xch") is None
