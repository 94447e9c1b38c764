"""Tests for annotation extraction."""

import logging

import pytest

from svc2dns.derivations import annotations as ann
from svc2dns.models.endpoint import ProviderSpecificProperty

P = ann.ANNOTATION_PREFIX


class TestHostnames:
    def test_split(self):
        annotations = {ann.HOSTNAME_KEY: "a.example.com, b.example.com"}
        assert ann.hostnames(annotations) == ["a.example.com", "b.example.com"]

    def test_missing(self):
        assert ann.hostnames({}) == []

    def test_blank_entries_dropped(self):
        assert ann.hostnames({ann.HOSTNAME_KEY: " , a.example.com ,"}) == ["a.example.com"]

    def test_internal(self):
        annotations = {ann.INTERNAL_HOSTNAME_KEY: "internal.example.com"}
        assert ann.internal_hostnames(annotations) == ["internal.example.com"]
        assert ann.hostnames(annotations) == []


class TestTargets:
    def test_trailing_dot_removed(self):
        annotations = {ann.TARGET_KEY: "lb.example.com., 10.0.0.1"}
        assert ann.targets_from_annotation(annotations) == ["lb.example.com", "10.0.0.1"]

    def test_lone_dot_dropped(self):
        assert ann.targets_from_annotation({ann.TARGET_KEY: "., 10.0.0.1"}) == ["10.0.0.1"]

    def test_missing(self):
        assert ann.targets_from_annotation({}) == []


class TestParseTtl:
    @pytest.mark.parametrize("value,expected", [
        ("300", 300),
        ("1", 1),
        ("2147483647", 2147483647),
        ("10s", 10),
        ("5m", 300),
        ("1h30m", 5400),
        ("1.5s", 1),
        ("1500ms", 1),
        (" 60 ", 60),
    ])
    def test_valid(self, value, expected):
        assert ann.parse_ttl(value) == expected

    @pytest.mark.parametrize("value", [
        "0",
        "-5",
        "2147483648",
        "500ms",
        "abc",
        "10 seconds",
        "",
        "-1m",
    ])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            ann.parse_ttl(value)


class TestTtl:
    def test_absent(self):
        assert ann.ttl({}, "service/ns/web") is None

    def test_present(self):
        assert ann.ttl({ann.TTL_KEY: "60"}, "service/ns/web") == 60

    def test_invalid_is_logged_and_ignored(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert ann.ttl({ann.TTL_KEY: "forever"}, "service/ns/web") is None
        assert "service/ns/web" in caplog.text


class TestProviderSpecific:
    def test_empty(self):
        assert ann.provider_specific_and_set_identifier({}) == ([], "")

    def test_set_identifier(self):
        _, set_identifier = ann.provider_specific_and_set_identifier(
            {ann.SET_IDENTIFIER_KEY: "eu-west"}
        )
        assert set_identifier == "eu-west"

    def test_cloudflare(self):
        properties, _ = ann.provider_specific_and_set_identifier({
            ann.CLOUDFLARE_CUSTOM_HOSTNAME_KEY: "custom.example.com",
            ann.CLOUDFLARE_PROXIED_KEY: "true",
        })
        assert properties == [
            ProviderSpecificProperty(name=ann.CLOUDFLARE_PROXIED_KEY, value="true"),
            ProviderSpecificProperty(name=ann.CLOUDFLARE_CUSTOM_HOSTNAME_KEY, value="custom.example.com"),
        ]

    def test_alias_only_when_true(self):
        properties, _ = ann.provider_specific_and_set_identifier({ann.ALIAS_KEY: "true"})
        assert properties == [ProviderSpecificProperty(name="alias", value="true")]
        properties, _ = ann.provider_specific_and_set_identifier({ann.ALIAS_KEY: "yes"})
        assert properties == []

    def test_prefixed_keys(self):
        properties, _ = ann.provider_specific_and_set_identifier({
            P + "webhook-foo": "1",
            P + "aws-weight": "10",
            P + "scw-bar": "2",
            P + "ibmcloud-proxied": "true",
            P + "hostname": "ignored.example.com",
        })
        assert properties == [
            ProviderSpecificProperty(name="aws/weight", value="10"),
            ProviderSpecificProperty(name="ibmcloud-proxied", value="true"),
            ProviderSpecificProperty(name="scw/bar", value="2"),
            ProviderSpecificProperty(name="webhook/foo", value="1"),
        ]

    def test_fixed_keys_before_prefixed(self):
        properties, _ = ann.provider_specific_and_set_identifier({
            P + "aws-weight": "10",
            ann.ALIAS_KEY: "true",
            ann.CLOUDFLARE_PROXIED_KEY: "false",
        })
        assert [p.name for p in properties] == [ann.CLOUDFLARE_PROXIED_KEY, "alias", "aws/weight"]


class TestAccessAndEndpointsType:
    def test_access(self):
        assert ann.access({ann.ACCESS_KEY: "public"}) == "public"
        assert ann.access({ann.ACCESS_KEY: "private"}) == "private"
        assert ann.access({ann.ACCESS_KEY: "other"}) == ""
        assert ann.access({}) == ""

    def test_endpoints_type(self):
        assert ann.endpoints_type({ann.ENDPOINTS_TYPE_KEY: "NodeExternalIP"}) == "NodeExternalIP"
        assert ann.endpoints_type({ann.ENDPOINTS_TYPE_KEY: "HostIP"}) == "HostIP"
        assert ann.endpoints_type({ann.ENDPOINTS_TYPE_KEY: "nodeexternalip"}) == ""


class TestIsManagedBy:
    def test_unset(self):
        assert ann.is_managed_by({})

    def test_matching(self):
        assert ann.is_managed_by({ann.CONTROLLER_KEY: "dns-controller"})

    def test_other_controller(self):
        assert not ann.is_managed_by({ann.CONTROLLER_KEY: "other"})

    def test_custom_identity(self):
        assert ann.is_managed_by({ann.CONTROLLER_KEY: "mine"}, controller="mine")
