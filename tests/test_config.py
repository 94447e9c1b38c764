"""Tests for configuration loading."""

import textwrap

import pytest

from svc2dns.config import SourceConfig, load_config
from svc2dns.errors import ConfigurationError


def _write(tmp_path, content):
    path = tmp_path / "svc2dns.toml"
    path.write_text(textwrap.dedent(content))
    return path


class TestLoadConfig:
    def test_full(self, tmp_path):
        path = _write(tmp_path, """\
            [source]
            namespace = "shop"
            label_filter = "team=blue"
            annotation_filter = "external-dns.alpha.kubernetes.io/hostname"
            fqdn_template = "{{ name }}.example.com"
            combine_fqdn_annotation = true
            compatibility = "mate"
            publish_internal = true
            publish_host_ip = true
            always_publish_not_ready_addresses = true
            service_types = ["LoadBalancer", "NodePort"]
            ignore_hostname_annotation = false
            resolve_load_balancer_hostname = true
            controller = "edge-dns"
        """)
        config = load_config(path)
        assert config.namespace == "shop"
        assert config.label_filter == "team=blue"
        assert config.fqdn_template == "{{ name }}.example.com"
        assert config.combine_fqdn_annotation
        assert config.compatibility == "mate"
        assert config.publish_internal
        assert config.publish_host_ip
        assert config.always_publish_not_ready_addresses
        assert config.service_types == ["LoadBalancer", "NodePort"]
        assert config.resolve_load_balancer_hostname
        assert config.controller == "edge-dns"

    def test_empty_file_gives_defaults(self, tmp_path):
        assert load_config(_write(tmp_path, "")) == SourceConfig()

    def test_defaults(self):
        config = SourceConfig()
        assert config.namespace == ""
        assert config.controller == "dns-controller"
        assert config.service_types == []
        assert not config.publish_internal

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.toml")

    def test_invalid_toml(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(_write(tmp_path, "[source\n"))

    def test_unknown_option(self, tmp_path):
        with pytest.raises(ConfigurationError, match="publish_everything"):
            load_config(_write(tmp_path, """\
                [source]
                publish_everything = true
            """))

    def test_wrong_type(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(_write(tmp_path, """\
                [source]
                publish_internal = "yes"
            """))

    def test_service_types_must_be_list(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(_write(tmp_path, """\
                [source]
                service_types = "LoadBalancer"
            """))

    def test_source_must_be_table(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(_write(tmp_path, 'source = "x"\n'))
