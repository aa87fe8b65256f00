"""Tests for configuration helpers."""

import logging

from lintbridge.config import Config, build_registry, get_default_config, get_enabled_rules


def test_default_config_has_builtin_rules():
    codes = [rule.code for rule in get_default_config().rules]
    assert codes == ["valid-typeof", "no-unreachable"]


def test_enabled_rules_filter(caplog):
    config = get_default_config()
    with caplog.at_level(logging.WARNING):
        rules = get_enabled_rules(config, only=["no-unreachable", "does-not-exist"])
    assert [rule.code for rule in rules] == ["no-unreachable"]
    assert "does-not-exist" in caplog.text


def test_build_registry_without_plugins():
    registry = build_registry(Config(rules=get_default_config().rules))
    assert registry.codes() == ["no-unreachable", "valid-typeof"]
    assert registry.plugins() == []
