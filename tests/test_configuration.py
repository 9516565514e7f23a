"""Unit tests for propstore.configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from propstore.configuration import SECRET_MASK, Configuration, ConfigurationItem
from propstore.exceptions import DuplicateKeyError, ItemNotFoundError, ItemTypeError
from propstore.store import PropertyStore, default_store

if TYPE_CHECKING:
    from propstore.events import ConfigChanged


@pytest.fixture()
def cfg(store: PropertyStore) -> Configuration:
    return Configuration("App", store=store)


@pytest.mark.unit
class TestConfiguration:
    """Tests for the Configuration group."""

    def test_items_preserve_insertion_order(self, cfg: Configuration) -> None:
        a = cfg.declare("A", "order.a", 1, reset=True)
        cfg.declare("B", "order.b", 2, reset=True)
        c = cfg.declare("C", "order.c", 3, reset=True)

        assert [item.name for item in cfg.items] == ["A", "B", "C"]
        assert cfg.item("order.a") is a
        assert cfg.item("order.c") is c
        assert list(cfg) == cfg.items
        assert len(cfg) == 3

    def test_duplicate_keys_in_same_configuration_raise(self, store: PropertyStore) -> None:
        dup = Configuration("DupTest", store=store)
        first = dup.declare("First", "dup.key", "x", reset=True)

        with pytest.raises(DuplicateKeyError) as exc_info:
            dup.declare("Second", "dup.key", "y", reset=True)

        assert "Duplicate config key 'dup.key'" in str(exc_info.value)
        assert "DupTest" in str(exc_info.value)
        assert dup.item("dup.key") is first
        assert store.get_item("dup.key") is first

    def test_duplicate_key_is_a_value_error(self, cfg: Configuration) -> None:
        cfg.declare("First", "k", 1)
        with pytest.raises(ValueError):
            cfg.declare("Second", "k", 2)

    def test_rejected_duplicate_is_not_registered(self, cfg: Configuration, store: PropertyStore) -> None:
        cfg.declare("First", "k", 1)
        with pytest.raises(DuplicateKeyError):
            cfg.declare("Second", "k", 2)
        assert len(store.items) == 1

    def test_explicit_add_of_declared_item_raises(self, cfg: Configuration) -> None:
        auto = cfg.declare("Auto", "auto.key", 1, reset=True)
        already_added = cfg.declare("Manual", "manual.key", 2, reset=True)

        with pytest.raises(DuplicateKeyError) as exc_info:
            cfg.add(already_added)

        assert "Duplicate config key 'manual.key'" in str(exc_info.value)
        assert cfg.item("auto.key") is auto
        assert cfg.item("manual.key") is already_added

    def test_same_key_allowed_in_different_configurations(self, store: PropertyStore) -> None:
        one = Configuration("One", store=store)
        two = Configuration("Two", store=store)
        one.declare("Shared", "shared", 1)
        two.declare("Shared", "shared", 1)
        assert "shared" in one
        assert "shared" in two

    def test_item_and_item_or_none(self, store: PropertyStore) -> None:
        lookup = Configuration("Lookup", store=store)
        port = lookup.declare("Port", "net.port", 8080, reset=True)

        assert lookup.item("net.port") is port
        assert lookup.item_or_none("nope.key") is None

        with pytest.raises(ItemNotFoundError) as exc_info:
            lookup.item("nope.key")
        assert "Config item not found for key 'nope.key'" in str(exc_info.value)
        assert "Lookup" in str(exc_info.value)

    def test_missing_item_in_unnamed_configuration(self, store: PropertyStore) -> None:
        with pytest.raises(LookupError, match="<unnamed>"):
            Configuration(store=store).item("x")

    def test_qualified_key(self, store: PropertyStore) -> None:
        assert Configuration("net", store=store).qualified_key("port") == "net.port"
        assert Configuration(store=store).qualified_key("port") == "port"

    def test_defaults_to_shared_store(self) -> None:
        assert Configuration("Shared").store is default_store()

    def test_repr(self, cfg: Configuration) -> None:
        cfg.declare("A", "a", 1)
        assert repr(cfg) == "Configuration(name='App', items=1)"


@pytest.mark.unit
class TestConfigurationItem:
    """Tests for ConfigurationItem value helpers."""

    def test_plain_construction_has_no_side_effects(self, cfg: Configuration, store: PropertyStore) -> None:
        item = ConfigurationItem(cfg, name="Loose", key="loose", default=1)
        assert "loose" not in cfg
        assert store.get_item("loose") is None
        assert item.get() == 1

    def test_string_value_defaults_then_stored(self, store: PropertyStore) -> None:
        strings = Configuration("Strings", store=store)
        api_url = strings.declare("ApiUrl", "api.url", "https://example.test", reset=True)

        assert api_url.get_string_value() == "https://example.test"
        api_url.set("https://prod.example")
        assert api_url.get_string_value() == "https://prod.example"

    def test_typed_get_defaults_then_stored(self, store: PropertyStore) -> None:
        typed = Configuration("Typed", store=store)
        retries = typed.declare("Retries", "net.retries", 3, reset=True)
        enabled = typed.declare("Enabled", "feature.enabled", False, reset=True)
        hosts = typed.declare("Hosts", "hosts", ["a", "b"], reset=True, value_type=list[str])

        assert retries.get() == 3
        assert enabled.get() is False
        assert hosts.get() == ["a", "b"]

        retries.set(5)
        enabled.set(True)
        hosts.set(["x", "y", "z"])

        assert retries.get() == 5
        assert enabled.get() is True
        assert hosts.get() == ["x", "y", "z"]

    def test_string_value_of_non_string_default(self, cfg: Configuration) -> None:
        enabled = cfg.declare("Enabled", "enabled", False)
        assert enabled.get_string_value() == "false"

    def test_set_returns_change_flag(self, cfg: Configuration, events: list[ConfigChanged]) -> None:
        retries = cfg.declare("Retries", "retries", 3)
        assert retries.set(4) is True
        assert retries.set(4) is False
        assert len(events) == 1
        assert events[0].item is retries

    def test_unset_restores_default(self, cfg: Configuration) -> None:
        retries = cfg.declare("Retries", "retries", 3)
        retries.set(9)
        retries.unset()
        assert retries.get() == 3

    def test_reset_clears_persisted_value(self, store: PropertyStore) -> None:
        store.set("net.timeout", 60)
        Configuration("Before", store=store).declare("Timeout", "net.timeout", 30)
        assert store.get("net.timeout", 0) == 60

        store.reset(store.path.parent, store.path.name)
        timeout = Configuration("After", store=store).declare("Timeout", "net.timeout", 30, reset=True)
        assert timeout.get() == 30
        assert "net.timeout" not in store

    def test_toggle_flips_boolean(self, store: PropertyStore) -> None:
        toggles = Configuration("Toggle", store=store)
        flag = toggles.declare("Flag", "flag", False, reset=True)

        assert flag.toggle() is True
        assert flag.get() is True
        assert flag.toggle() is False
        assert flag.get() is False

    def test_toggle_rejects_non_boolean(self, cfg: Configuration) -> None:
        count = cfg.declare("Count", "count", 1, reset=True)
        with pytest.raises(ItemTypeError) as exc_info:
            count.toggle()
        assert "toggle() only valid for boolean" in str(exc_info.value)
        assert isinstance(exc_info.value, TypeError)

    def test_secret_values_are_masked(self, store: PropertyStore) -> None:
        secrets = Configuration("Secrets", store=store)
        pub = secrets.declare("Public", "pub.key", "abc123", reset=True)
        sec = secrets.declare("Secret", "sec.key", "s3cr3t", secret=True, reset=True)

        assert "abc123" in str(pub)
        assert SECRET_MASK not in str(pub)
        assert SECRET_MASK in str(sec)
        assert "s3cr3t" not in str(sec)
        assert sec.display_value == SECRET_MASK

    def test_secret_stays_masked_after_set(self, cfg: Configuration) -> None:
        token = cfg.declare("Token", "token", "", secret=True)
        token.set("hunter2")
        assert "hunter2" not in str(token)
        assert token.get() == "hunter2"

    def test_repr_never_shows_value(self, cfg: Configuration) -> None:
        sec = cfg.declare("Secret", "sec", "s3cr3t", secret=True)
        assert "s3cr3t" not in repr(sec)
        assert "sec" in repr(sec)

    def test_qualified_key(self, cfg: Configuration) -> None:
        assert cfg.declare("Port", "port", 80).qualified_key == "App.port"
