# tests/test_command_catalog.py
"""Tests for the command catalog and its reconciliation with the disabled set."""

import asyncio

import pytest

from cmdpanel.core.commands.catalog import CommandCatalog
from cmdpanel.core.commands.models import CommandInfo, project_commands
from cmdpanel.core.host.errors import ErrorKind, HostCallError


@pytest.fixture
def catalog(host, store, errors):
    """CommandCatalog over the fake host's commands."""
    catalog = CommandCatalog(host, store, on_error=errors.append)
    catalog.load(host.commands, set())
    return catalog


def enabled_flags(catalog: CommandCatalog) -> dict[str, bool]:
    return {view.id: view.enabled for view in catalog.commands}


class TestProjectCommands:
    """Tests for the enabled-flag projection."""

    def test_flags_follow_disabled_set(self):
        """Test enabled is exactly 'not in the disabled set'."""
        commands = [CommandInfo(id="kill"), CommandInfo(id="heal")]

        views = project_commands(commands, {"kill"})

        assert [(v.id, v.enabled) for v in views] == [("kill", False), ("heal", True)]

    def test_keeps_catalog_order(self):
        """Test views come back in catalog order."""
        commands = [CommandInfo(id=c) for c in ("c", "a", "b")]

        assert [v.id for v in project_commands(commands, set())] == ["c", "a", "b"]

    def test_to_dict(self):
        """Test converting a view to a dictionary."""
        view = project_commands([CommandInfo(id="kill", name="Kill")], set())[0]

        assert view.to_dict() == {
            "id": "kill",
            "name": "Kill",
            "description": "",
            "enabled": True,
        }


class TestCatalogLoad:
    """Tests for installing a catalog."""

    def test_load_with_disabled(self, host, store):
        """Test loading [kill, heal] with {kill} disabled."""
        catalog = CommandCatalog(host, store)

        catalog.load([CommandInfo(id="kill"), CommandInfo(id="heal")], {"kill"})

        assert enabled_flags(catalog) == {"kill": False, "heal": True}

    def test_load_prunes_unknown_ids(self, host, store):
        """Test disabled ids missing from the catalog are dropped."""
        catalog = CommandCatalog(host, store)

        catalog.load(host.commands, {"kill", "removed"})

        assert store.disabled_commands == {"kill"}

    def test_get(self, catalog):
        """Test looking up a single command view."""
        assert catalog.get("heal").name == "Heal"
        assert catalog.get("missing") is None

    @pytest.mark.asyncio
    async def test_refresh_reapplies_disabled(self, host, store):
        """Test refresh() fetches the catalog and keeps the disabled set."""
        store.disabled_commands = {"eval"}
        catalog = CommandCatalog(host, store)

        assert await catalog.refresh() is True

        assert [v.id for v in catalog.commands] == ["kill", "heal", "eval"]
        assert enabled_flags(catalog)["eval"] is False

    @pytest.mark.asyncio
    async def test_refresh_failure(self, host, store, errors):
        """Test a failed refresh keeps the old catalog."""
        catalog = CommandCatalog(host, store, on_error=errors.append)
        host.fail("get_commands")

        assert await catalog.refresh() is False

        assert catalog.commands == []
        assert len(errors) == 1


class TestSetEnabled:
    """Tests for enabling and disabling commands."""

    @pytest.mark.asyncio
    async def test_disable_then_enable(self, host, store):
        """Test the kill/heal scenario round-trips through the host."""
        catalog = CommandCatalog(host, store)
        catalog.load([CommandInfo(id="kill"), CommandInfo(id="heal")], {"kill"})

        assert await catalog.set_enabled("heal", False) is True
        assert store.disabled_commands == {"kill", "heal"}
        assert enabled_flags(catalog) == {"kill": False, "heal": False}

        assert await catalog.set_enabled("kill", True) is True
        assert store.disabled_commands == {"heal"}
        assert enabled_flags(catalog) == {"kill": True, "heal": False}

        assert host.disabled == {"heal"}
        assert host.config.disabled_commands == {"heal"}

    @pytest.mark.asyncio
    async def test_each_change_persists_once(self, host, catalog):
        """Test every membership change issues exactly one of each write."""
        await catalog.set_enabled("kill", False)

        assert host.count("update_disabled_commands") == 1
        assert host.count("save_config") == 1

    @pytest.mark.asyncio
    async def test_noop_issues_no_calls(self, host, catalog):
        """Test enabling an enabled command changes nothing."""
        assert await catalog.set_enabled("kill", True) is False

        assert host.calls == []

    @pytest.mark.asyncio
    async def test_unknown_command_ignored(self, host, store, catalog):
        """Test an unknown id is not added to the disabled set."""
        assert await catalog.set_enabled("missing", False) is False

        assert store.disabled_commands == set()
        assert host.calls == []

    @pytest.mark.asyncio
    async def test_flags_always_match_disabled_set(self, store, catalog):
        """Test flags agree with the disabled set after any sequence of toggles."""
        steps = [
            ("kill", False),
            ("heal", False),
            ("kill", False),
            ("eval", False),
            ("heal", True),
            ("kill", True),
            ("eval", True),
            ("eval", False),
        ]

        for command_id, enabled in steps:
            await catalog.set_enabled(command_id, enabled)
            for view in catalog.commands:
                assert view.enabled == (view.id not in store.disabled_commands)

        assert store.disabled_commands == {"eval"}

    @pytest.mark.asyncio
    async def test_update_failure_still_saves_config(self, host, store, catalog, errors):
        """Test a failed disabled-set write does not skip the config save."""
        host.fail("update_disabled_commands")

        assert await catalog.set_enabled("kill", False) is False

        assert store.disabled_commands == {"kill"}
        assert host.count("save_config") == 1
        assert host.config.disabled_commands == {"kill"}
        assert errors[0].call == "update_disabled_commands"

    @pytest.mark.asyncio
    async def test_transient_failure_retried(self, host, catalog):
        """Test a transient failure of the disabled-set write is retried."""
        host.fail(
            "update_disabled_commands",
            HostCallError("update_disabled_commands", "busy", ErrorKind.TRANSIENT),
        )

        assert await catalog.set_enabled("heal", False) is True

        assert host.count("update_disabled_commands") == 2
        assert host.disabled == {"heal"}

    @pytest.mark.asyncio
    async def test_concurrent_changes_end_with_latest_set(self, host, store, catalog):
        """Test overlapping toggles leave the host with the final disabled set."""
        gate = host.hold("update_disabled_commands")
        first = asyncio.create_task(catalog.set_enabled("kill", False))
        await asyncio.sleep(0)
        second = asyncio.create_task(catalog.set_enabled("heal", False))
        for _ in range(5):
            await asyncio.sleep(0)

        assert host.count("update_disabled_commands") == 1
        gate.set()
        assert await asyncio.gather(first, second) == [True, True]

        sent = [args[0] for call, args in host.calls if call == "update_disabled_commands"]
        assert sent == [{"kill"}, {"kill", "heal"}]
        assert host.disabled == store.disabled_commands == {"kill", "heal"}
