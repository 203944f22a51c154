"""
VOICEGIT Unit Tests - Shared Fixture Wiring

The shared fixtures are registered once, from tests/conftest.py, so that a
plain ``pytest`` from the project root collects the whole suite.

Run:
    pytest tests/unit/test_fixture_wiring.py -v
"""

from pathlib import Path

import tests.conftest as root_conftest

TESTS_DIR = Path(__file__).resolve().parents[1]


class TestFixtureWiring:
    """Tests for how the shared fixtures reach every test module."""

    def test_plugin_is_not_a_conftest(self):
        """A module pytest auto-loads as conftest must not also be a plugin."""
        for plugin in root_conftest.pytest_plugins:
            assert plugin.rsplit(".", 1)[-1] != "conftest"

    def test_single_conftest(self):
        assert [p.relative_to(TESTS_DIR) for p in TESTS_DIR.rglob("conftest.py")] == [Path("conftest.py")]

    def test_shared_fixtures_available(self, make_config, controller, mock_storage):
        config = make_config(dry_run=True)
        assert config.dry_run is True
        assert controller is not None
        assert mock_storage.list_calls == []
