"""
Tests for the console entry point.
"""

import pytest
import uvicorn

from user_service import main
from user_service.errors import ConfigError


class TestRun:
    """Tests for run()."""

    def test_config_error_exits_with_status_1(self, monkeypatch):
        def broken_settings():
            raise ConfigError("Invalid configuration: DATABASE_URL field required")

        served = []
        monkeypatch.setattr(main, "get_settings", broken_settings)
        monkeypatch.setattr(uvicorn, "run", lambda *args, **kwargs: served.append(args))

        with pytest.raises(SystemExit) as exc_info:
            main.run()

        assert exc_info.value.code == 1
        assert served == []

    def test_serves_on_configured_address(self, monkeypatch, settings):
        settings.host = "127.0.0.1"
        settings.port = 8081
        calls = []

        monkeypatch.setattr(main, "get_settings", lambda: settings)
        monkeypatch.setattr(uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

        main.run()

        app, kwargs = calls[0]
        assert kwargs == {"host": "127.0.0.1", "port": 8081}
        assert app.state.settings is settings
