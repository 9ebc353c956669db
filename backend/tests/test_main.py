"""Tests for serving the app with uvicorn."""

from unittest.mock import MagicMock

import uvicorn

from app import main
from app.config import Settings


def test_run_development(monkeypatch):
    run = MagicMock()
    monkeypatch.setattr(uvicorn, "run", run)
    monkeypatch.setattr(main, "settings", Settings(app_debug=True, app_port=9000, log_level="INFO"))

    main.run()

    run.assert_called_once_with(
        "app.main:app",
        host="0.0.0.0",
        port=9000,
        reload=True,
        log_level="info",
    )


def test_run_production(monkeypatch):
    run = MagicMock()
    monkeypatch.setattr(uvicorn, "run", run)
    monkeypatch.setattr(
        main,
        "settings",
        Settings(app_debug=False, app_host="127.0.0.1", uvicorn_workers=4, log_level="WARNING"),
    )

    main.run()

    kwargs = run.call_args.kwargs
    assert run.call_args.args == ("app.main:app",)
    assert kwargs["host"] == "127.0.0.1"
    assert kwargs["port"] == 8000
    assert kwargs["workers"] == 4
    assert kwargs["log_level"] == "warning"
    assert "reload" not in kwargs
