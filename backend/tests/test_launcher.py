import os

import run


def test_launcher_applies_gateway_mode_override(monkeypatch, capsys):
    calls = []
    monkeypatch.setattr(run.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
    monkeypatch.setenv("MOMO_MODE", "mock")
    monkeypatch.setenv("MOMO_CALLBACK_TOKEN", "")
    monkeypatch.setenv("SETTLEMENT_CURRENCY", "ZAR")

    run.main(["--port", "9001", "--momo-mode", "sandbox"])

    assert os.environ["MOMO_MODE"] == "sandbox"
    [(app, kwargs)] = calls
    assert app == "careernest.main:app"
    assert kwargs["port"] == 9001
    assert kwargs["workers"] == 1
    out = capsys.readouterr().out
    assert "MTN MoMo (sandbox, ZAR)" in out
    assert "MOMO_CALLBACK_TOKEN is empty" in out


def test_launcher_keeps_configured_mode_quietly(monkeypatch, capsys):
    calls = []
    monkeypatch.setattr(run.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
    monkeypatch.setenv("MOMO_MODE", "mock")

    run.main([])

    assert calls[0][1]["port"] == 8000
    out = capsys.readouterr().out
    assert "MTN MoMo (mock," in out
    assert "WARNING" not in out
