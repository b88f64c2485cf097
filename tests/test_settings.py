"""Tests for configuration loading."""
from __future__ import annotations

from lancer import lancer
from lancer.config.settings import Settings
from lancer.core import gatekeeper


def test_settings_read_prefixed_environment(monkeypatch):
    monkeypatch.setenv("LANCER_SIGNING_SECRET", "from-env")
    monkeypatch.setenv("LANCER_SIGNATURE_TOLERANCE_SECONDS", "120")

    loaded = Settings()

    assert loaded.SIGNING_SECRET == "from-env"
    assert loaded.SIGNATURE_TOLERANCE_SECONDS == 120
    assert loaded.SIGNATURE_HEADER == "x-signature"
    assert loaded.HANDLER_TIMEOUT_SECONDS is None


def test_gatekeeper_falls_back_to_settings(monkeypatch):
    monkeypatch.setattr(gatekeeper.settings, "SIGNING_SECRET", "configured")
    monkeypatch.setattr(gatekeeper.settings, "HANDLER_TIMEOUT_SECONDS", 2.5)

    gate = lancer()

    assert gate.signing_secret == "configured"
    assert gate.handler_timeout == 2.5
    assert lancer(signing_secret="explicit").signing_secret == "explicit"
