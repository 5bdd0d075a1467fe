"""Tests for the clipboard bridge; pyperclip is patched so no display is needed."""

from __future__ import annotations

import logging

import pyperclip
import pytest

from typstmath.clipboard import ClipboardBridge
from typstmath.errors import ClipboardUnavailable


def _fail(*_args, **_kwargs):
    raise pyperclip.PyperclipException("could not find a copy/paste mechanism")


@pytest.fixture
def copied(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    store: list[str] = []
    monkeypatch.setattr(pyperclip, "paste", lambda: "")
    monkeypatch.setattr(pyperclip, "copy", store.append)
    return store


def test_copy_sends_text(copied):
    bridge = ClipboardBridge()
    assert bridge.available
    assert bridge.copy(r"\frac{a}{b}") is True
    assert copied == [r"\frac{a}{b}"]


def test_unavailable_clipboard_is_recorded_once(monkeypatch, copied, caplog):
    monkeypatch.setattr(pyperclip, "paste", _fail)
    with caplog.at_level(logging.WARNING, logger="typstmath"):
        bridge = ClipboardBridge()
    assert not bridge.available
    assert isinstance(bridge.error, ClipboardUnavailable)
    assert "Failed to initialize clipboard support" in caplog.text

    assert bridge.copy("x") is False
    assert copied == []


def test_copy_failure_is_logged_not_raised(monkeypatch, copied, caplog):
    bridge = ClipboardBridge()
    monkeypatch.setattr(pyperclip, "copy", _fail)
    assert bridge.copy("x") is False
    assert "Failed to copy to clipboard" in caplog.text
