from __future__ import annotations

import logging
from types import SimpleNamespace

import requests

from media_diet import deploy
from media_diet.deploy import DeployHook


def test_missing_url_is_a_noop(monkeypatch, caplog):
    def fail(*args, **kwargs):
        raise AssertionError("should not post")

    monkeypatch.setattr(deploy.requests, "post", fail)

    with caplog.at_level(logging.WARNING):
        assert DeployHook("").notify() is False

    assert "skipping deploy trigger" in caplog.text


def test_successful_post(monkeypatch):
    calls = []

    def fake_post(url, timeout):
        calls.append(url)
        return SimpleNamespace(ok=True, status_code=200, reason="OK", text="")

    monkeypatch.setattr(deploy.requests, "post", fake_post)

    assert DeployHook("https://hooks.example/deploy").notify() is True
    assert calls == ["https://hooks.example/deploy"]


def test_failed_post_is_logged_not_raised(monkeypatch, caplog):
    monkeypatch.setattr(
        deploy.requests,
        "post",
        lambda url, timeout: SimpleNamespace(ok=False, status_code=500, reason="Server Error", text="boom"),
    )

    with caplog.at_level(logging.WARNING):
        assert DeployHook("https://hooks.example/deploy").notify() is False

    assert "Deploy hook failed: 500" in caplog.text


def test_network_error_is_logged_not_raised(monkeypatch, caplog):
    def boom(url, timeout):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(deploy.requests, "post", boom)

    with caplog.at_level(logging.WARNING):
        assert DeployHook("https://hooks.example/deploy").notify() is False

    assert "down" in caplog.text
