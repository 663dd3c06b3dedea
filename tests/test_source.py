from types import SimpleNamespace

import pytest

from atriumcal.source import fetch_ics_text


def _response(status_code: int, text: str = "", content_type: str = "text/calendar"):
    return SimpleNamespace(status_code=status_code, text=text, encoding="ISO-8859-1", headers={"Content-Type": content_type})


def test_fetch_returns_body(monkeypatch):
    monkeypatch.setattr(
        "requests.Session.get",
        lambda self, url, timeout=None: _response(200, "BEGIN:VCALENDAR"),
    )

    assert fetch_ics_text("https://example.org/cal.ics") == "BEGIN:VCALENDAR"


def test_fetch_defaults_to_utf8_without_charset(monkeypatch):
    resp = _response(200, "BEGIN:VCALENDAR")
    monkeypatch.setattr("requests.Session.get", lambda self, url, timeout=None: resp)

    fetch_ics_text("https://example.org/cal.ics")

    assert resp.encoding == "utf-8"


def test_fetch_raises_on_http_error(monkeypatch):
    monkeypatch.setattr("requests.Session.get", lambda self, url, timeout=None: _response(404))

    with pytest.raises(RuntimeError, match="ICS fetch failed: 404"):
        fetch_ics_text("https://example.org/missing.ics")
