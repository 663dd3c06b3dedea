from __future__ import annotations

import requests

DEFAULT_TIMEOUT_SECONDS = 30


def fetch_ics_text(url: str, timeout: float = DEFAULT_TIMEOUT_SECONDS, user_agent: str = "atriumcal/1.0") -> str:
    """Download a calendar export. Raises RuntimeError on a non-200 response."""
    with requests.Session() as session:
        session.headers.update({"User-Agent": user_agent})
        resp = session.get(url, timeout=timeout)
    if resp.status_code != 200:
        raise RuntimeError(f"ICS fetch failed: {resp.status_code}")
    # Feeds often omit the charset; requests would then assume ISO-8859-1.
    resp.encoding = resp.encoding if "charset" in resp.headers.get("Content-Type", "") else "utf-8"
    return resp.text
