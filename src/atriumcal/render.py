from __future__ import annotations
from datetime import datetime
from html import escape
import json
from typing import List, Optional
from zoneinfo import ZoneInfo

from .config import AppConfig
from .models import DayGroup, Event
from .schedule import format_when
from .weather import Forecast

QRIOUS_SRC = "https://cdn.jsdelivr.net/npm/qrious@4.0.2/dist/qrious.min.js"
SCROLL_PX_PER_SEC = 55
MIN_SCROLL_MS = 30000

COLORS = {
    "bg": "#ffffff",
    "left_fill": "transparent",   # NDI layer shows through in FreeShow
    "right_fill": "#f8cf1b",
    "qr_fill": "#ffffff",
    "footer": "#bfe5ef",
    "text": "#0b0e14",
    "rule": "#e5e7eb",
    "red": "#c62828",
}


def _js_string(value: str) -> str:
    return json.dumps(value).replace("</", "<\\/")


def _render_event(e: Event, tz_name: str) -> str:
    meta = escape(format_when(e, tz_name))
    if e.location:
        meta += f" • {escape(e.location)}"
    return f'<div class="event"><div class="title">{escape(e.title)}</div><div class="meta">{meta}</div></div>'


def render_rows(groups: List[DayGroup], tz_name: str) -> str:
    rows = []
    for g in groups:
        items = "".join(_render_event(e, tz_name) for e in g.events)
        rows.append(f'<div class="day"><div class="dayhead">{escape(g.label)}</div>{items}</div>')
    return "".join(rows)


def render_weather(forecast: Optional[Forecast], place: str) -> str:
    badge = f'<span class="badge">{escape(place)}</span>'
    if forecast is None:
        return f'<div class="wx"><div class="current">{badge}</div></div>'

    days = "".join(
        '<div class="wday">'
        f'<div class="lbl">{d.day.strftime("%a")}</div>'
        f'<div class="icon">{d.icon}</div>'
        f'<div class="hi">{d.high_f}°</div>'
        f'<div class="lo">{d.low_f}°</div>'
        "</div>"
        for d in forecast.days
    )
    return (
        '<div class="wx">'
        f'<div class="current"><span>{forecast.icon}</span> <span>{forecast.temperature_f}°F</span> '
        f"<span>{escape(forecast.condition)}</span> {badge}</div>"
        f'<div class="strip" aria-label="{len(forecast.days)}-day forecast">{days}</div>'
        "</div>"
    )


def _stylesheet() -> str:
    c = COLORS
    return f"""
  html,body{{height:100%}}
  body{{margin:0;background:{c['bg']};color:{c['text']};font-family:system-ui,Segoe UI,Roboto,Helvetica,Arial,sans-serif}}
  .wrap{{display:grid;grid-template-rows:auto 1fr auto auto;grid-template-columns:1fr 1fr;height:100vh}}
  header{{grid-column:1/3;background:#fff;padding:14px 20px;font-weight:800;font-size:clamp(20px,2.6vw,34px)}}
  .left{{grid-row:2;grid-column:1;background:{c['left_fill']}}}
  .right{{grid-row:2;grid-column:2;background:{c['right_fill']};display:flex;flex-direction:column}}
  .qr{{grid-row:3;grid-column:1/3;background:{c['qr_fill']};display:flex;align-items:center;justify-content:center;padding:18px 24px;gap:20px;border-top:1px solid {c['rule']}}}
  footer{{grid-row:4;grid-column:1/3;background:{c['footer']};padding:10px 14px;border-top:1px solid {c['rule']}}}
  .panel{{display:flex;flex-direction:column;height:100%}}
  .panel-header{{background:{c['red']};color:#fff;padding:10px 14px;font-weight:800;font-size:clamp(16px,2vw,22px)}}
  .vwrap{{position:relative;overflow:hidden;flex:1;background:#fff}}
  .vcontent{{position:absolute;width:100%;animation:vscroll var(--scroll-ms) linear infinite}}
  @keyframes vscroll{{0%{{transform:translateY(0)}}98%{{transform:translateY(-50%)}}100%{{transform:translateY(0)}}}}
  .day{{padding:12px 16px;border-bottom:1px solid {c['rule']}}}
  .dayhead{{font-weight:800;opacity:.9;margin:0 0 6px;font-size:clamp(15px,1.7vw,18px)}}
  .event{{padding:6px 0}}
  .title{{font-size:clamp(15px,1.9vw,20px);line-height:1.35}}
  .meta{{opacity:.85;font-size:clamp(14px,1.6vw,16px);margin-top:2px}}
  .qr-card{{display:flex;align-items:center;gap:16px}}
  .qr-card .text{{font-weight:800;font-size:clamp(18px,2.2vw,28px)}}
  .qr-card .url{{font-weight:800;text-decoration:underline}}
  .wx{{display:flex;align-items:center;gap:16px;flex-wrap:wrap}}
  .wx .current{{display:flex;align-items:center;gap:8px;font-weight:800}}
  .wx .badge{{background:rgba(0,0,0,.07);padding:4px 8px;border-radius:999px;font-size:13px}}
  .wx .strip{{display:flex;gap:12px;align-items:flex-end}}
  .wx .wday{{display:grid;gap:2px;justify-items:center}}
  .wx .icon{{font-size:20px}}
  .wx .lo{{opacity:.7;font-size:12px}}
  .updated{{opacity:.7;font-size:12px;margin-top:4px}}
  @media (max-aspect-ratio: 4/3){{
    .wrap{{grid-template-rows:auto auto auto auto 1fr auto auto;grid-template-columns:1fr}}
    .left{{grid-column:1;grid-row:2;height:40vh}}
    .right{{grid-column:1;grid-row:3;height:40vh}}
    .qr{{grid-column:1;grid-row:4}}
    footer{{grid-column:1;grid-row:5}}
  }}"""


def render_page(
    groups: List[DayGroup],
    cfg: AppConfig,
    now: datetime,
    forecast: Optional[Forecast] = None,
) -> str:
    tz_name = cfg.schedule.timezone
    rows = render_rows(groups, tz_name)
    connect_label = cfg.connect_url.split("://", 1)[-1]
    local_now = now.astimezone(ZoneInfo(tz_name))
    updated = f"{local_now.strftime('%a, %b %-d')} {local_now.strftime('%-I:%M %p').lower()}"

    # rows are emitted twice so the scroll animation loops without a seam
    return f"""<!doctype html><html><head>
<meta charset="utf-8"><meta name="viewport" content="width=device-width,initial-scale=1">
<title>Atrium Display</title>
<style>
  :root{{ --scroll-ms:{MIN_SCROLL_MS}ms; }}{_stylesheet()}
</style>
</head>
<body>
  <div class="wrap">
    <header>{escape(cfg.brand)}</header>
    <section class="left" aria-label="NDI zone (overlay from FreeShow)"></section>
    <section class="right">
      <div class="panel">
        <div class="panel-header">Upcoming Events</div>
        <div class="vwrap">
          <div class="vcontent">
            {rows}
            {rows}
          </div>
        </div>
      </div>
    </section>
    <section class="qr">
      <div class="qr-card">
        <canvas id="qr" width="140" height="140"></canvas>
        <div>
          <div class="text">{escape(cfg.qr_text)}</div>
          <div class="url">{escape(connect_label)}</div>
        </div>
      </div>
    </section>
    <!-- events and forecast are a snapshot from this build; rebuild the page to refresh them -->
    <footer>
      {render_weather(forecast, cfg.weather.place)}
      <div class="updated">Updated: {escape(updated)}</div>
    </footer>
  </div>
  <script src="{QRIOUS_SRC}"></script>
  <script>
  new QRious({{ element: document.getElementById('qr'), value: {_js_string(cfg.connect_url)}, size: 140, level: 'H' }});
  (function autoSpeed(){{
    const content = document.querySelector('.vcontent'); if (!content) return;
    const oneListHeight = content.scrollHeight / 2;
    const durationMs = Math.max({MIN_SCROLL_MS}, Math.round((oneListHeight / {SCROLL_PX_PER_SEC}) * 1000));
    document.documentElement.style.setProperty('--scroll-ms', durationMs + 'ms');
  }})();
  </script>
</body></html>
"""
