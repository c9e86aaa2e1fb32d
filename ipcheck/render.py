from __future__ import annotations

import html
from typing import Iterable

_CLI_AGENTS = ("curl", "wget", "httpie")


def is_cli_agent(user_agent: str) -> bool:
    """True for command-line HTTP clients, which get a bare-text answer."""
    ua = user_agent.lower()
    return any(agent in ua for agent in _CLI_AGENTS)


def fallback(value: str, default: str) -> str:
    return value if value.strip() else default


_PAGE = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width,initial-scale=1">
<title>IP Check</title>
<style>
body{{font-family:-apple-system,system-ui,sans-serif;background:#fdfdfd;display:flex;
     justify-content:center;align-items:center;height:100vh;margin:0;color:#444}}
.container{{text-align:center;padding:20px}}
h1{{font-weight:normal;font-size:1.1rem;color:#888;margin-bottom:5px}}
.ip{{font-size:clamp(1.5rem,8vw,2.5rem);font-weight:bold;color:#222;margin-bottom:10px}}
.country{{font-size:1.1rem;color:#666}}
</style>
</head>
<body>
<div class="container">
  <h1>Your IP address</h1>
  <div class="ip">{ip}</div>
  <div class="country">{country} ({code})</div>
</div>
</body>
</html>
"""


def render_ip_page(ip: str, country: str, code: str) -> str:
    return _PAGE.format(
        ip=html.escape(ip),
        country=html.escape(fallback(country, "unknown")),
        code=html.escape(fallback(code, "--")),
    )


def render_stats(rows: Iterable[tuple[str, str, str, int]]) -> str:
    """Plain-text listing of (ip, country, code, count) rows, one per line."""
    lines = [
        f"IP: {ip} | Country: {fallback(country, 'unknown')} ({fallback(code, '--')}) | Count: {count}\n"
        for ip, country, code, count in rows
    ]
    return "".join(lines)
