"""Interactive BankID page.

- GET /auth/{session_id} - HTML page the human opens from authUrl

The page polls /auth/{session_id}/poll, renders the refreshed QR image
and maps hint codes to guidance text. It distinguishes loading, pending,
complete, failed and not-found. Session existence is decided by the
first poll, so this route never touches the store.

Routes mounted at: /auth (after the JSON routes, so /auth/status wins)
"""

from __future__ import annotations

__all__ = ["router", "render_auth_page"]

import json
from string import Template

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from agentid.constants import AUTH_PAGE_POLL_INTERVAL_MS
from agentid.hints import DEFAULT_HINT_MESSAGE, HINT_MESSAGES

router = APIRouter()

# JS below avoids the dollar sign so string.Template placeholders stay unambiguous
_PAGE = Template(
    """<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>AgentID - Verify with BankID</title>
<style>
  body { margin: 0; min-height: 100vh; display: flex; flex-direction: column;
         align-items: center; justify-content: center; background: #030712;
         color: #f9fafb; font-family: system-ui, sans-serif; }
  .brand { text-align: center; margin-bottom: 2rem; }
  .brand h1 { margin: 0; font-size: 1.5rem; }
  .brand p { margin: .25rem 0 0; color: #6b7280; font-size: .875rem; }
  .card { width: 100%; max-width: 24rem; padding: 2rem; border-radius: 1rem;
          border: 1px solid #1f2937; background: #111827; text-align: center; }
  .card img { width: 240px; height: 240px; background: #fff; border-radius: .5rem; }
  .hint { color: #d1d5db; font-size: .875rem; }
  .ok { color: #34d399; }
  .err { color: #f87171; }
  [hidden] { display: none !important; }
</style>
</head>
<body>
<div class="brand">
  <h1>AgentID</h1>
  <p>Verify your identity for AI agent access</p>
</div>
<div class="card">
  <section id="loading"><p class="hint">Initialising BankID&hellip;</p></section>
  <section id="pending" hidden>
    <img id="qr" alt="BankID QR code" hidden>
    <p id="pending-hint" class="hint"></p>
  </section>
  <section id="complete" hidden>
    <h2 class="ok">Identity verified</h2>
    <p class="hint">You can close this tab. Your agent will pick up the result.</p>
  </section>
  <section id="failed" hidden>
    <h2 class="err">Verification failed</h2>
    <p id="failed-hint" class="hint"></p>
  </section>
  <section id="not_found" hidden>
    <h2 class="err">Session not found</h2>
    <p class="hint">This link has expired or is invalid. Ask your agent to start again.</p>
  </section>
</div>
<script>
(function () {
  var sessionId = $session_id;
  var hints = $hints;
  var defaultHint = $default_hint;
  var interval = $interval;
  var screens = ["loading", "pending", "complete", "failed", "not_found"];

  function hintMessage(code) {
    return (code && hints[code]) || defaultHint;
  }

  function show(name) {
    screens.forEach(function (s) {
      document.getElementById(s).hidden = s !== name;
    });
  }

  function poll() {
    fetch("/auth/" + encodeURIComponent(sessionId) + "/poll", { cache: "no-store" })
      .then(function (res) {
        if (res.status === 404) { show("not_found"); return null; }
        return res.json().then(function (data) { return { code: res.status, data: data }; });
      })
      .then(function (r) {
        if (!r) return;
        var data = r.data || {};
        if (data.status === "complete") { show("complete"); return; }
        if (data.status === "failed") {
          document.getElementById("failed-hint").textContent = hintMessage(data.hintCode);
          show("failed");
          return;
        }
        if (data.detail && data.detail.details && data.detail.details.status === "failed") {
          document.getElementById("failed-hint").textContent = hintMessage(data.detail.details.hintCode);
          show("failed");
          return;
        }
        if (data.status === "pending") {
          var qr = document.getElementById("qr");
          if (data.qrCode) {
            qr.src = "data:image/svg+xml;base64," + data.qrCode;
            qr.hidden = false;
          }
          document.getElementById("pending-hint").textContent =
            hintMessage(data.hintCode || "outstandingTransaction");
          show("pending");
        }
        setTimeout(poll, interval);
      })
      .catch(function () {
        // Network hiccup, keep trying
        setTimeout(poll, interval);
      });
  }

  poll();
})();
</script>
</body>
</html>
"""
)


def _js_literal(value: object) -> str:
    """Serialize a value for embedding inside a <script> element."""
    return json.dumps(value).replace("<", "\\u003c").replace(">", "\\u003e").replace("&", "\\u0026")


def render_auth_page(session_id: str) -> str:
    """Render the interactive page for one session."""
    return _PAGE.substitute(
        session_id=_js_literal(session_id),
        hints=_js_literal(HINT_MESSAGES),
        default_hint=_js_literal(DEFAULT_HINT_MESSAGE),
        interval=AUTH_PAGE_POLL_INTERVAL_MS,
    )


@router.get("/{session_id}", response_class=HTMLResponse, include_in_schema=False)
async def auth_page(session_id: str) -> HTMLResponse:
    """Serve the QR/status page."""
    return HTMLResponse(
        render_auth_page(session_id),
        headers={"Cache-Control": "no-store", "X-Frame-Options": "DENY"},
    )
