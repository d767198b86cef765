"""
Wallet Pass demo app.
Pick a sample coupon, POST it to /api/wallet/add-pass, get a Save-to-Google-Wallet URL back.
"""
import html
import logging
from typing import Any

from fastapi import Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse

from wallet_pass.config import WalletConfig
from wallet_pass.coupons import SAMPLE_COUPONS
from wallet_pass.errors import WalletPassError
from wallet_pass.issuance import PassIssuer
from wallet_pass.token_issuer import token_cache

logger = logging.getLogger(__name__)

app = FastAPI(title="Wallet Pass", version="0.1.0")


def get_config() -> WalletConfig:
    """Resolved per request so env changes are picked up; override in tests."""
    return WalletConfig.from_env()


def get_issuer(config: WalletConfig = Depends(get_config)) -> PassIssuer:
    return PassIssuer(config, token_cache)


@app.exception_handler(WalletPassError)
async def wallet_pass_error_handler(request: Request, exc: WalletPassError):
    logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "Request body must be valid JSON"})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Wallet API error")
    return JSONResponse(status_code=500, content={"error": "Internal server error", "details": str(exc)})


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok", "service": "wallet_pass"}


@app.get("/api/coupons")
def list_coupons():
    """Sample coupons offered by the demo page."""
    return [c.to_dict() for c in SAMPLE_COUPONS]


@app.post("/api/wallet/add-pass")
def add_pass(body: Any = Body(None), issuer: PassIssuer = Depends(get_issuer)):
    """
    Create a Google Wallet pass from coupon data.
    Body: title, code, validUntil (required); discount, description (optional).
    Returns success, passId, saveUrl, message.
    """
    return issuer.issue(body).to_dict()


@app.post("/api/wallet/save-url")
def save_url(body: Any = Body(None), issuer: PassIssuer = Depends(get_issuer)):
    """Fresh save URL for an already created pass. Body: passId."""
    pass_id = body.get("passId") if isinstance(body, dict) else None
    return issuer.resume(pass_id).to_dict()


@app.get("/", response_class=HTMLResponse)
def home():
    """Coupon picker: one button per sample coupon, each posts to /api/wallet/add-pass."""
    items = []
    for c in SAMPLE_COUPONS:
        items.append(
            f"""  <li>
    <strong>{html.escape(c.title)}</strong> ({html.escape(c.discount)}) valid until {html.escape(c.valid_until)}<br>
    {html.escape(c.description or "")}<br>
    <button onclick="addToWallet('{html.escape(c.id)}')">Add to Google Wallet</button>
  </li>"""
        )
    return HTMLResponse(
        f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Wallet Pass Demo</title></head>
<body>
  <h1>Choose a coupon</h1>
  <ul>
{"".join(items)}
  </ul>
  <p id="result"></p>
  <script>
    async function addToWallet(id) {{
      const coupons = await (await fetch("/api/coupons")).json();
      const coupon = coupons.find((c) => c.id === id);
      const r = await fetch("/api/wallet/add-pass", {{
        method: "POST",
        headers: {{"Content-Type": "application/json"}},
        body: JSON.stringify(coupon),
      }});
      const data = await r.json();
      if (r.ok && data.saveUrl) {{
        window.open(data.saveUrl, "_blank");
        document.getElementById("result").textContent = data.message;
      }} else {{
        document.getElementById("result").textContent = data.error || "Failed to add coupon to wallet";
      }}
    }}
  </script>
</body>
</html>"""
    )


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO)
    uvicorn.run(
        "wallet_pass.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
