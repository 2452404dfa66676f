import hmac

from fastapi import Header, HTTPException, Request


async def require_webhook_token(request: Request, authorization: str | None = Header(default=None)):
    expected = request.app.state.settings.webhook_token
    if not expected:
        return
    if not authorization or not hmac.compare_digest(authorization.encode(), f"Bearer {expected}".encode()):
        raise HTTPException(status_code=401, detail="Unauthorized")
