from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        # Only add headers if they don't already exist (to preserve CORS headers)
        if "X-Content-Type-Options" not in response.headers:
            response.headers["X-Content-Type-Options"] = "nosniff"
        if "X-Frame-Options" not in response.headers:
            response.headers["X-Frame-Options"] = "DENY"
        if "Cache-Control" not in response.headers and request.url.path.startswith("/api/"):
            # metrics change on every fetch
            response.headers["Cache-Control"] = "no-store"

        return response
