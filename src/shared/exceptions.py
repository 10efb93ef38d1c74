from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from shared.infrastructure.observability.logger import get_logger

logger = get_logger(__name__)


# ───────────────────────── Base & Domain Exceptions ─────────────────────────
class DomainError(Exception):
    """
    Business-rule violation.

    ``message`` is a stable machine-readable key (``subscription_paused``,
    ``notfound.subscriber``) that callers branch on; it is never a localized
    sentence. Services raise these, never HTTPException.
    """
    code: str = "domain_error"
    status_code: int = 422  # unprocessable entity
    message: str
    details: Optional[Dict[str, Any]]

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message or self.__class__.__name__)
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.message = message or self.__class__.__name__
        self.details = details


class NotFoundError(DomainError):
    # referenced entity is absent; message names it (e.g. "notfound.subscription")
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


# ───────────────────────────── Helpers ──────────────────────────────────────

def _problem(code: str, message: str, details: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    body: Dict[str, Any] = {"code": code, "message": message}
    if details:
        body["details"] = details
    return body


# ─────────────────────────── Registration ───────────────────────────

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def handle_domain_error(req: Request, exc: DomainError):
        return JSONResponse(
            status_code=exc.status_code,
            content=_problem(exc.code, exc.message, exc.details),
        )

    @app.exception_handler(Exception)
    async def handle_unhandled(req: Request, exc: Exception):
        logger.error("unhandled_exception", path=req.url.path, error_type=exc.__class__.__name__)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_problem("internal_error", "internal_error", {"type": exc.__class__.__name__}),
        )
