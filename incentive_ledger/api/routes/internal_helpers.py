from __future__ import annotations

import structlog
from fastapi import HTTPException, Request

from incentive_ledger.core.config import get_settings
from incentive_ledger.economy.errors import (
    IncentiveError,
    IncentiveNotFoundError,
    InsufficientPointsError,
    LedgerStorageError,
)
from incentive_ledger.services.internal_auth import extract_client_ip, internal_access_denial_reason

logger = structlog.get_logger(__name__)


def assert_internal_access(request: Request) -> None:
    settings = get_settings()
    reason = internal_access_denial_reason(
        request,
        expected_token=settings.internal_api_token,
        allowlist=settings.internal_api_allowlist,
        trusted_proxies=settings.internal_api_trusted_proxies,
    )
    if reason is None:
        return

    logger.warning(
        "internal_auth_failed",
        reason=reason,
        path=request.url.path,
        client_ip=extract_client_ip(
            request,
            trusted_proxies=settings.internal_api_trusted_proxies,
        ),
    )
    raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})


def as_http_error(exc: IncentiveError) -> HTTPException:
    if isinstance(exc, IncentiveNotFoundError):
        return HTTPException(
            status_code=404,
            detail={"code": exc.code, "entity": exc.entity, "entity_id": exc.entity_id},
        )
    if isinstance(exc, InsufficientPointsError):
        return HTTPException(
            status_code=400,
            detail={"code": exc.code, "balance": exc.balance, "required": exc.required},
        )
    if isinstance(exc, LedgerStorageError):
        return HTTPException(status_code=503, detail={"code": exc.code})
    return HTTPException(status_code=400, detail={"code": exc.code, "message": str(exc)})
