"""Endpoint de notificações inbound da plataforma de billing.

POST /webhooks/billing: responde o ack imediatamente; validação de
assinatura, dedupe e handlers rodam em background no processor do core.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.observability import get_correlation_id, reset_correlation_id, set_correlation_id

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/billing")
async def receive_billing_notification(request: Request) -> JSONResponse:
    """Recebe notificação de sucesso/erro e agenda o processamento.

    Returns:
        {"status": "received", "correlation_id": ...} (200) ou 503 se o
        core ainda não foi montado.
    """
    token = set_correlation_id(request.headers.get("x-correlation-id"))
    try:
        core = getattr(request.app.state, "core", None)
        if core is None:
            logger.warning("inbound_webhook_core_unavailable")
            return JSONResponse(content={"status": "unavailable"}, status_code=503)

        raw_body = await request.body()
        ack = await core.inbound.process_incoming(raw_body, request.headers)
        logger.info(
            "inbound_webhook_received",
            extra={"correlation_id": get_correlation_id(), "payload_size": len(raw_body)},
        )
        return JSONResponse(content={**ack, "correlation_id": get_correlation_id()})
    finally:
        reset_correlation_id(token)
