"""
FastAPI Dependencies

Resolve the partner integration addressed by a request path.
"""

from fastapi import HTTPException, Request, status
from loguru import logger

from src.core.integrations import PartnerIntegration


def get_integrations(request: Request) -> dict[str, PartnerIntegration]:
    """All partner integrations built at startup."""
    return request.app.state.integrations


def get_partner_integration(partner: str, request: Request) -> PartnerIntegration:
    """
    Dependency returning the integration for the `partner` path parameter.

    Raises:
        HTTPException: 404 if no integration has this name
    """
    integration = get_integrations(request).get(partner)
    if integration is None:
        logger.warning(f"🚫 Request for unknown partner '{partner}'")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown partner: {partner}"
        )
    return integration
