import logging

from fastapi import APIRouter, Request, status

from serenity.api.errors import ApiError
from serenity.api.schemas.journal import AnalyzeJournalRequest, DriftAnalysis
from serenity.dependency_injection import get_container
from serenity.services.contracts import GatewayClientProtocol

logger = logging.getLogger(__name__)
router = APIRouter(tags=["journal"])


@router.post(
    "/analyze-journal",
    summary="Score emotional drift across journal entries",
    description="Sends the entries to the LLM gateway with a forced analyze_drift tool call and returns its structured result.",
    response_model=DriftAnalysis,
)
async def analyze_journal(payload: AnalyzeJournalRequest, request: Request) -> DriftAnalysis:
    if not payload.entries:
        raise ApiError(status_code=status.HTTP_400_BAD_REQUEST, message="No entries provided")

    logger.info("analyze journal request", extra={"entries": len(payload.entries)})
    gateway: GatewayClientProtocol = get_container(request).resolve(GatewayClientProtocol)
    return await gateway.analyze_drift(payload.entries)
