"""Device agent endpoints.

Both endpoints authenticate with the shared device-agent secret before the
request body is validated or storage is touched.
"""

from typing import Any

from fastapi import APIRouter, Depends, Response

from update_manager.dependencies import (
    get_agent_service,
    get_ingestion_service,
    require_agent_token,
)
from update_manager.schemas.agent import AgentRequest, IngestPayload, IngestResponse
from update_manager.services.agent_service import AgentService
from update_manager.services.ingestion_service import IngestionService

router = APIRouter(tags=["device-agent"])

INGEST_PATH = "/ingest-device-updates"
DEVICE_AGENT_PATH = "/device-agent"
AGENT_ROUTES = (INGEST_PATH, DEVICE_AGENT_PATH)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def preflight_response() -> Response:
    """Answer CORS preflight with an empty body.

    Served ahead of the app-wide CORS middleware (see ``main``) and
    independent of the origins the dashboard allows.
    """
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post(
    INGEST_PATH,
    response_model=IngestResponse,
    dependencies=[Depends(require_agent_token)],
)
def ingest_device_updates(
    payload: IngestPayload,
    response: Response,
    service: IngestionService = Depends(get_ingestion_service),
) -> IngestResponse:
    """Ingest a full update snapshot for one device."""
    response.headers.update(CORS_HEADERS)
    return IngestResponse(**service.ingest(payload))


@router.post(DEVICE_AGENT_PATH, dependencies=[Depends(require_agent_token)])
def device_agent(
    request: AgentRequest,
    response: Response,
    service: AgentService = Depends(get_agent_service),
) -> dict[str, Any]:
    """Multiplexed agent channel: heartbeat, update_data, get_tasks, task_result."""
    response.headers.update(CORS_HEADERS)
    return service.handle(request)
