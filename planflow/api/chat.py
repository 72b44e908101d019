"""Project drafting chat endpoint."""

from fastapi import APIRouter

from planflow.api.deps import AI
from planflow.models.chat import ConsultRequest, ConsultResponse

router = APIRouter()


@router.post("/consult", response_model=ConsultResponse)
async def consult(request: ConsultRequest, ai: AI):
    """
    One turn with the planning agent.

    The client keeps the conversation and sends it back as `history`; a
    returned `project_draft` can be posted to `/api/projects/import-draft`.
    """
    return await ai.consult_project_agent(request.history, request.text, request.attachments)
