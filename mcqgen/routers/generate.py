from fastapi import APIRouter, Request
from fastapi.responses import Response
import structlog

from mcqgen.errors import GenerationCancelled
from mcqgen.middleware.rate_limit import generation_limit
from mcqgen.schemas import GenerateRequest, GenerateResponse
from mcqgen.services.orchestrator import generate

logger = structlog.get_logger()

# nginx convention for "client closed request"
CLIENT_CLOSED_REQUEST = 499

router = APIRouter(prefix="/api", tags=["generate"])


@router.post("/generate", response_model=GenerateResponse)
@generation_limit()
async def generate_mcqs(request: Request, body: GenerateRequest):
    """Generate MCQs from study text. Zero items is a valid (200) answer."""
    try:
        result = await generate(body.text, body.to_config(), is_cancelled=request.is_disconnected)
    except GenerationCancelled:
        return Response(status_code=CLIENT_CLOSED_REQUEST)
    logger.info(
        "mcqs_generated",
        source=result.source,
        count=len(result.items),
        requested=body.num_questions,
        difficulty=body.difficulty,
    )
    return GenerateResponse(source=result.source, count=len(result.items), mcqs=result.items)
