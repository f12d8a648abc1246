from fastapi import APIRouter, Request
from fastapi.responses import Response

from mcqgen.middleware.rate_limit import general_api_limit
from mcqgen.schemas import ExportRequest, ScoreRequest, ScoreResult
from mcqgen.services.export import export_csv, export_json
from mcqgen.services.scoring import score_answers


router = APIRouter(prefix="/api", tags=["quiz"])


@router.post("/score", response_model=ScoreResult)
@general_api_limit()
def score(request: Request, body: ScoreRequest):
    return score_answers(body.items, body.answers)


@router.post("/export/csv")
@general_api_limit()
def export_as_csv(request: Request, body: ExportRequest):
    return Response(
        content=export_csv(body.items),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="mcqs.csv"'},
    )


@router.post("/export/json")
@general_api_limit()
def export_as_json(request: Request, body: ExportRequest):
    return Response(
        content=export_json(body.items, body.difficulty),
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="mcqs.json"'},
    )
