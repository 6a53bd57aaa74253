"""Reports router — generate and fetch the AI-written session summary."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from scrumkit import store
from scrumkit.config import settings
from scrumkit.database import get_db
from scrumkit.dependencies import get_text_generator
from scrumkit.schemas.report import ReportOut, ReportRequest
from scrumkit.services.report import ReportConfig, TextGenerator, generate_session_report

router = APIRouter(prefix="/api/sessions", tags=["reports"])


@router.get("/{session_id}/report", response_model=ReportOut)
async def get_report(session_id: str, db: AsyncSession = Depends(get_db)):
    return await store.get_report(db, session_id)


@router.post("/{session_id}/report", response_model=ReportOut)
async def generate_report(
    session_id: str,
    payload: ReportRequest,
    db: AsyncSession = Depends(get_db),
    generator: TextGenerator = Depends(get_text_generator),
):
    """(Re)generate the report; the previous one is replaced only on success."""
    config = ReportConfig(
        tone=payload.tone,
        language=payload.language,
        focus_areas=payload.focus_areas,
        custom_instructions=payload.custom_instructions,
    )
    return await generate_session_report(
        db,
        generator,
        session_id,
        config,
        generated_by=payload.generated_by,
        timeout=settings.REPORT_TIMEOUT_SECONDS,
    )
