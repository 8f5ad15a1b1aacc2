from __future__ import annotations  # FastAPI server exposing interview preparation endpoints

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from api.routes import coding_router, router as session_router
from config.settings import settings
from interview_setup import ResumeUpload, UnsupportedResumeType, accept_resume_upload
from llm_gateway import LlmGatewayError, PaymentRequiredError, RateLimitedError
from resume_analysis import ATSResult, ResumeTooShortError, analyze_with_config
from roadmap import Roadmap, generate_with_config as generate_roadmap_with_config
from storage.history import HistoryEntry, HistoryStore, HistorySummary
from storage.migrate import migrate


logger = logging.getLogger(__name__)

ROOT = Path(__file__).resolve().parent


def _config_path() -> Path:
    return ROOT / settings.CONFIG_PATH


@asynccontextmanager
async def lifespan(_app: FastAPI):
    migrate()
    yield


app = FastAPI(title="Interview Prep API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"]
)
app.include_router(session_router)
app.include_router(coding_router)


class AnalyzeResumeRequest(BaseModel):  # Resume analysis payload from UI
    model_config = ConfigDict(populate_by_name=True)

    resume_text: str = Field(alias="resumeText")
    target_role: Optional[str] = Field(default=None, alias="targetRole")


class RoadmapRequest(BaseModel):  # Roadmap generation payload from UI
    model_config = ConfigDict(populate_by_name=True)

    goal: str
    goal_type: str = Field(alias="goalType")
    experience_level: str = Field(alias="experienceLevel")


class RoadmapResponse(BaseModel):
    roadmap: Roadmap


def _history_store() -> HistoryStore:  # Construct history store
    return HistoryStore()


@app.post("/api/resume/analyze", response_model=ATSResult)
def analyze_resume(payload: AnalyzeResumeRequest) -> ATSResult:
    try:
        return analyze_with_config(payload.resume_text, payload.target_role, config_path=_config_path())
    except ResumeTooShortError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except RateLimitedError as exc:
        raise HTTPException(status_code=429, detail="Rate limit exceeded. Please try again later.") from exc
    except PaymentRequiredError as exc:
        raise HTTPException(status_code=402, detail="AI credits exhausted. Please add credits.") from exc
    except LlmGatewayError as exc:
        logger.exception("Resume analysis request failed")
        raise HTTPException(status_code=502, detail=f"LLM request failed: {exc}") from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected error during resume analysis")
        raise HTTPException(status_code=500, detail="Failed to analyze resume. Please try again.") from exc


@app.post("/api/resume/upload", response_model=ResumeUpload)
async def upload_resume(file: UploadFile = File(...)) -> ResumeUpload:
    data = await file.read()
    try:
        return accept_resume_upload(file.filename or "resume", file.content_type, data)
    except UnsupportedResumeType as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.get("/api/history", response_model=List[HistoryEntry])
def list_history() -> List[HistoryEntry]:
    return _history_store().read()


@app.get("/api/history/summary", response_model=HistorySummary)
def history_summary() -> HistorySummary:
    return _history_store().summary()


@app.post("/api/roadmap", response_model=RoadmapResponse)
def create_roadmap(payload: RoadmapRequest) -> RoadmapResponse:
    try:
        roadmap = generate_roadmap_with_config(
            payload.goal,
            payload.goal_type,
            payload.experience_level,
            config_path=_config_path(),
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except RateLimitedError as exc:
        raise HTTPException(status_code=429, detail=str(exc)) from exc
    except PaymentRequiredError as exc:
        raise HTTPException(status_code=402, detail=str(exc)) from exc
    except LlmGatewayError as exc:
        logger.exception("Roadmap generation failed")
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected error during roadmap generation")
        raise HTTPException(status_code=500, detail="Unable to generate roadmap") from exc
    return RoadmapResponse(roadmap=roadmap)
