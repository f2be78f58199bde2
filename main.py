import os
import uuid
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, EmailStr, Field, field_validator
from starlette.exceptions import HTTPException as StarletteHTTPException

import config
import notifications
import storage
from core.readiness.models import ScoringTable, Tier
from core.readiness.report import copy_for
from core.readiness.scoring import score, tier_for
from core.readiness.table import build_table
from rate_limit import RateLimiter, client_ip

settings = config.settings

# -------------------------------------------------------------------
# Logging
# -------------------------------------------------------------------

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger("readiness")

logger.info("Email delivery: %s", "ENABLED" if settings.email_enabled else "DISABLED")
logger.info("Database storage: %s", "ENABLED" if settings.database_enabled else "DISABLED")

SERVICE_NAME = "AI Readiness Assessment API"
VERSION = "1.0.0"

MISSING_INFO = "Missing required info"
REPORT_FAILED = "Failed to send report. Please check if the PDF exists on the server."

# routes whose error body is a bare {"success": false}
BARE_ERROR_PATHS = {"/api/newsletter"}

# -------------------------------------------------------------------
# FastAPI App
# -------------------------------------------------------------------

app = FastAPI(
    title=SERVICE_NAME,
    version=VERSION,
    description="Scores the AI readiness quiz, emails the clarity report, records newsletter signups.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials="*" not in settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

form_limiter = RateLimiter(
    max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
    window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    trusted_proxy_hops=settings.TRUSTED_PROXY_HOPS,
)

# -------------------------------------------------------------------
# Models
# -------------------------------------------------------------------

Answers = Dict[str, Optional[str]]


class ScoreRequest(BaseModel):
    answers: Answers = Field(default_factory=dict)
    activeQuestions: Optional[List[str]] = None


class ScoreResponse(BaseModel):
    success: bool = True
    rawScore: int
    maxPossible: int
    percentage: int
    tier: Tier
    title: str
    message: str


class LeadSubmission(BaseModel):
    fullName: str
    email: EmailStr
    readinessScore: Optional[int] = Field(default=None, ge=0, le=100)
    answers: Optional[Answers] = None
    activeQuestions: Optional[List[str]] = None

    @field_validator("fullName")
    @classmethod
    def validate_full_name(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Full name is required")
        if len(v) > 200:
            raise ValueError("Full name too long")
        return v


class LeadSubmissionResponse(BaseModel):
    success: bool = True
    readinessScore: int
    tier: Tier


class NewsletterRequest(BaseModel):
    email: EmailStr


class NewsletterResponse(BaseModel):
    success: bool = True

# -------------------------------------------------------------------
# Dependencies
# -------------------------------------------------------------------

def get_scoring_table(request: Request) -> ScoringTable:
    return request.app.state.scoring_table


def _log_unmatched(question_ids, answers: Answers) -> None:
    for qid in question_ids:
        logger.warning("Unrecognized answer label: question=%s label=%r", qid, answers.get(qid))

# -------------------------------------------------------------------
# Startup / Shutdown
# -------------------------------------------------------------------

@app.on_event("startup")
def on_startup():
    logger.info("Readiness API starting up...")
    app.state.scoring_table = build_table(config.settings.SCORING_TABLE_PATH)
    if config.settings.database_enabled:
        storage.init_db_pool()
        storage.ensure_tables()
    logger.info("Readiness API startup complete")


@app.on_event("shutdown")
def on_shutdown():
    logger.info("Readiness API shutting down...")
    storage.close_db_pool()

# -------------------------------------------------------------------
# Routes
# -------------------------------------------------------------------

@app.get("/api")
def root():
    return {"status": "ok", "service": SERVICE_NAME, "version": VERSION}


@app.get("/api/health")
def health():
    return {
        "success": True,
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {
            "api": "operational",
            "database": "operational" if config.settings.database_enabled else "not_configured",
            "email": "operational" if config.settings.email_enabled else "not_configured",
        },
    }


@app.post("/api/score", response_model=ScoreResponse)
def score_answers(payload: ScoreRequest, table: ScoringTable = Depends(get_scoring_table)):
    result = score(payload.answers, table, active=payload.activeQuestions)
    if result.unmatched:
        _log_unmatched(result.unmatched, payload.answers)

    copy = copy_for(result.tier)
    return ScoreResponse(
        rawScore=result.raw_score,
        maxPossible=result.max_possible,
        percentage=result.percentage,
        tier=result.tier,
        title=copy.title,
        message=copy.message,
    )


@app.post(
    "/api/lead-submission",
    response_model=LeadSubmissionResponse,
    dependencies=[Depends(form_limiter)],
)
def lead_submission(
    payload: LeadSubmission,
    request: Request,
    table: ScoringTable = Depends(get_scoring_table),
):
    # answers scored server-side take precedence over a client-computed score
    if payload.answers is not None:
        result = score(payload.answers, table, active=payload.activeQuestions)
        if result.unmatched:
            _log_unmatched(result.unmatched, payload.answers)
        readiness_score = result.percentage
        tier = result.tier
    elif payload.readinessScore is not None:
        readiness_score = payload.readinessScore
        tier = tier_for(readiness_score)
    else:
        raise HTTPException(status_code=400, detail=MISSING_INFO)

    ip = client_ip(request, form_limiter.trusted_proxy_hops)
    logger.info("Lead submitted: score=%s tier=%s ip=%s", readiness_score, tier.value, ip)

    email = str(payload.email)
    email_sent = notifications.send_lead_report(
        full_name=payload.fullName,
        email=email,
        readiness_score=readiness_score,
    )
    if email_sent:
        try:
            notifications.send_admin_notification(
                full_name=payload.fullName,
                email=email,
                readiness_score=readiness_score,
            )
        except Exception:
            logger.exception("Admin email failed (non-fatal)")

    # DB insert (best-effort)
    try:
        storage.insert_lead(
            lead_id=uuid.uuid4(),
            created_at=datetime.now(timezone.utc),
            full_name=payload.fullName,
            email=email,
            readiness_score=readiness_score,
            tier=tier.value,
            answers=payload.answers,
            ip_address=ip,
            user_agent=request.headers.get("user-agent"),
            email_sent=email_sent,
        )
    except Exception:
        logger.exception("DB insert failed (non-fatal)")

    if not email_sent:
        logger.error("Report email not sent for lead (score=%s)", readiness_score)
        return JSONResponse(status_code=500, content={"success": False, "message": REPORT_FAILED})

    return LeadSubmissionResponse(readinessScore=readiness_score, tier=tier)


@app.post(
    "/api/newsletter",
    response_model=NewsletterResponse,
    dependencies=[Depends(form_limiter)],
)
def newsletter(payload: NewsletterRequest, request: Request):
    email = str(payload.email)
    sent = notifications.send_newsletter_welcome(email=email)

    try:
        storage.insert_subscriber(
            email=email,
            subscribed_at=datetime.now(timezone.utc),
            ip_address=client_ip(request, form_limiter.trusted_proxy_hops),
        )
    except Exception:
        logger.exception("Subscriber insert failed (non-fatal)")

    if not sent:
        return JSONResponse(status_code=500, content={"success": False})
    return NewsletterResponse()


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info("Rejected request to %s: %s", request.url.path, exc.errors())
    if request.url.path in BARE_ERROR_PATHS:
        return JSONResponse(status_code=400, content={"success": False})
    return JSONResponse(status_code=400, content={"success": False, "message": MISSING_INFO})


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(status_code=500, content={"success": False, "message": "Internal server error"})


# Landing page, mounted last so the API routes take precedence
if settings.STATIC_DIR and os.path.isdir(settings.STATIC_DIR):
    app.mount("/", StaticFiles(directory=settings.STATIC_DIR, html=True), name="static")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=settings.PORT)
