import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.routes.guides import router as guides_router
from src.api.routes.process import router as process_router
from src.config import settings
from src.guide.errors import (
    GuideError,
    PipelineCancelledError,
    PipelineTimeoutError,
    ResolutionError,
    SynthesisError,
    TranscriptError,
)

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Fatal pipeline errors -> HTTP status. Upstream failures are 5xx so the
# browser still gets a JSON body with CORS headers intact.
ERROR_STATUS: dict[type[GuideError], int] = {
    ResolutionError: 422,
    TranscriptError: 502,
    SynthesisError: 502,
    PipelineTimeoutError: 504,
    PipelineCancelledError: 503,
}

app = FastAPI(
    title="TubeGuide API",
    description="Turn YouTube videos into illustrated step-by-step guides",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://localhost:5173",
    ],
    allow_origin_regex=r"http://localhost:\d+",
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

app.include_router(process_router)
app.include_router(guides_router)


@app.exception_handler(GuideError)
async def guide_error_handler(request: Request, exc: GuideError) -> JSONResponse:
    status = ERROR_STATUS.get(type(exc), 500)
    return JSONResponse(status_code=status, content={"error": exc.message})


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Processing error on %s", request.url.path)
    return JSONResponse(status_code=500, content={"error": "Failed to process video"})


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}
