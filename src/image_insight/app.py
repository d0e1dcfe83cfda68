"""FastAPI application for ImageInsight."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from image_insight import __version__
from image_insight.errors import AnalysisError
from image_insight.models.enums import ErrorKind
from image_insight.reporting.formatter import build_structured_view
from image_insight.reporting.schemas import StructuredView, VisionAnalysisReport
from image_insight.services.analyzer import VisionAnalyzer
from image_insight.tools.vision_tool import VisionTool, VisionToolArguments

_ERROR_STATUS: dict[ErrorKind, int] = {
    ErrorKind.INVALID_REFERENCE: 404,
    ErrorKind.UNREADABLE_DATA: 422,
    ErrorKind.EXTRACTION_FAILURE: 500,
    ErrorKind.NO_CATEGORIES_REQUESTED: 400,
}


class AnalyzeRequest(BaseModel):
    image_path: str = Field(description="Local path or file:// URI of the image")
    analysis_types: list[str] = Field(
        description="Categories to analyze: text, faces, objects, scenes, barcodes, saliency"
    )
    include_confidence: bool = True


@lru_cache
def get_analyzer() -> VisionAnalyzer:
    """Process-wide analyzer (override in tests via dependency_overrides)."""
    return VisionAnalyzer()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler."""
    get_analyzer()
    yield


app = FastAPI(
    title="ImageInsight",
    description="Structured, ranked feature extraction from still images",
    version=__version__,
    lifespan=lifespan,
)


@app.exception_handler(AnalysisError)
async def analysis_error_handler(request: Request, exc: AnalysisError) -> JSONResponse:
    return JSONResponse(
        status_code=_ERROR_STATUS.get(exc.kind, 500),
        content={"kind": exc.kind.value, "message": exc.message},
    )


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


@app.post("/analyze", response_model=StructuredView)
async def analyze(
    request: AnalyzeRequest,
    analyzer: Annotated[VisionAnalyzer, Depends(get_analyzer)],
) -> StructuredView:
    """Analyze an image and return every result (structured view)."""
    results = await analyzer.analyze(
        request.image_path,
        request.analysis_types,
        include_confidence=request.include_confidence,
    )
    return build_structured_view(results)


@app.post("/tools/vision_analyze_image", response_model=VisionAnalysisReport)
async def vision_analyze_image(
    arguments: VisionToolArguments,
    analyzer: Annotated[VisionAnalyzer, Depends(get_analyzer)],
) -> VisionAnalysisReport:
    """Run the vision tool; failures come back as an error envelope."""
    return await VisionTool(analyzer).call(arguments)
