"""The ``vision_analyze_image`` tool for tool-calling language models.

The tool never raises: every failure comes back as an error envelope whose
text the model can read and relay.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_ai import Agent, Tool
from pydantic_ai.models import Model
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider

from image_insight.config import settings
from image_insight.errors import (
    AnalysisError,
    InvalidReferenceError,
    NoCategoriesRequestedError,
    UnreadableDataError,
)
from image_insight.reporting.formatter import format_error, format_report
from image_insight.reporting.schemas import VisionAnalysisReport
from image_insight.services.analyzer import VisionAnalyzer
from image_insight.utils.categories import parse_categories

logger = logging.getLogger(__name__)

TOOL_NAME = "vision_analyze_image"

TOOL_DESCRIPTION = (
    "Analyzes images to extract text, detect faces, classify objects, identify scenes, "
    "read barcodes, and detect salient regions. All analysis happens locally."
)

NO_VALID_TYPES_MESSAGE = (
    "No valid analysis types specified. Use: text, faces, objects, scenes, barcodes, or saliency"
)

VISION_AGENT_SYSTEM_PROMPT = """\
You are an assistant that can look at images on the user's machine.

When the user asks about an image, call vision_analyze_image with the image path
and the analysis types that answer the question:
- text: printed or handwritten text (OCR)
- faces: faces and facial landmarks
- objects / scenes: what the image shows
- barcodes: QR codes and barcodes
- saliency: the visually prominent areas

Report what the tool found. Do not invent details the tool did not return.
If the tool reports an error, tell the user what went wrong.
"""


class VisionToolArguments(BaseModel):
    """Arguments of the vision_analyze_image tool."""

    model_config = ConfigDict(populate_by_name=True)

    image_path: str = Field(
        alias="imagePath",
        description="File path or URL to the image to analyze",
    )
    analysis_types: list[str] = Field(
        alias="analysisTypes",
        description=(
            "Types of analysis to perform. Valid values: 'text', 'faces', 'objects', "
            "'scenes', 'barcodes', 'saliency'. Can specify multiple types as "
            "comma-separated or array."
        ),
    )
    include_confidence: bool | None = Field(
        default=None,
        alias="includeConfidence",
        description="Whether to include confidence scores in results (default: true)",
    )

    @field_validator("analysis_types", mode="before")
    @classmethod
    def _split_single_string(cls, v: Any) -> Any:
        # Models sometimes send "text, faces" instead of a list
        if isinstance(v, str):
            return [v]
        return v


class VisionTool:
    """Run image analysis on behalf of a language model.

    Usage:
        tool = VisionTool()
        report = await tool.call(VisionToolArguments(imagePath="/tmp/a.png", analysisTypes=["text"]))
        print(report.prompt_representation())
    """

    name = TOOL_NAME
    description = TOOL_DESCRIPTION

    def __init__(self, analyzer: VisionAnalyzer | None = None) -> None:
        self._analyzer = analyzer or VisionAnalyzer()

    async def call(self, arguments: VisionToolArguments) -> VisionAnalysisReport:
        """Analyze the image and return a success or error envelope."""
        categories = parse_categories(arguments.analysis_types)
        if not categories:
            return format_error(NO_VALID_TYPES_MESSAGE)

        include_confidence = (
            True if arguments.include_confidence is None else arguments.include_confidence
        )

        try:
            results = await self._analyzer.analyze(
                arguments.image_path, categories, include_confidence=include_confidence
            )
        except (InvalidReferenceError, UnreadableDataError) as e:
            logger.info("[TOOL] Could not load %s: %s", arguments.image_path, e)
            return format_error(f"Failed to load image: {e.message}")
        except NoCategoriesRequestedError:
            return format_error(NO_VALID_TYPES_MESSAGE)
        except AnalysisError as e:
            logger.warning("[TOOL] Analysis of %s failed: %s", arguments.image_path, e)
            return format_error(f"Analysis failed: {e.message}")
        except Exception as e:
            logger.exception("[TOOL] Unexpected error analyzing %s", arguments.image_path)
            return format_error(f"Analysis failed: {e}")

        return format_report(results)

    def as_tool(self) -> Tool[None]:
        """Wrap this tool for registration on a pydantic-ai Agent."""

        async def vision_analyze_image(arguments: VisionToolArguments) -> str:
            report = await self.call(arguments)
            return report.prompt_representation()

        return Tool(
            vision_analyze_image,
            takes_ctx=False,
            name=self.name,
            description=self.description,
        )


async def vision_analyze_image(
    image_path: str,
    analysis_types: list[str] | str,
    include_confidence: bool | None = None,
    *,
    analyzer: VisionAnalyzer | None = None,
) -> VisionAnalysisReport:
    """Analyze an image and return the report envelope. Never raises."""
    arguments = VisionToolArguments(
        image_path=image_path,
        analysis_types=analysis_types,
        include_confidence=include_confidence,
    )
    return await VisionTool(analyzer).call(arguments)


def create_vision_agent(
    tool: VisionTool | None = None,
    model: Model | None = None,
) -> Agent[None, str]:
    """Create a chat agent with the vision tool registered.

    Args:
        tool: Tool instance to register (default: one with a fresh analyzer).
        model: Model override; defaults to the configured OpenAI-compatible
            chat endpoint.
    """
    if model is None:
        model = OpenAIChatModel(
            settings.model_chat,
            provider=OpenAIProvider(
                base_url=settings.llm_base_url,
                api_key=settings.llm_api_key,
            ),
        )

    tool = tool or VisionTool()
    return Agent(
        model,
        output_type=str,
        system_prompt=VISION_AGENT_SYSTEM_PROMPT,
        tools=[tool.as_tool()],
    )
