"""Tool-calling surface."""

from image_insight.tools.vision_tool import (
    TOOL_NAME,
    VisionTool,
    VisionToolArguments,
    create_vision_agent,
    vision_analyze_image,
)

__all__ = [
    "TOOL_NAME",
    "VisionTool",
    "VisionToolArguments",
    "create_vision_agent",
    "vision_analyze_image",
]
