"""Analysis services.

Import VisionAnalyzer from ``image_insight.services.analyzer``.
"""

from image_insight.services.text_ranking import area_per_character, rank_text_results

__all__ = ["area_per_character", "rank_text_results"]
