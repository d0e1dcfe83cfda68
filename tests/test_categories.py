"""Tests for analysis-type token parsing."""

import pytest

from image_insight.models.enums import AnalysisCategory
from image_insight.utils.categories import VALID_TOKENS, parse_categories, parse_category


class TestParseCategory:
    @pytest.mark.parametrize(
        ("token", "expected"),
        [
            ("text", AnalysisCategory.TEXT),
            ("FACES", AnalysisCategory.FACES),
            (" barcodes ", AnalysisCategory.BARCODES),
            ("saliency", AnalysisCategory.SALIENCY),
            ("objects", AnalysisCategory.OBJECTS_AND_SCENES),
            ("scenes", AnalysisCategory.OBJECTS_AND_SCENES),
        ],
    )
    def test_known_tokens(self, token: str, expected: AnalysisCategory) -> None:
        assert parse_category(token) == expected

    def test_unknown_token(self) -> None:
        assert parse_category("colors") is None

    def test_category_passes_through(self) -> None:
        assert parse_category(AnalysisCategory.FACES) is AnalysisCategory.FACES


class TestParseCategories:
    def test_objects_and_scenes_fold_to_one_category(self) -> None:
        categories = parse_categories(["objects", "scenes"])

        assert categories == frozenset({AnalysisCategory.OBJECTS_AND_SCENES})

    def test_unknown_tokens_dropped(self) -> None:
        categories = parse_categories(["text", "colors", "nonsense"])

        assert categories == frozenset({AnalysisCategory.TEXT})

    def test_comma_separated_entries(self) -> None:
        categories = parse_categories(["text, faces", "barcodes,"])

        assert categories == frozenset(
            {AnalysisCategory.TEXT, AnalysisCategory.FACES, AnalysisCategory.BARCODES}
        )

    def test_all_invalid_yields_empty_set(self) -> None:
        assert parse_categories(["colors", ""]) == frozenset()

    def test_empty_input(self) -> None:
        assert parse_categories([]) == frozenset()

    def test_every_valid_token_parses(self) -> None:
        categories = parse_categories(VALID_TOKENS)

        assert categories == frozenset(AnalysisCategory)
