"""Configuration settings for ImageInsight."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SCENE_LABELS: list[str] = [
    "person",
    "animal",
    "vehicle",
    "building",
    "food",
    "plant",
    "document",
    "screenshot",
    "indoor_scene",
    "outdoor_scene",
    "landscape",
    "cityscape",
    "beach",
    "mountain",
    "forest",
    "sky",
    "water",
    "night_scene",
    "text_sign",
    "furniture",
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Preprocessing ────────────────────────────────────────────────────────
    # Longer edge above this is downscaled into a derived temporary artifact
    max_image_dimension: int = 4096

    # None → system temp dir (tempfile.gettempdir())
    temp_dir: Path | None = None
    temp_prefix: str = "image-insight-"

    # ── Presentation ─────────────────────────────────────────────────────────
    object_result_limit: int = 10

    # Heuristic: pixel height → points at an assumed 72 DPI
    point_size_multiplier: float = 0.75

    # ── Text recognition (Tesseract) ─────────────────────────────────────────
    tesseract_cmd: str | None = None  # None → pytesseract default lookup
    tesseract_languages: str = "eng"
    tesseract_config: str = "--oem 3 --psm 11"

    # ── Face detection (OpenCV Haar cascades) ────────────────────────────────
    face_min_size: int = 24  # pixels

    # ── Saliency ─────────────────────────────────────────────────────────────
    # Regions smaller than this fraction of the image area are dropped
    saliency_min_area_fraction: float = 0.005

    # ── Object & scene classification (CLIP zero-shot) ───────────────────────
    # OpenAI-compatible embeddings gateway on the local machine.
    # Unset → objects/scenes capability reports itself unavailable.
    scene_classifier_base_url: str | None = None
    scene_classifier_api_key: str = "dummy-key"
    model_image_embedding: str = "clip-vit"
    scene_labels: list[str] = DEFAULT_SCENE_LABELS
    scene_min_confidence: float = 0.01

    # ── Tool-calling agent ───────────────────────────────────────────────────
    llm_base_url: str = "http://localhost:8000/v1"
    llm_api_key: str = "dummy-key"
    model_chat: str = "qwen3-vl-4b"

    # ── Logging ──────────────────────────────────────────────────────────────
    log_extractor_calls: bool = False


settings = Settings()
