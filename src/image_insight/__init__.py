"""ImageInsight: structured, ranked feature extraction from a single still image."""

__version__ = "0.1.0"
