"""Image reference resolution.

Accepted forms: absolute local path, ``file://`` URI, or a scheme-less
path-like string (treated as a local path). Remote URLs are rejected; image
references are never fetched over the network.
"""

from __future__ import annotations

from pathlib import Path
from urllib.parse import unquote, urlparse

from image_insight.errors import InvalidReferenceError

ImageReference = str | Path


def resolve_reference(reference: ImageReference) -> Path:
    """Resolve an image reference to an existing local file path.

    Args:
        reference: Path, ``file://`` URI, or path-like string.

    Returns:
        Absolute path to the referenced file.

    Raises:
        InvalidReferenceError: If the reference is empty, uses an unsupported
            scheme, or does not point at a regular file.
    """
    if isinstance(reference, Path):
        path = reference
    else:
        raw = reference.strip()
        if not raw:
            raise InvalidReferenceError("Image reference is empty", reference=reference)
        path = _path_from_string(raw)

    path = path.expanduser()
    if not path.is_absolute():
        path = path.absolute()

    if not path.exists():
        raise InvalidReferenceError(f"Image not found: {path}", reference=str(reference))
    if not path.is_file():
        raise InvalidReferenceError(f"Not a file: {path}", reference=str(reference))

    return path


def _path_from_string(raw: str) -> Path:
    if raw.startswith("file://"):
        parsed = urlparse(raw)
        if parsed.netloc not in ("", "localhost"):
            raise InvalidReferenceError(
                f"Remote file URI not supported: {raw}", reference=raw
            )
        return Path(unquote(parsed.path))

    if raw.startswith("/"):
        return Path(raw)

    parsed = urlparse(raw)
    # Single-letter "schemes" are Windows drive letters, not URIs
    if parsed.scheme and len(parsed.scheme) > 1:
        raise InvalidReferenceError(
            f"Unsupported image reference scheme '{parsed.scheme}': {raw}",
            reference=raw,
        )

    return Path(raw)
