# techfolio/core/domain/text.py
"""
Slug and label helpers shared by categories, content items and tags.
"""
import re
import unicodedata

from techfolio.core.domain.exceptions import ValidationError

SLUG_MAX_LENGTH = 120
SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"
SLUG_REGEX = re.compile(SLUG_PATTERN)

LABEL_MAX_LENGTH = 64


def slugify(text: str, separator: str = "-") -> str:
    """
    Convert a display name to a URL-safe slug.

    Diacritics are stripped, anything outside ASCII letters/digits becomes a
    separator, runs of separators collapse, and the result is truncated to
    SLUG_MAX_LENGTH without leaving a trailing separator.

        >>> slugify("  Héllo, Wörld! ")
        'hello-world'
    """
    if not text:
        return ""

    text = unicodedata.normalize("NFKD", text.lower())
    text = "".join(c for c in text if not unicodedata.combining(c))
    text = text.encode("ascii", "ignore").decode("ascii")

    text = re.sub(r"[^a-z0-9\s_-]", " ", text)
    text = re.sub(r"[\s_-]+", separator, text)
    text = text.strip(separator)

    return text[:SLUG_MAX_LENGTH].rstrip(separator)


def validate_slug(slug: str) -> str:
    """Returns the slug unchanged if it is well formed, else raises ValidationError."""
    if not slug:
        raise ValidationError("Slug must not be empty.", field="slug")
    if len(slug) > SLUG_MAX_LENGTH:
        raise ValidationError(
            f"Slug must be at most {SLUG_MAX_LENGTH} characters.", field="slug"
        )
    if not SLUG_REGEX.fullmatch(slug):
        raise ValidationError(
            f"Slug '{slug}' is not URL-safe (lowercase letters, digits and single hyphens).",
            field="slug",
        )
    return slug


def normalize_label(label: str) -> str:
    """Trim and case-fold a tag label. The result is the tag's identity."""
    normalized = (label or "").strip().casefold()
    if not normalized:
        raise ValidationError("Tag label must not be empty.", field="tags")
    if len(normalized) > LABEL_MAX_LENGTH:
        raise ValidationError(
            f"Tag label must be at most {LABEL_MAX_LENGTH} characters.", field="tags"
        )
    return normalized
