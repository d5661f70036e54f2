"""
Slug helpers for product slugs and vocabulary codes.
"""

from slugify import slugify


def make_slug(text: object) -> str:
    """Lowercase ASCII slug, e.g. "Grösse 30 cm" → "grosse-30-cm"."""
    return slugify(str(text or ""), lowercase=True)
