"""URL slugs for posts and categories"""

import re
import unicodedata


MAX_SLUG_LENGTH = 200

_DROP = re.compile(r"[^a-z0-9\s_-]")
_SEPARATORS = re.compile(r"[\s_-]+")


def _ascii_fold(text: str) -> str:
    """Strip accents (é -> e) and drop whatever has no ASCII form."""
    decomposed = unicodedata.normalize("NFKD", text)
    return decomposed.encode("ascii", "ignore").decode("ascii")


def slugify(text: str, max_length: int = MAX_SLUG_LENGTH) -> str:
    """Lowercase ASCII words joined by single hyphens.

    Punctuation is removed rather than turned into a separator, so "Ch@rs"
    becomes "chrs". A slug longer than max_length is cut back to the last
    whole word that fits.
    """
    words = _SEPARATORS.sub(" ", _DROP.sub("", _ascii_fold(text).lower())).split()
    slug = "-".join(words)
    if len(slug) <= max_length:
        return slug
    cut = slug[:max_length + 1].rfind("-")
    return slug[:cut] if cut > 0 else slug[:max_length]
