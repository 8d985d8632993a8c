"""Text normalization helpers for catalog matching.

Everything compared by the classifiers goes through ``normalize`` first, so
accents, case and punctuation never decide a match.
"""

import re
import unicodedata
from pathlib import PurePosixPath

_NON_MATCHABLE = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")
_FILENAME_SEPARATORS = re.compile(r"[_\-]+")
_SKU_PREFIX = re.compile(r"^([A-Z]{2,5})[-_]")

MIN_PREFIX_LENGTH = 2
MAX_PREFIX_LENGTH = 5


def strip_accents(text: str) -> str:
    """Remove combining diacritical marks after NFD decomposition."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize(text: str | None) -> str:
    """Normalize free text for comparison.

    Lower-cases, strips accents, replaces anything but letters, digits,
    whitespace and hyphens with a space, collapses whitespace and trims.
    Idempotent; ``None`` and empty input give ``""``.

    Example:
        >>> normalize("  Tinta ACRÍLICA, 18L ")
        'tinta acrilica 18l'
    """
    if not text:
        return ""
    value = strip_accents(text.lower())
    value = _NON_MATCHABLE.sub(" ", value)
    return _WHITESPACE.sub(" ", value).strip()


def slugify(text: str | None) -> str:
    """Build a URL-safe slug (``"Elétrica Predial"`` -> ``"eletrica-predial"``)."""
    if not text:
        return ""
    value = strip_accents(text.lower())
    return _NON_ALNUM_RUN.sub("-", value).strip("-")


def clean_prefix(raw: str | None) -> str:
    """Uppercase A-Z letters of ``raw``, truncated to the maximum prefix length."""
    if not raw:
        return ""
    letters = [ch for ch in strip_accents(raw).upper() if "A" <= ch <= "Z"]
    return "".join(letters)[:MAX_PREFIX_LENGTH]


def is_valid_prefix(prefix: str | None) -> bool:
    """True for 2-5 uppercase ASCII letters."""
    return bool(prefix) and clean_prefix(prefix) == prefix and len(prefix) >= MIN_PREFIX_LENGTH


def strip_filename(name: str | None) -> str:
    """Turn an uploaded file name into matchable text.

    Drops directories and the extension, and turns ``_``/``-`` runs into
    spaces: ``"fotos/Tinta_Acrilica-branca.JPG"`` -> ``"Tinta Acrilica branca"``.
    """
    if not name:
        return ""
    base = PurePosixPath(name.replace("\\", "/")).name
    stem = re.sub(r"\.[A-Za-z0-9]+$", "", base)
    stem = _FILENAME_SEPARATORS.sub(" ", stem)
    return _WHITESPACE.sub(" ", stem).strip()


def _sku_key(value: str | None) -> str:
    return strip_accents((value or "").strip().upper())


def extract_sku_prefix(value: str | None) -> str | None:
    """Return the leading 2-5 letter token of ``ABC-...``/``ABC_...`` strings."""
    match = _SKU_PREFIX.match(_sku_key(value))
    return match.group(1) if match else None


def sku_body(value: str | None) -> str:
    """Return what follows a recognised prefix (``"ele-0012"`` -> ``"0012"``)."""
    key = _sku_key(value)
    return _SKU_PREFIX.sub("", key, count=1)
