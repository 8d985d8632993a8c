"""Global keyword table - load and hold the fallback classification data.

The table is loaded from:
1. ``settings.keyword_table_path`` when set
2. The YAML file bundled with the package (``orcasmart/data/keywords.yaml``)

It is immutable once loaded; extending it means editing the YAML, not the
classification code.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from orcasmart.catalog.normalizer import clean_prefix, is_valid_prefix, normalize
from orcasmart.config import settings
from orcasmart.infra.logging import get_logger

logger = get_logger(__name__)

BUNDLED_TABLE_PATH = Path(__file__).resolve().parent.parent / "data" / "keywords.yaml"


@dataclass(frozen=True)
class KeywordGroup:
    """A category with the terms that point at it."""

    category: str
    prefix: str
    terms: tuple[str, ...]
    label: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "KeywordGroup":
        """Create from dictionary.

        Raises:
            ValueError: If category, prefix or terms are missing or invalid
        """
        category = str(data.get("category") or "").strip()
        prefix = clean_prefix(str(data.get("prefix") or ""))
        terms = tuple(str(t).strip() for t in data.get("terms") or [] if str(t).strip())

        if not category:
            raise ValueError("Keyword group without category")
        if not is_valid_prefix(prefix):
            raise ValueError(f"Invalid prefix for keyword group '{category}': {data.get('prefix')!r}")
        if not terms:
            raise ValueError(f"Keyword group '{category}' has no terms")

        return cls(
            category=category,
            prefix=prefix,
            terms=terms,
            label=str(data.get("label") or category),
        )


@dataclass(frozen=True)
class TermEntry:
    """One flattened (term, category, prefix) candidate."""

    term: str
    term_norm: str
    category: str
    prefix: str | None


@dataclass(frozen=True)
class KeywordTable:
    """Ordered, immutable keyword configuration."""

    groups: tuple[KeywordGroup, ...]
    prefix_aliases: dict[str, str] = field(default_factory=dict)
    version: str = "0"

    @classmethod
    def from_yaml(cls, yaml_content: str) -> "KeywordTable":
        """Parse YAML content into a KeywordTable."""
        data = yaml.safe_load(yaml_content) or {}

        groups = tuple(KeywordGroup.from_dict(g) for g in data.get("groups") or [])
        if not groups:
            raise ValueError("Keyword table has no groups")

        aliases: dict[str, str] = {}
        for raw_prefix, category in (data.get("prefix_aliases") or {}).items():
            prefix = clean_prefix(str(raw_prefix))
            if not is_valid_prefix(prefix):
                raise ValueError(f"Invalid prefix alias: {raw_prefix!r}")
            aliases[prefix] = str(category)

        return cls(
            groups=groups,
            prefix_aliases=aliases,
            version=str(data.get("version", "0")),
        )

    @classmethod
    def from_file(cls, path: Path) -> "KeywordTable":
        """Load a table from a YAML file."""
        return cls.from_yaml(path.read_text(encoding="utf-8"))

    def entries(self) -> list[TermEntry]:
        """Flatten all groups into term entries, most specific first.

        Sorted by normalized term length, longest first. The sort is stable,
        so equal lengths keep table order. Duplicate normalized terms keep
        their first occurrence.
        """
        flat: list[TermEntry] = []
        seen: set[str] = set()
        for group in self.groups:
            for term in group.terms:
                term_norm = normalize(term)
                if not term_norm or term_norm in seen:
                    continue
                seen.add(term_norm)
                flat.append(TermEntry(term, term_norm, group.category, group.prefix))

        flat.sort(key=lambda e: len(e.term_norm), reverse=True)
        return flat

    def prefix_map(self) -> dict[str, str]:
        """Map every known prefix (aliases included) to its category slug."""
        mapping: dict[str, str] = {}
        for group in self.groups:
            mapping.setdefault(group.prefix, group.category)
        for prefix, category in self.prefix_aliases.items():
            mapping.setdefault(prefix, category)
        return mapping

    def category_prefix(self, category: str) -> str | None:
        """Primary prefix of a category slug, if the table knows it."""
        for group in self.groups:
            if group.category == category:
                return group.prefix
        return None

    def category_labels(self) -> dict[str, tuple[str, str]]:
        """Map category slug to (label, prefix), first group wins."""
        labels: dict[str, tuple[str, str]] = {}
        for group in self.groups:
            labels.setdefault(group.category, (group.label, group.prefix))
        return labels


def load_keyword_table(path: str | Path | None = None) -> KeywordTable:
    """Load the keyword table from ``path``, the configured path or the bundled file.

    Raises:
        FileNotFoundError: If an explicitly configured file does not exist
        ValueError: If the table content is invalid
    """
    source = Path(path or settings.keyword_table_path or BUNDLED_TABLE_PATH)
    if not source.exists():
        raise FileNotFoundError(f"Keyword table not found: {source}")

    table = KeywordTable.from_file(source)
    logger.info(
        "Keyword table loaded",
        path=str(source),
        version=table.version,
        groups=len(table.groups),
    )
    return table


# Singleton table
_table: KeywordTable | None = None


def get_keyword_table() -> KeywordTable:
    """Get the process-wide keyword table, loading it on first use."""
    global _table
    if _table is None:
        _table = load_keyword_table()
    return _table


def reset_keyword_table() -> None:
    """Drop the cached table so the next call reloads it."""
    global _table
    _table = None
