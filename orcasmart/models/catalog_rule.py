"""CatalogRule model - explicit owner rules mapping terms to a category."""

from sqlalchemy import Boolean, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from orcasmart.models.base import Base, JsonType, TimestampMixin, new_id


class CatalogRule(Base, TimestampMixin):
    """Owner-defined rule: a list of terms pointing at one category.

    One rule per (owner, category); later writes merge into it.
    """

    __tablename__ = "catalog_rules"
    __table_args__ = (
        UniqueConstraint("owner_id", "category", name="uq_rule_owner_category"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    owner_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    category: Mapped[str] = mapped_column(String(200), nullable=False)
    prefix: Mapped[str | None] = mapped_column(String(5), nullable=True)
    terms: Mapped[list[str]] = mapped_column(JsonType, nullable=False, default=list)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<CatalogRule(id={self.id}, category='{self.category}')>"
