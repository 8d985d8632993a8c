"""Category model - per-owner catalog taxonomy."""

from sqlalchemy import Boolean, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from orcasmart.models.base import Base, TimestampMixin, new_id


class Category(Base, TimestampMixin):
    """Seller-defined product category.

    The prefix is the SKU namespace of the category and, like the slug, is
    unique within one owner's category set.
    """

    __tablename__ = "catalog_categories"
    __table_args__ = (
        UniqueConstraint("owner_id", "slug", name="uq_category_owner_slug"),
        UniqueConstraint("owner_id", "prefix", name="uq_category_owner_prefix"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    owner_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    label: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), nullable=False)
    prefix: Mapped[str] = mapped_column(String(5), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, slug='{self.slug}', prefix='{self.prefix}')>"
