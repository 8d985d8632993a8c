"""SkuCounter model - monotonic sequence per (scope, prefix)."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from orcasmart.models.base import Base, utcnow


class SkuCounter(Base):
    """Last SKU number issued for a prefix within a scope.

    Rows are created lazily on first allocation and never deleted.
    """

    __tablename__ = "sku_counters"

    scope: Mapped[str] = mapped_column(String(128), primary_key=True)
    prefix: Mapped[str] = mapped_column(String(5), primary_key=True)
    next: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<SkuCounter(scope='{self.scope}', prefix='{self.prefix}', next={self.next})>"
