"""LearnedTerm model - single terms learned from accepted classifications."""

from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from orcasmart.models.base import Base, TimestampMixin, new_id


class LearnedTerm(Base, TimestampMixin):
    """Auto-learned term with a hit counter, keyed by (owner, normalized term)."""

    __tablename__ = "catalog_learned_terms"
    __table_args__ = (
        UniqueConstraint("owner_id", "term_norm", name="uq_learned_owner_term"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    owner_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    term: Mapped[str] = mapped_column(String(200), nullable=False)
    term_norm: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(200), nullable=False)
    prefix: Mapped[str] = mapped_column(String(5), nullable=False)
    hits: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    def __repr__(self) -> str:
        return f"<LearnedTerm(term_norm='{self.term_norm}', hits={self.hits})>"
