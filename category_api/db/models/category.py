from __future__ import annotations

from sqlalchemy import CheckConstraint, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from category_api.db.base import Base, IntPkMixin, TimestampMixin, VersionMixin

NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 255


class CategoryMixin(IntPkMixin, VersionMixin, TimestampMixin):
    """Columns shared by every category table."""

    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    description: Mapped[str] = mapped_column(
        String(DESCRIPTION_MAX_LENGTH), nullable=False, default="", server_default=""
    )

    @declared_attr.directive
    def __table_args__(cls):
        return (CheckConstraint("version >= 0", name="version_non_negative"),)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id!r} name={self.name!r} version={self.version!r}>"


class UserCategory(CategoryMixin, Base):
    """Category assigned to users."""
    __tablename__ = "user_categories"


class SupplierCategory(CategoryMixin, Base):
    """Category assigned to suppliers."""
    __tablename__ = "supplier_categories"
