"""SQLAlchemy model for reusable sticker assets."""

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from post_decor.db.session import Base


class Sticker(Base):
    """Decorative asset that can be placed any number of times."""

    __tablename__ = "sticker"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str | None] = mapped_column(Text, nullable=True)
