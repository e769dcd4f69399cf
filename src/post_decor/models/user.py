"""SQLAlchemy model for the users that place and own decorations."""

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from post_decor.db.session import Base


class User(Base):
    """Account reference resolved by the identity provider.

    Only the identifier and the display nickname matter here; account
    management lives outside this service.
    """

    __tablename__ = "app_user"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nickname: Mapped[str] = mapped_column(Text, nullable=False)
