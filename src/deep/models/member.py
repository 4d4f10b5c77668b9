"""Member accounts (entry authors)."""

from __future__ import annotations

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from deep.orm.base import DeepBase


class Member(DeepBase):
    __tablename__ = "members"

    member_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    group_id: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    username: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    screen_name: Mapped[str] = mapped_column(Text, default="", nullable=False)
    email: Mapped[str] = mapped_column(Text, default="", nullable=False)

    def __repr__(self) -> str:
        return f"<Member {self.username!r}>"
