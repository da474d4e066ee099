# db/models/contest.py
import time
from typing import Optional
from sqlalchemy import Boolean, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from contest_hub.db.models._base import Base


def _epoch_now() -> int:
    return int(time.time())


class Contest(Base):
    __tablename__ = "contesttable"
    __table_args__ = (
        UniqueConstraint("contestname", name="contesttable_contestname_key"),
    )

    # Assigned by the application (max + 1), never by the store.
    contestnumber: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    contestname: Mapped[str] = mapped_column(String(100), nullable=False)
    conteststartdate: Mapped[int] = mapped_column(Integer, nullable=False)
    contestduration: Mapped[int] = mapped_column(Integer, nullable=False)
    contestlastmileanswer: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    contestlastmilescore: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    contestlocalsite: Mapped[int] = mapped_column(Integer, nullable=False)
    contestpenalty: Mapped[int] = mapped_column(Integer, nullable=False)
    contestmaxfilesize: Mapped[int] = mapped_column(Integer, nullable=False)
    contestactive: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    contestmainsite: Mapped[int] = mapped_column(Integer, nullable=False)
    contestkeys: Mapped[str] = mapped_column(Text, nullable=False, default="")
    contestunlockkey: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    contestmainsiteurl: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    updatetime: Mapped[int] = mapped_column(Integer, nullable=False, default=_epoch_now, onupdate=_epoch_now)
