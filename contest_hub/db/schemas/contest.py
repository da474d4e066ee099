# db/schemas/contest.py
from typing import Annotated, Optional
from pydantic import ConfigDict, Field
from contest_hub.db.schemas._base import OrmModel
from contest_hub.utils.sentinels import Missing

# Columns are int4 in the relational store.
INT4_MAX = 2147483647

PositiveInt4 = Annotated[int, Field(gt=0, le=INT4_MAX)]
NonNegativeInt4 = Annotated[int, Field(ge=0, le=INT4_MAX)]


class ContestBase(OrmModel):
    contestname: str
    conteststartdate: int
    contestduration: int
    contestlastmileanswer: Optional[int] = None
    contestlastmilescore: Optional[int] = None
    contestlocalsite: int
    contestpenalty: int
    contestmaxfilesize: int
    contestactive: bool = False
    contestmainsite: int
    contestkeys: str = ""
    contestunlockkey: str = ""
    contestmainsiteurl: str = ""


class ContestCreate(OrmModel):
    """
    Client input for contest creation.

    Every field is optional here; the create use case decides what is missing.
    ``None`` means "not supplied", numeric zero is a real value.
    """
    contestname: Optional[str] = None
    conteststartdate: Optional[int] = None
    contestduration: Optional[int] = None
    contestlastmileanswer: Optional[int] = None
    contestlastmilescore: Optional[int] = None
    contestlocalsite: Optional[int] = None
    contestpenalty: Optional[int] = None
    contestmaxfilesize: Optional[int] = None
    contestmainsite: Optional[int] = None
    contestkeys: Optional[str] = None
    contestunlockkey: Optional[str] = None
    contestmainsiteurl: Optional[str] = None


class ContestRecord(ContestBase):
    """Fully-constructed contest row, checked field by field before it is written."""
    model_config = ConfigDict(from_attributes=True, strict=True)

    contestnumber: PositiveInt4
    contestname: Annotated[str, Field(min_length=1, max_length=100)]
    conteststartdate: PositiveInt4
    contestduration: PositiveInt4
    contestlastmileanswer: Optional[NonNegativeInt4] = None
    contestlastmilescore: Optional[NonNegativeInt4] = None
    contestlocalsite: PositiveInt4
    contestpenalty: NonNegativeInt4
    contestmaxfilesize: PositiveInt4
    contestactive: bool = False
    contestmainsite: PositiveInt4
    contestkeys: str = ""
    contestunlockkey: Annotated[str, Field(max_length=100)] = ""
    contestmainsiteurl: Annotated[str, Field(max_length=200)] = ""


class ContestUpdate(OrmModel):
    contestnumber: int
    contestname: str | Missing = Missing()
    conteststartdate: int | Missing = Missing()
    contestduration: int | Missing = Missing()
    contestlastmileanswer: int | Missing | None = Missing()
    contestlastmilescore: int | Missing | None = Missing()
    contestlocalsite: int | Missing = Missing()
    contestpenalty: int | Missing = Missing()
    contestmaxfilesize: int | Missing = Missing()
    contestactive: bool | Missing = Missing()
    contestmainsite: int | Missing = Missing()
    contestkeys: str | Missing = Missing()
    contestunlockkey: str | Missing = Missing()
    contestmainsiteurl: str | Missing = Missing()


class ContestRead(ContestBase):
    contestnumber: int
    updatetime: Optional[int] = None
