import asyncio
import time
from typing import Dict, List, Optional

import pytest

from contest_hub.db.database import DataBase
from contest_hub.db.repositories.contest import ContestRepository
from contest_hub.db.schemas.contest import ContestCreate, ContestRecord, ContestRead, ContestUpdate
from contest_hub.services.contest import ContestService
from contest_hub.utils.sentinels import provided


class InMemoryContestRepository(ContestRepository):
    """Dictionary-backed stand-in for the SQL repository."""

    def __init__(self) -> None:
        self.rows: Dict[int, ContestRead] = {}
        self.calls: List[str] = []

    async def _io(self, name: str) -> None:
        self.calls.append(name)
        # Yield like a real driver would so concurrent callers interleave.
        await asyncio.sleep(0)

    async def find_by_name(self, name: str) -> Optional[ContestRead]:
        await self._io("find_by_name")
        return next((c for c in self.rows.values() if c.contestname == name), None)

    async def list(self) -> List[ContestRead]:
        await self._io("list")
        return [self.rows[k] for k in sorted(self.rows)]

    async def create(self, contest: ContestRecord) -> ContestRead:
        await self._io("create")
        if contest.contestnumber in self.rows:
            raise RuntimeError(f"duplicate key {contest.contestnumber}")
        row = ContestRead(**contest.model_dump(), updatetime=int(time.time()))
        self.rows[row.contestnumber] = row
        return row

    async def get_last_id(self) -> Optional[int]:
        await self._io("get_last_id")
        return max(self.rows) if self.rows else None

    async def get_by_id(self, contestnumber: int) -> Optional[ContestRead]:
        await self._io("get_by_id")
        return self.rows.get(contestnumber)

    async def get_active(self) -> Optional[ContestRead]:
        await self._io("get_active")
        return next((self.rows[k] for k in sorted(self.rows) if self.rows[k].contestactive), None)

    async def update(self, payload: ContestUpdate) -> ContestRead:
        await self._io("update")
        current = self.rows.get(payload.contestnumber)
        if current is None:
            raise LookupError("Contest not found.")
        changes = {
            field: getattr(payload, field)
            for field in ContestUpdate.model_fields
            if field != "contestnumber" and provided(getattr(payload, field))
        }
        changes["updatetime"] = int(time.time())
        row = current.model_copy(update=changes)
        self.rows[row.contestnumber] = row
        if row.contestactive:
            for number, other in list(self.rows.items()):
                if number != row.contestnumber and other.contestactive:
                    self.rows[number] = other.model_copy(update={"contestactive": False})
        return row

    async def delete(self, contestnumber: int) -> None:
        await self._io("delete")
        self.rows.pop(contestnumber, None)


def make_payload(**overrides) -> ContestCreate:
    fields = dict(
        contestname="Alpha Contest",
        conteststartdate=1700000000,
        contestduration=18000,
        contestlocalsite=1,
        contestmainsite=1,
        contestpenalty=1200,
        contestmaxfilesize=100000,
    )
    fields.update(overrides)
    return ContestCreate(**fields)


@pytest.fixture
def repository() -> InMemoryContestRepository:
    return InMemoryContestRepository()


@pytest.fixture
def service(repository) -> ContestService:
    return ContestService(repository)


@pytest.fixture
async def database(tmp_path):
    DataBase.reset()
    db = DataBase(url=f"sqlite+aiosqlite:///{tmp_path / 'contests.db'}", echo=False)
    await db.create_all()
    yield db
    await db.dispose()
    DataBase.reset()
