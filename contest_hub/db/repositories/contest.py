# db/repositories/contest.py
from abc import ABC, abstractmethod
from typing import List, Optional

from sqlalchemy import select, func, update, delete, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from contest_hub.db.database import DataBase
from contest_hub.db.models.contest import Contest
from contest_hub.db.schemas.contest import ContestRecord, ContestRead, ContestUpdate
from contest_hub.utils.sentinels import provided


class ContestRepository(ABC):
	"""
	Storage contract for contests.

	Lookups answer ``None`` when nothing matches; raised exceptions are reserved
	for genuine storage faults and must be left to propagate.
	"""

	def store_key(self) -> object:
		"""Identity of the backing store; services over the same store share one create lock."""
		return self

	@abstractmethod
	async def find_by_name(self, name: str) -> Optional[ContestRead]: ...

	@abstractmethod
	async def list(self) -> List[ContestRead]: ...

	@abstractmethod
	async def create(self, contest: ContestRecord) -> ContestRead: ...

	@abstractmethod
	async def get_last_id(self) -> Optional[int]: ...

	@abstractmethod
	async def get_by_id(self, contestnumber: int) -> Optional[ContestRead]: ...

	@abstractmethod
	async def get_active(self) -> Optional[ContestRead]: ...

	@abstractmethod
	async def update(self, payload: ContestUpdate) -> ContestRead: ...

	@abstractmethod
	async def delete(self, contestnumber: int) -> None: ...


# Columns a partial update may touch; contestnumber is the key, updatetime belongs to the store.
_UPDATABLE_FIELDS = (
	"contestname",
	"conteststartdate",
	"contestduration",
	"contestlastmileanswer",
	"contestlastmilescore",
	"contestlocalsite",
	"contestpenalty",
	"contestmaxfilesize",
	"contestactive",
	"contestmainsite",
	"contestkeys",
	"contestunlockkey",
	"contestmainsiteurl",
)


class ContestsRepository(ContestRepository):
	"""
	SQLAlchemy implementation backed by the :class:`DataBase` facade.
	Every method opens its own session, so each call is one transaction.
	"""

	def __init__(self, database: Optional[DataBase] = None) -> None:
		self._database: DataBase = database or DataBase()

	def store_key(self) -> object:
		return self._database

	async def find_by_name(self, name: str) -> Optional[ContestRead]:
		"""Exact, case-sensitive match on contestname."""
		async with self._database.session() as s:
			res = await s.execute(select(Contest).where(Contest.contestname == name))
			row = res.scalar_one_or_none()
		return ContestRead.model_validate(row) if row is not None else None

	async def list(self) -> List[ContestRead]:
		async with self._database.session() as s:
			res = await s.execute(select(Contest).order_by(Contest.contestnumber.asc()))
			rows = res.scalars().all()
		return [ContestRead.model_validate(r) for r in rows]

	async def create(self, contest: ContestRecord) -> ContestRead:
		"""
		Insert one row; the primary key comes from the caller.

		Raises:
			IntegrityError: duplicate contestnumber or contestname.
		"""
		obj = Contest(**contest.model_dump())
		async with self._database.session() as s:
			s.add(obj)
			try:
				await s.flush()
			except IntegrityError:
				# rollback happens in context manager
				raise
			if obj.contestactive:
				await self._deactivate_others(s, obj.contestnumber)
			await s.refresh(obj)
			return ContestRead.model_validate(obj)

	async def get_last_id(self) -> Optional[int]:
		async with self._database.session() as s:
			res = await s.execute(select(func.max(Contest.contestnumber)))
			last_id = res.scalar_one_or_none()
		return int(last_id) if last_id is not None else None

	async def get_by_id(self, contestnumber: int) -> Optional[ContestRead]:
		async with self._database.session() as s:
			row = await s.get(Contest, contestnumber)
		return ContestRead.model_validate(row) if row is not None else None

	async def get_active(self) -> Optional[ContestRead]:
		async with self._database.session() as s:
			stmt = (
				select(Contest)
				.where(Contest.contestactive.is_(True))
				.order_by(Contest.contestnumber.asc())
				.limit(1)
			)
			row = (await s.execute(stmt)).scalar_one_or_none()
		return ContestRead.model_validate(row) if row is not None else None

	async def update(self, payload: ContestUpdate) -> ContestRead:
		"""
		Partially update a contest by contestnumber.
		Only fields that are not MISSING are written.

		Returns:
			ContestRead: the row as it exists after the update.

		Raises:
			LookupError: if the contest does not exist.
			IntegrityError: on unique constraint violation (contestname).
		"""
		async with self._database.session() as s:
			db_obj = await s.get(Contest, payload.contestnumber)
			if db_obj is None:
				raise LookupError("Contest not found.")

			for field in _UPDATABLE_FIELDS:
				value = getattr(payload, field)
				if provided(value):
					setattr(db_obj, field, value)

			await s.flush()
			if db_obj.contestactive:
				await self._deactivate_others(s, db_obj.contestnumber)
			await s.refresh(db_obj)
			return ContestRead.model_validate(db_obj)

	async def delete(self, contestnumber: int) -> None:
		async with self._database.session() as s:
			await s.execute(delete(Contest).where(Contest.contestnumber == contestnumber))

	@staticmethod
	async def _deactivate_others(s: AsyncSession, contestnumber: int) -> None:
		# At most one contest is active at a time.
		stmt = (
			update(Contest)
			.where(and_(Contest.contestactive.is_(True), Contest.contestnumber != contestnumber))
			.values(contestactive=False)
			.execution_options(synchronize_session=False)
		)
		await s.execute(stmt)
