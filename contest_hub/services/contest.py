# services/contest.py
import asyncio
import logging
from typing import Any, ClassVar, Dict, List, Optional
from weakref import WeakKeyDictionary

from contest_hub.db.repositories.contest import ContestRepository, ContestsRepository
from contest_hub.db.schemas.contest import ContestCreate, ContestRead, ContestUpdate
from contest_hub.errors import AlreadyExistsError, BadRequestError, NotFoundError
from contest_hub.services.audit import instrument_service_class
from contest_hub.services.validation import validate_contest
from contest_hub.utils.sentinels import provided

logger = logging.getLogger(__name__)

# Fields a client must send on create; None means absent, zero is a value.
CREATE_REQUIRED_FIELDS = (
	"conteststartdate",
	"contestduration",
	"contestlocalsite",
	"contestmainsite",
	"contestpenalty",
	"contestmaxfilesize",
)


class ContestService:
	"""
	Contest use cases: create, get, list, update, activate and delete.

	Strict rule: this service does **not** touch SQLAlchemy sessions or models.
	It only calls the ContestRepository contract and returns DTOs, so any
	implementation of the contract (SQL, in-memory) can back it.
	"""

	# Name check, number allocation and insert run as one step per backing store,
	# however many service instances point at it.
	_create_locks: ClassVar["WeakKeyDictionary[object, asyncio.Lock]"] = WeakKeyDictionary()

	def __init__(self, repository: Optional[ContestRepository] = None) -> None:
		self._repository: ContestRepository = repository or ContestsRepository()

	@property
	def _create_lock(self) -> asyncio.Lock:
		key = self._repository.store_key()
		lock = self._create_locks.get(key)
		if lock is None:
			lock = self._create_locks[key] = asyncio.Lock()
		return lock

	@property
	def repository(self) -> ContestRepository:
		return self._repository

	# ---------
	# Queries
	# ---------
	async def get_contest(self, contestnumber: int) -> ContestRead:
		return await self._exists(self._check_id(contestnumber))

	async def list_contests(self) -> List[ContestRead]:
		return await self._repository.list()

	async def get_active_contest(self) -> ContestRead:
		contest = await self._repository.get_active()
		if contest is None:
			raise NotFoundError("There is no active contest")
		return contest

	# ----------
	# Commands
	# ----------
	async def create_contest(self, payload: ContestCreate) -> ContestRead:
		"""
		Create a contest from client input.

		The contest number is allocated as the current maximum plus one, optional
		cut-offs default to the duration, text fields default to empty strings and
		the contest always starts inactive.
		"""
		name = (payload.contestname or "").strip()
		if not name:
			raise BadRequestError("Contest name must not be empty")

		async with self._create_lock:
			if await self._repository.find_by_name(name) is not None:
				raise AlreadyExistsError("Contest already exists")

			if any(getattr(payload, field) is None for field in CREATE_REQUIRED_FIELDS):
				raise BadRequestError("Missing properties")

			duration = payload.contestduration
			last_id = await self._repository.get_last_id()
			candidate: Dict[str, Any] = {
				"contestnumber": (last_id or 0) + 1,
				"contestname": name,
				"conteststartdate": payload.conteststartdate,
				"contestduration": duration,
				"contestlastmileanswer": duration if payload.contestlastmileanswer is None else payload.contestlastmileanswer,
				"contestlastmilescore": duration if payload.contestlastmilescore is None else payload.contestlastmilescore,
				"contestlocalsite": payload.contestlocalsite,
				"contestpenalty": payload.contestpenalty,
				"contestmaxfilesize": payload.contestmaxfilesize,
				"contestactive": False,
				"contestmainsite": payload.contestmainsite,
				"contestkeys": payload.contestkeys if payload.contestkeys is not None else "",
				"contestunlockkey": payload.contestunlockkey if payload.contestunlockkey is not None else "",
				"contestmainsiteurl": payload.contestmainsiteurl if payload.contestmainsiteurl is not None else "",
			}
			record = validate_contest(candidate)
			contest = await self._repository.create(record)

		logger.info("Contest %s (%s) created", contest.contestnumber, contest.contestname)
		return contest

	async def update_contest(self, payload: ContestUpdate) -> ContestRead:
		"""
		Merge the supplied fields onto an existing contest.

		MISSING fields stay untouched. An empty ``contestkeys`` also means
		"leave unchanged", which is what existing clients send when they do not
		want to touch the keys. ``contestactive`` is ignored here, see
		:meth:`activate_contest`.
		"""
		current = await self._exists(self._check_id(payload.contestnumber))

		changes: Dict[str, Any] = {}
		for field in ContestUpdate.model_fields:
			if field in ("contestnumber", "contestactive"):
				continue
			value = getattr(payload, field)
			if provided(value):
				changes[field] = value
		if changes.get("contestkeys") == "":
			del changes["contestkeys"]

		if "contestname" in changes:
			changes["contestname"] = (changes["contestname"] or "").strip()
			if not changes["contestname"]:
				raise BadRequestError("Contest name must not be empty")
			if changes["contestname"] != current.contestname:
				clash = await self._repository.find_by_name(changes["contestname"])
				if clash is not None and clash.contestnumber != current.contestnumber:
					raise AlreadyExistsError("Contest already exists")

		validate_contest(self._merge(current, changes))
		updated = await self._repository.update(ContestUpdate(contestnumber=current.contestnumber, **changes))
		logger.info("Contest %s updated (%s)", updated.contestnumber, ", ".join(sorted(changes)) or "no changes")
		return updated

	async def activate_contest(self, contestnumber: int, contestactive: bool) -> ContestRead:
		"""Switch a contest on or off; switching one on turns every other contest off."""
		current = await self._exists(self._check_id(contestnumber))
		validate_contest(self._merge(current, {"contestactive": contestactive}))
		updated = await self._repository.update(
			ContestUpdate(contestnumber=current.contestnumber, contestactive=contestactive)
		)
		logger.info("Contest %s active=%s", updated.contestnumber, updated.contestactive)
		return updated

	async def delete_contest(self, contestnumber: int) -> None:
		# Hard delete by key; rows of other tables are not touched.
		current = await self._exists(self._check_id(contestnumber))
		await self._repository.delete(current.contestnumber)
		logger.info("Contest %s deleted", current.contestnumber)

	# -----------------
	# Helper utilities
	# -----------------
	@staticmethod
	def _check_id(contestnumber: Any) -> int:
		if isinstance(contestnumber, bool) or not isinstance(contestnumber, int) or contestnumber < 1:
			raise BadRequestError("Invalid contest ID")
		return contestnumber

	async def _exists(self, contestnumber: int) -> ContestRead:
		contest = await self._repository.get_by_id(contestnumber)
		if contest is None:
			raise NotFoundError("Contest does not exist")
		return contest

	@staticmethod
	def _merge(current: ContestRead, changes: Dict[str, Any]) -> Dict[str, Any]:
		merged = current.model_dump(exclude={"updatetime"})
		merged.update(changes)
		return merged


instrument_service_class(ContestService, prefix="services.contest")

__all__ = ["ContestService", "CREATE_REQUIRED_FIELDS"]
