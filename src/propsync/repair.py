"""Post-sign-in repair of display identifiers.

Records created before display identifiers existed carry no
``displayId``, an empty one, or a copy of their internal ``id``.  The
repair pass gives each of them a fresh identifier and makes display ids
unique within each collection again.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from propsync._constants import DEFAULT_MAX_ID_ATTEMPTS
from propsync.identifiers import DisplayIdKind, generate_display_id, kind_for_role
from propsync.models._base import DisplayRecordModel
from propsync.models.people import User
from propsync.models.state import DISPLAY_ID_COLLECTIONS, AppState
from propsync.sync import StateSynchronizer, WriteResult

_logger = logging.getLogger(__name__)

_COLLECTION_KINDS: dict[str, Callable[[DisplayRecordModel], DisplayIdKind]] = {
    "users": lambda record: kind_for_role(record.role) if isinstance(record, User) else DisplayIdKind.TENANT,
    "properties": lambda _record: DisplayIdKind.PROPERTY,
    "tickets": lambda _record: DisplayIdKind.REQUEST,
    "applications": lambda _record: DisplayIdKind.APPLICATION,
}


@dataclass(frozen=True)
class RepairedRecord:
    collection: str
    record_id: str
    old_display_id: str | None
    new_display_id: str


@dataclass(frozen=True)
class RepairResult:
    state: AppState
    repairs: tuple[RepairedRecord, ...] = ()
    write: WriteResult | None = None

    @property
    def modified(self) -> bool:
        return bool(self.repairs)


def _repair_collection(
    name: str,
    records: list[DisplayRecordModel],
    *,
    max_attempts: int,
) -> tuple[list[DisplayRecordModel], list[RepairedRecord]]:
    kind_of = _COLLECTION_KINDS[name]

    # First pass: which records keep their id.  The first holder of a
    # duplicated id keeps it; later holders are repaired.
    valid: set[str] = set()
    broken: set[int] = set()
    for index, record in enumerate(records):
        if record.needs_display_id or record.display_id in valid:
            broken.add(index)
        else:
            valid.add(record.display_id)  # type: ignore[arg-type]

    if not broken:
        return records, []

    repaired_records: list[DisplayRecordModel] = []
    repairs: list[RepairedRecord] = []
    for index, record in enumerate(records):
        if index not in broken:
            repaired_records.append(record)
            continue
        new_id = generate_display_id(kind_of(record), valid, max_attempts=max_attempts)
        valid.add(new_id)
        repaired_records.append(record.model_copy(update={"display_id": new_id}))
        repairs.append(
            RepairedRecord(
                collection=name,
                record_id=record.id,
                old_display_id=record.display_id,
                new_display_id=new_id,
            )
        )
    return repaired_records, repairs


def repair_display_ids(state: AppState, *, max_attempts: int = DEFAULT_MAX_ID_ATTEMPTS) -> RepairResult:
    """Backfill missing, legacy and duplicate display identifiers.

    A record is rewritten when its ``displayId`` is absent, empty, equal
    to its internal ``id``, or already used by an earlier record of the
    same collection.  Well-formed distinct ids are left alone, so running
    the pass twice changes nothing the second time.
    """
    updates: dict[str, list[DisplayRecordModel]] = {}
    repairs: list[RepairedRecord] = []
    for name in DISPLAY_ID_COLLECTIONS:
        records = list(getattr(state, name))
        fixed, collection_repairs = _repair_collection(name, records, max_attempts=max_attempts)
        if collection_repairs:
            updates[name] = fixed
            repairs.extend(collection_repairs)

    if not repairs:
        return RepairResult(state=state)

    current = state.current_user
    if current is not None and "users" in updates:
        refreshed = next((user for user in updates["users"] if user.id == current.id), None)
        if refreshed is not None and refreshed.display_id != current.display_id:
            updates["current_user"] = refreshed  # type: ignore[assignment]

    for repair in repairs:
        _logger.info(
            "Repaired %s record %s display id %r -> %s",
            repair.collection,
            repair.record_id,
            repair.old_display_id,
            repair.new_display_id,
        )
    return RepairResult(state=state.model_copy(update=updates), repairs=tuple(repairs))


async def repair_and_persist(
    synchronizer: StateSynchronizer,
    *,
    max_attempts: int = DEFAULT_MAX_ID_ATTEMPTS,
) -> RepairResult:
    """Run the repair pass on the cached state and persist any fix.

    Nothing is written when the state is already clean.
    """
    result = repair_display_ids(synchronizer.read(), max_attempts=max_attempts)
    if not result.modified:
        return result
    write = await synchronizer.write(result.state)
    if not write.ok:
        _logger.warning("Repaired display ids saved locally but not remotely: %s", write.reason)
    return RepairResult(state=result.state, repairs=result.repairs, write=write)
