from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from gearlink.errors import NotFound
from gearlink.models import DeviceRecord

_IMMUTABLE_FIELDS = {"id", "kind"}


class DeviceRegistry:
    """Authoritative cache of one device universe, keyed by device id.

    Readers always get copies. Writers go through ``replace_all``, ``upsert``
    and ``remove``; the registry never publishes events itself.
    """

    def __init__(self, records: Iterable[DeviceRecord] = ()) -> None:
        self._records: dict[str, DeviceRecord] = {}
        self.replace_all(records)

    def replace_all(self, records: Iterable[DeviceRecord]) -> None:
        # Build first, swap last: a failure leaves the old contents in place.
        staged: dict[str, DeviceRecord] = {}
        for record in records:
            if not isinstance(record, DeviceRecord):
                raise TypeError(f"Expected DeviceRecord, got {type(record).__name__}")
            staged[record.id] = record
        self._records = staged

    def get(self, device_id: str) -> DeviceRecord:
        try:
            return self._records[device_id].model_copy(deep=True)
        except KeyError:
            raise NotFound(device_id) from None

    def find(self, device_id: str) -> DeviceRecord | None:
        record = self._records.get(device_id)
        return None if record is None else record.model_copy(deep=True)

    def upsert(self, device_id: str, **changes: Any) -> DeviceRecord:
        """Apply a field-level update to an existing record and return a copy."""
        if device_id not in self._records:
            raise NotFound(device_id)
        forbidden = _IMMUTABLE_FIELDS & changes.keys()
        if forbidden:
            raise ValueError(f"Cannot change {', '.join(sorted(forbidden))} of a record")

        current = self._records[device_id]
        updated = DeviceRecord.model_validate({**current.model_dump(), **changes})
        self._records[device_id] = updated
        return updated.model_copy(deep=True)

    def remove(self, device_id: str) -> bool:
        return self._records.pop(device_id, None) is not None

    def all(self) -> list[DeviceRecord]:
        return [record.model_copy(deep=True) for record in self._records.values()]

    def filter(self, predicate: Callable[[DeviceRecord], bool]) -> list[DeviceRecord]:
        return [record for record in self.all() if predicate(record)]

    def connected(self) -> list[DeviceRecord]:
        return self.filter(lambda record: record.connected)

    def disconnected(self) -> list[DeviceRecord]:
        return self.filter(lambda record: not record.connected)

    def is_connected(self, device_id: str) -> bool:
        record = self._records.get(device_id)
        return record.connected if record else False

    def filter_by_name(self, query: str) -> list[DeviceRecord]:
        needle = query.lower()
        return self.filter(
            lambda record: needle in record.name.lower()
            or needle in str(record.metadata.get("model", "")).lower()
        )

    def filter_by_type(self, device_type: str) -> list[DeviceRecord]:
        return self.filter(lambda record: record.type == device_type)

    def count(self) -> int:
        return len(self._records)

    def connected_count(self) -> int:
        return sum(1 for record in self._records.values() if record.connected)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, device_id: object) -> bool:
        return device_id in self._records
