"""벌크 선택 상태 머신.

Bulk selection state machine. Holds the raw set of selected shift ids and
derives everything it exposes from the intersection with the live shift
collection, so ids of shifts that disappeared are never reported.

Grouping:
    - 담당자별: 담당자 ID, 오픈 시프트는 OPEN_BUCKET (By assignee; open shifts share one bucket)
    - 날짜별: 매장 현지 날짜 "YYYY-MM-DD" (By shop-local date key)
"""

from collections.abc import Hashable, Iterable, Sequence
from typing import Any
from zoneinfo import ZoneInfo

from shopshift.scheduling.timezones import date_key

# 오픈 시프트 그룹 키 (Group key for unassigned/open shifts)
OPEN_BUCKET: str = "__open__"


def assignee_key(shift: Any) -> Hashable:
    if shift.is_open or shift.user_id is None:
        return OPEN_BUCKET
    return shift.user_id


class BulkSelection:
    """시프트 다중 선택 상태.

    Selection over a live, externally replaced shift collection.

    Group toggles are all-or-none: when every shift of the group is selected
    the whole group is deselected, otherwise the whole group is selected.
    A group with no shifts is left alone.
    """

    def __init__(self, shifts: Sequence[Any] = (), zone: str | ZoneInfo | None = None) -> None:
        self._zone = zone
        self._raw: set[Hashable] = set()
        self._shifts: list[Any] = []
        self._valid_ids: set[Hashable] = set()
        self._by_assignee: dict[Hashable, list[Hashable]] = {}
        self._by_date: dict[str, list[Hashable]] = {}
        self.set_shifts(shifts)

    def set_shifts(self, shifts: Sequence[Any]) -> None:
        """표시 중인 시프트 목록을 교체하고 사라진 선택을 정리합니다.

        Replace the visible collection, rebuild the group indexes and prune
        selected ids that no longer exist.
        """
        self._shifts = list(shifts)
        self._valid_ids = {shift.id for shift in self._shifts}
        self._by_assignee = {}
        self._by_date = {}
        for shift in self._shifts:
            self._by_assignee.setdefault(assignee_key(shift), []).append(shift.id)
            self._by_date.setdefault(date_key(shift.start_time, self._zone), []).append(shift.id)
        self._raw &= self._valid_ids

    @property
    def selected_ids(self) -> set[Hashable]:
        return self._raw & self._valid_ids

    @property
    def selected_count(self) -> int:
        return len(self.selected_ids)

    @property
    def selected_shifts(self) -> list[Any]:
        selected = self.selected_ids
        return [shift for shift in self._shifts if shift.id in selected]

    def is_selected(self, shift_id: Hashable) -> bool:
        return shift_id in self._raw and shift_id in self._valid_ids

    def toggle_shift(self, shift_id: Hashable) -> None:
        if shift_id in self._raw:
            self._raw.discard(shift_id)
        elif shift_id in self._valid_ids:
            self._raw.add(shift_id)

    def toggle_assignee(self, key: Hashable) -> None:
        self._toggle_group(self._by_assignee.get(key, []))

    def toggle_date(self, key: str) -> None:
        self._toggle_group(self._by_date.get(key, []))

    def select_all(self) -> None:
        self._raw = set(self._valid_ids)

    def select_none(self) -> None:
        self._raw = set()

    def is_assignee_fully_selected(self, key: Hashable) -> bool:
        return self._fully_selected(self._by_assignee.get(key, []))

    def is_date_fully_selected(self, key: str) -> bool:
        return self._fully_selected(self._by_date.get(key, []))

    def _fully_selected(self, ids: Iterable[Hashable]) -> bool:
        members = list(ids)
        return bool(members) and all(shift_id in self._raw for shift_id in members)

    def _toggle_group(self, ids: Sequence[Hashable]) -> None:
        if not ids:
            return
        if self._fully_selected(ids):
            self._raw.difference_update(ids)
        else:
            self._raw.update(ids)
