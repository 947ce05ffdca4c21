"""스케줄링 순수 로직 단위 테스트.

Unit tests for the database-free scheduling modules: recurrence
generation, week-copy arithmetic, bulk selection, drag-and-drop resolution
and tri-state bulk patches.
"""

import uuid
from datetime import date, datetime, time, timedelta, timezone
from types import SimpleNamespace

import pytest

from shopshift.scheduling.bulk_patch import apply_bulk_patch
from shopshift.scheduling.drag_drop import AssigneeDropTarget, OpenDropTarget, resolve_drop
from shopshift.scheduling.recurrence import (
    MAX_RECURRING_INSTANCES,
    RecurrencePattern,
    generate_recurring_instances,
    utc_weekday,
)
from shopshift.scheduling.selection import OPEN_BUCKET, BulkSelection
from shopshift.scheduling.timezones import combine_local, parse_hhmm, week_start
from shopshift.scheduling.week_copy import (
    check_source_shifts,
    plan_week_copies,
    source_week_window,
    validate_weeks_count,
)

NY = "America/New_York"


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def make_shift(start: datetime, end: datetime, user_id=None, **extra) -> SimpleNamespace:
    values = {
        "id": uuid.uuid4(),
        "shop_id": uuid.uuid4(),
        "schedule_id": None,
        "user_id": user_id,
        "position_id": None,
        "start_time": start,
        "end_time": end,
        "break_minutes": 30,
        "is_open": user_id is None,
        "notes": "bring keys",
        "color": None,
        "recurrence_group_id": uuid.uuid4(),
    }
    values.update(extra)
    return SimpleNamespace(**values)


# ===== Timezones =====

class TestTimezones:
    """매장 현지 시각 헬퍼 테스트."""

    def test_week_start_is_sunday(self):
        assert week_start(date(2025, 3, 12)) == date(2025, 3, 9)
        assert week_start(date(2025, 3, 9)) == date(2025, 3, 9)
        assert week_start(date(2025, 3, 15)) == date(2025, 3, 9)

    def test_combine_local_follows_dst(self):
        assert combine_local(date(2025, 3, 8), time(9, 0), NY) == utc(2025, 3, 8, 14, 0)
        assert combine_local(date(2025, 3, 10), time(9, 0), NY) == utc(2025, 3, 10, 13, 0)

    def test_parse_hhmm_rejects_out_of_range(self):
        assert parse_hhmm("07:30") == time(7, 30)
        with pytest.raises(ValueError):
            parse_hhmm("25:00")


# ===== Recurrence =====

class TestRecurrence:
    """반복 시프트 생성 테스트."""

    def test_utc_weekday_sunday_is_zero(self):
        assert utc_weekday(utc(2025, 1, 5, 12)) == 0
        assert utc_weekday(utc(2025, 1, 6, 12)) == 1

    def test_weekly_until_date_inclusive(self):
        """종료일 당일 인스턴스 포함, 앵커 요일은 다음 주부터."""
        anchor = make_shift(utc(2025, 1, 6, 14), utc(2025, 1, 6, 22))
        pattern = RecurrencePattern("weekly", [1, 3], "on_date", date(2025, 1, 22))

        instances = generate_recurring_instances(anchor, pattern, None)

        starts = [i["start_time"] for i in instances]
        assert starts == [
            utc(2025, 1, 13, 14),
            utc(2025, 1, 20, 14),
            utc(2025, 1, 8, 14),
            utc(2025, 1, 15, 14),
            utc(2025, 1, 22, 14),
        ]
        assert all(s > anchor.start_time for s in starts)

    def test_instances_copy_anchor_fields(self):
        anchor = make_shift(utc(2025, 1, 6, 22), utc(2025, 1, 7, 6), user_id=uuid.uuid4())
        actor = uuid.uuid4()
        pattern = RecurrencePattern("weekly", [2], "on_date", date(2025, 1, 31))

        instances = generate_recurring_instances(anchor, pattern, actor)

        assert len(instances) == 4
        for instance in instances:
            assert instance["end_time"] - instance["start_time"] == timedelta(hours=8)
            assert instance["status"] == "draft"
            assert instance["user_id"] == anchor.user_id
            assert instance["is_open"] is False
            assert instance["notes"] == "bring keys"
            assert instance["recurrence_group_id"] == anchor.recurrence_group_id
            assert instance["created_by"] == actor

    def test_biweekly_never_ends_after_two_years(self):
        anchor = make_shift(utc(2025, 1, 6, 14), utc(2025, 1, 6, 18))
        pattern = RecurrencePattern("biweekly", [1])

        instances = generate_recurring_instances(anchor, pattern, None)

        assert len(instances) == 52
        assert instances[1]["start_time"] - instances[0]["start_time"] == timedelta(weeks=2)
        assert instances[-1]["start_time"] <= anchor.start_time + timedelta(weeks=104)

    def test_cap_is_shared_by_all_weekdays(self):
        anchor = make_shift(utc(2025, 1, 6, 14), utc(2025, 1, 6, 18))
        pattern = RecurrencePattern("weekly", [0, 1, 2, 3, 4, 5, 6])

        instances = generate_recurring_instances(anchor, pattern, None)

        assert len(instances) == MAX_RECURRING_INSTANCES

    def test_end_date_before_first_instance(self):
        anchor = make_shift(utc(2025, 1, 6, 14), utc(2025, 1, 6, 18))
        pattern = RecurrencePattern("weekly", [1], "on_date", date(2025, 1, 10))
        assert generate_recurring_instances(anchor, pattern, None) == []

    def test_invalid_weekday(self):
        with pytest.raises(ValueError):
            RecurrencePattern("weekly", [7])


# ===== Week copy =====

class TestWeekCopy:
    """주간 복사 계산 테스트."""

    def test_weeks_count_bounds(self):
        validate_weeks_count(1)
        validate_weeks_count(12)
        for bad in (0, 13):
            with pytest.raises(ValueError, match="Weeks count must be between 1 and 12"):
                validate_weeks_count(bad)

    def test_source_shift_bounds(self):
        check_source_shifts(200)
        with pytest.raises(ValueError, match="No shifts found in the source week"):
            check_source_shifts(0)
        with pytest.raises(ValueError, match="too many shifts"):
            check_source_shifts(201)

    def test_source_window_is_local_sunday_week(self):
        """DST 시작 주: 일요일 00:00 EST ~ 다음 일요일 00:00 EDT."""
        start, end = source_week_window(date(2025, 3, 12), NY)
        assert start == utc(2025, 3, 9, 5)
        assert end == utc(2025, 3, 16, 4)

    def test_plan_orders_by_week_then_source(self):
        first = make_shift(utc(2025, 1, 6, 14), utc(2025, 1, 6, 22), user_id=uuid.uuid4())
        second = make_shift(utc(2025, 1, 8, 14), utc(2025, 1, 8, 18))
        actor = uuid.uuid4()

        plan = plan_week_copies([first, second], 3, actor)

        assert len(plan) == 6
        assert [(c.week_index, c.source_id) for c in plan[:2]] == [(1, first.id), (1, second.id)]
        last = plan[-1]
        assert last.week_index == 3
        assert last.values["start_time"] == second.start_time + timedelta(days=21)
        assert last.values["end_time"] - last.values["start_time"] == timedelta(hours=4)
        assert all(c.values["status"] == "draft" for c in plan)
        by_id = {first.id: first, second.id: second}
        assert all(c.values["recurrence_group_id"] == by_id[c.source_id].recurrence_group_id for c in plan)
        assert all(c.values["created_by"] == actor for c in plan)

    def test_copy_moves_by_exact_hours_across_dst(self):
        """DST 경계를 넘어도 정확히 168시간 이동."""
        source = make_shift(utc(2025, 3, 4, 14), utc(2025, 3, 4, 22))
        plan = plan_week_copies([source], 1, None)
        assert plan[0].values["start_time"] == utc(2025, 3, 11, 14)


# ===== Bulk selection =====

class TestBulkSelection:
    """벌크 선택 상태 머신 테스트."""

    def setup_method(self):
        self.alice = uuid.uuid4()
        self.a1 = make_shift(utc(2025, 1, 6, 14), utc(2025, 1, 6, 22), user_id=self.alice)
        self.a2 = make_shift(utc(2025, 1, 7, 14), utc(2025, 1, 7, 22), user_id=self.alice)
        # 뉴욕 기준 1월 6일 밤 (Jan 7 03:00 UTC is still Jan 6 in New York)
        self.open1 = make_shift(utc(2025, 1, 7, 3), utc(2025, 1, 7, 7))
        self.selection = BulkSelection([self.a1, self.a2, self.open1], NY)

    def test_toggle_shift(self):
        self.selection.toggle_shift(self.a1.id)
        assert self.selection.is_selected(self.a1.id)
        self.selection.toggle_shift(self.a1.id)
        assert self.selection.selected_count == 0

    def test_unknown_id_is_ignored(self):
        self.selection.toggle_shift(uuid.uuid4())
        assert self.selection.selected_count == 0

    def test_date_group_uses_shop_local_date(self):
        self.selection.toggle_date("2025-01-06")
        assert self.selection.selected_ids == {self.a1.id, self.open1.id}
        assert self.selection.is_date_fully_selected("2025-01-06")

    def test_group_toggle_is_all_or_none(self):
        self.selection.toggle_shift(self.a1.id)
        self.selection.toggle_assignee(self.alice)
        assert self.selection.selected_ids == {self.a1.id, self.a2.id}
        assert self.selection.is_assignee_fully_selected(self.alice)
        assert not self.selection.is_assignee_fully_selected(OPEN_BUCKET)
        self.selection.toggle_assignee(self.alice)
        assert self.selection.selected_count == 0

    def test_open_shifts_share_bucket(self):
        self.selection.toggle_assignee(OPEN_BUCKET)
        assert self.selection.selected_ids == {self.open1.id}

    def test_empty_group_is_noop(self):
        self.selection.toggle_shift(self.a1.id)
        self.selection.toggle_date("2030-01-01")
        assert self.selection.selected_ids == {self.a1.id}
        assert not self.selection.is_date_fully_selected("2030-01-01")

    def test_removed_shifts_are_pruned(self):
        self.selection.select_all()
        self.selection.set_shifts([self.a1, self.open1])
        assert self.selection.selected_ids == {self.a1.id, self.open1.id}
        assert [s.id for s in self.selection.selected_shifts] == [self.a1.id, self.open1.id]

    def test_select_none(self):
        self.selection.select_all()
        self.selection.select_none()
        assert self.selection.selected_count == 0


# ===== Drag and drop =====

class TestDragDrop:
    """드래그 앤 드롭 패치 계산 테스트."""

    def setup_method(self):
        self.user = uuid.uuid4()
        # 뉴욕 09:00-17:00 (EST)
        self.shift = make_shift(utc(2025, 3, 7, 14), utc(2025, 3, 7, 22), user_id=self.user)

    def test_same_assignee_same_date_is_noop(self):
        assert resolve_drop(self.shift, AssigneeDropTarget(self.user, date(2025, 3, 7)), NY) is None

    def test_drop_on_open_row(self):
        patch = resolve_drop(self.shift, OpenDropTarget(date(2025, 3, 7)), NY)
        assert patch == {"user_id": None, "is_open": True}

    def test_move_keeps_local_wall_clock_across_dst(self):
        other = uuid.uuid4()
        patch = resolve_drop(self.shift, AssigneeDropTarget(other, date(2025, 3, 10)), NY)
        assert patch["user_id"] == other
        assert patch["is_open"] is False
        assert patch["start_time"] == utc(2025, 3, 10, 13)
        assert patch["end_time"] == utc(2025, 3, 10, 21)

    def test_overnight_shift_keeps_day_span(self):
        overnight = make_shift(utc(2025, 1, 7, 3), utc(2025, 1, 7, 11))  # 22:00-06:00 local
        patch = resolve_drop(overnight, OpenDropTarget(date(2025, 1, 10)), NY)
        assert patch == {"start_time": utc(2025, 1, 11, 3), "end_time": utc(2025, 1, 11, 11)}


# ===== Bulk patch =====

class TestBulkPatch:
    """3상태 벌크 패치 테스트."""

    def setup_method(self):
        self.position = uuid.uuid4()
        self.shift = make_shift(utc(2025, 1, 6, 14), utc(2025, 1, 6, 22), position_id=self.position)

    def test_absent_keys_change_nothing(self):
        assert apply_bulk_patch(self.shift, {}, NY) == {}

    def test_null_clears_position(self):
        assert apply_bulk_patch(self.shift, {"position_id": None}, NY) == {"position_id": None}

    def test_set_color(self):
        assert apply_bulk_patch(self.shift, {"color": "#ff0000"}, NY) == {"color": "#ff0000"}

    def test_time_change_keeps_local_date(self):
        patch = apply_bulk_patch(self.shift, {"start_time": "07:00"}, NY)
        assert patch == {"start_time": utc(2025, 1, 6, 12), "end_time": utc(2025, 1, 6, 22)}

    def test_end_before_start_rolls_to_next_day(self):
        patch = apply_bulk_patch(self.shift, {"end_time": "02:00"}, NY)
        assert patch["end_time"] == utc(2025, 1, 7, 7)

    def test_time_cannot_be_cleared(self):
        with pytest.raises(ValueError, match="start_time cannot be cleared"):
            apply_bulk_patch(self.shift, {"start_time": None}, NY)
