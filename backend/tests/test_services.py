from __future__ import annotations

from datetime import date

import pytest

from tripwage.core.errors import InvalidInputError, NotFoundError
from tripwage.services.orders import OrderService
from tripwage.services.users import UserService
from tripwage.services.wages import HISTORICAL, LIVE_ENTRY, WageConstants
from tripwage.services.work_times import WorkTimeService


@pytest.fixture
def orders(backend):
    return OrderService(backend.orders, backend.work_times, WageConstants())


@pytest.fixture
def work_times(backend):
    return WorkTimeService(backend.work_times)


@pytest.fixture
def users(backend):
    return UserService(backend.users)


def test_create_order_fills_defaults(orders):
    order = orders.create("u1", {"order_number": "12", "order_value": 10, "payment_amount": 12})
    assert order.user_id == "u1"
    assert order.date == date.today().isoformat()
    assert order.payment_type.value == "online"


def test_create_order_ignores_caller_supplied_owner(orders):
    order = orders.create("u1", {"user_id": "u9", "date": "2024-05-01"})
    assert order.user_id == "u1"


def test_create_order_rejects_bad_date(orders):
    with pytest.raises(InvalidInputError):
        orders.create("u1", {"date": "01/05/2024"})


def test_create_order_rejects_bad_payment_type(orders):
    with pytest.raises(InvalidInputError):
        orders.create("u1", {"date": "2024-05-01", "payment_type": "barter"})


def test_update_skips_missing_values_and_unknown_ids(orders):
    order = orders.create("u1", {"date": "2024-05-01", "order_value": 10, "notes": "keep"})
    updated = orders.update(order.id, {"order_value": 11, "notes": None})
    assert updated.order_value == 11
    assert updated.notes == "keep"

    with pytest.raises(NotFoundError):
        orders.update("000000", {"notes": "x"})


def test_get_and_delete(orders):
    order = orders.create("u1", {"date": "2024-05-01"})
    assert orders.get(order.id).id == order.id
    assert orders.delete(order.id) is True
    with pytest.raises(NotFoundError):
        orders.get(order.id)
    with pytest.raises(NotFoundError):
        orders.delete(order.id)


def test_list_by_date_range_validates_bounds(orders):
    with pytest.raises(InvalidInputError):
        orders.list_by_date_range("u1", "2024-05-10", "2024-05-01")
    with pytest.raises(InvalidInputError):
        orders.list_by_date_range("u1", "", "2024-05-01")
    with pytest.raises(InvalidInputError):
        orders.historical_stats("u1", "2024-05-01", "not-a-date")


def test_daily_stats_uses_work_time(orders, work_times):
    work_times.save("u1", "2024-05-01", "10:00", "14:00")
    orders.create("u1", {"date": "2024-05-01", "order_value": 20, "payment_amount": 25, "distance_km": 10})
    orders.create("u2", {"date": "2024-05-01", "order_value": 20, "payment_amount": 90})

    live = orders.daily_stats("u1", "2024-05-01")
    assert live.work_hours == pytest.approx(4)
    assert live.actual_trips == 1
    assert live.long_trips_count == 1
    assert live.total_wage == pytest.approx(4 * 8.5 + 7 + 5)

    strict = orders.daily_stats("u1", "2024-05-01", HISTORICAL)
    assert strict.long_trips_count == 0


def test_daily_stats_without_work_time(orders):
    summary = orders.daily_stats("u1", date(2024, 5, 1), LIVE_ENTRY)
    assert summary.work_hours == 0
    assert summary.hourly_wage == 0


def test_historical_stats_covers_each_day(orders, work_times):
    work_times.save("u1", "2024-05-01", "09:00", "11:00")
    work_times.save("u1", "2024-05-03", "09:00", "13:00")
    orders.create("u1", {"date": "2024-05-01", "order_value": 10, "payment_amount": 12})
    orders.create("u1", {"date": "2024-05-03", "order_value": 10, "payment_amount": 10, "distance_km": 11})
    orders.create("u1", {"date": "2024-06-01", "order_value": 10, "payment_amount": 50})

    summary = orders.historical_stats("u1", "2024-05-01", "2024-05-03")
    assert [d.date for d in summary.days] == ["2024-05-01", "2024-05-02", "2024-05-03"]
    assert summary.actual_trips == 2
    assert summary.total_work_hours == pytest.approx(6)
    assert summary.total_tips == pytest.approx(2)
    assert summary.average_hourly_wage == pytest.approx(summary.total_wage / 6)


def test_work_time_save_replaces_same_day(work_times):
    first = work_times.save("u1", "2024-05-01", "22:00", "01:30")
    assert first.work_hours == pytest.approx(3.5)
    second = work_times.save("u1", "2024-05-01", "08:00", "09:00")
    assert second.work_hours == pytest.approx(1)
    assert work_times.get("u1", "2024-05-01").start_time == "08:00"
    assert work_times.get("u1", "2024-05-02") is None


def test_work_time_save_rejects_bad_date(work_times):
    with pytest.raises(InvalidInputError):
        work_times.save("u1", "2024-13-40", "08:00", "09:00")


def test_register_and_authenticate(users):
    user = users.register("ana", "Ana@Example.com", "hunter22", "hunter22")
    assert user.email == "ana@example.com"
    assert user.password_hash != "hunter22"

    assert users.authenticate("ANA@example.com", "hunter22").id == user.id
    assert users.authenticate("ana@example.com", "wrong") is None
    assert users.authenticate("nobody@example.com", "hunter22") is None


def test_register_rejects_mismatch_and_duplicates(users):
    with pytest.raises(InvalidInputError, match="Passwords do not match"):
        users.register("ana", "ana@example.com", "hunter22", "hunter23")

    users.register("ana", "ana@example.com", "hunter22")
    with pytest.raises(InvalidInputError, match="Email already in use"):
        users.register("other", "ana@example.com", "hunter22")
    with pytest.raises(InvalidInputError, match="Username already in use"):
        users.register("ana", "other@example.com", "hunter22")


def test_update_profile(users):
    ana = users.register("ana", "ana@example.com", "hunter22")
    users.register("bo", "bo@example.com", "hunter22")

    updated = users.update_profile(ana.id, {"username": "ana2", "email": " ANA2@example.com"})
    assert updated.username == "ana2"
    assert updated.email == "ana2@example.com"

    with pytest.raises(InvalidInputError, match="Username already in use"):
        users.update_profile(ana.id, {"username": "bo"})
    with pytest.raises(InvalidInputError, match="Email already in use"):
        users.update_profile(ana.id, {"email": "bo@example.com"})
    assert users.update_profile(ana.id, {}).username == "ana2"


def test_change_password(users):
    ana = users.register("ana", "ana@example.com", "hunter22")

    with pytest.raises(InvalidInputError, match="Current password is incorrect"):
        users.change_password(ana.id, "nope", "fresh-pass")
    with pytest.raises(InvalidInputError, match="Passwords do not match"):
        users.change_password(ana.id, "hunter22", "fresh-pass", "fresh-pas")

    users.change_password(ana.id, "hunter22", "fresh-pass", "fresh-pass")
    assert users.authenticate("ana@example.com", "fresh-pass") is not None
    assert users.authenticate("ana@example.com", "hunter22") is None


def test_profile_of_unknown_user(users):
    with pytest.raises(NotFoundError):
        users.get_profile("missing-id")


def test_historical_stats_span_is_capped(orders):
    assert len(orders.historical_stats("u1", "2024-01-01", "2024-12-31").days) == 366
    with pytest.raises(InvalidInputError, match="limited to 366 days"):
        orders.historical_stats("u1", "2024-01-01", "2025-01-01")
    with pytest.raises(InvalidInputError):
        orders.historical_stats("u1", "0001-01-01", "9999-12-31")


def test_historical_stats_on_the_last_calendar_day(orders):
    summary = orders.historical_stats("u1", "9999-12-31", "9999-12-31")
    assert [d.date for d in summary.days] == ["9999-12-31"]
