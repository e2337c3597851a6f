from datetime import date

import pytest

from petadopt.core.exceptions import Conflict, NotFound
from petadopt.models.appointment import AppointmentStatus, ServiceType
from petadopt.services import appointment_store


async def _book(session, user, pet, day="2025-06-10", time="09:00", **kwargs):
    appointment = await appointment_store.create(
        session, pet_id=pet.id, user_id=user.id, date=day, time=time, **kwargs
    )
    await session.commit()
    return appointment


async def test_create_sets_defaults(session, users, pets):
    a = await _book(session, users["owner"], pets["rex"])
    assert a.id is not None
    assert a.status == AppointmentStatus.PENDING
    assert a.service_type == ServiceType.GENERAL_CHECKUP
    assert a.notes == ""
    assert a.created_at is not None and a.updated_at is not None


async def test_create_requires_existing_pet(session, users):
    with pytest.raises(NotFound, match="Pet not found"):
        await appointment_store.create(
            session, pet_id=999, user_id=users["owner"].id, date="2025-06-10", time="09:00"
        )


async def test_find_by_id_missing(session):
    with pytest.raises(NotFound, match="Appointment not found"):
        await appointment_store.find_by_id(session, 12345)


async def test_find_conflicting_ignores_cancelled_and_excluded(session, users, pets):
    a = await _book(session, users["owner"], pets["rex"])
    assert [c.id for c in await appointment_store.find_conflicting(session, "2025-06-10", "09:00")] == [a.id]
    assert await appointment_store.find_conflicting(session, "2025-06-10", "09:00", exclude_id=a.id) == []
    assert await appointment_store.find_conflicting(session, "2025-06-10", "10:00") == []

    await appointment_store.cancel(session, a.id)
    await session.commit()
    assert await appointment_store.find_conflicting(session, "2025-06-10", "09:00") == []


async def test_find_by_user_orders_by_date_then_time(session, users, pets):
    owner = users["owner"]
    await _book(session, owner, pets["rex"], day="2025-06-11", time="09:00")
    await _book(session, owner, pets["rex"], day="2025-06-10", time="14:00")
    await _book(session, owner, pets["tom"], day="2025-06-10", time="10:00")
    await _book(session, users["other"], pets["tom"], day="2025-06-09", time="10:00")

    found = await appointment_store.find_by_user(session, owner.id)
    assert [(a.date, a.time) for a in found] == [
        ("2025-06-10", "10:00"),
        ("2025-06-10", "14:00"),
        ("2025-06-11", "09:00"),
    ]


async def test_find_by_date_range_is_inclusive_and_skips_cancelled(session, users, pets):
    owner = users["owner"]
    await _book(session, owner, pets["rex"], day="2025-06-01", time="09:00")
    first = await _book(session, owner, pets["rex"], day="2025-06-02", time="09:00")
    last = await _book(session, owner, pets["rex"], day="2025-06-05", time="09:00")
    gone = await _book(session, owner, pets["rex"], day="2025-06-03", time="09:00")
    await _book(session, owner, pets["rex"], day="2025-06-06", time="09:00")
    await appointment_store.cancel(session, gone.id)
    await session.commit()

    found = await appointment_store.find_by_date_range(session, date(2025, 6, 2), date(2025, 6, 5))
    assert [a.id for a in found] == [first.id, last.id]


async def test_update_applies_partial_fields(session, users, pets):
    a = await _book(session, users["owner"], pets["rex"], notes="first visit")
    updated = await appointment_store.update(session, a.id, {"time": "11:00"})
    assert updated.time == "11:00"
    assert updated.notes == "first visit"
    assert updated.updated_at >= a.created_at


async def test_update_missing_appointment(session):
    with pytest.raises(NotFound):
        await appointment_store.update(session, 999, {"notes": "x"})


async def test_unique_index_rejects_second_active_row(session, users, pets):
    await _book(session, users["owner"], pets["rex"])
    with pytest.raises(Conflict):
        await appointment_store.create(
            session, pet_id=pets["tom"].id, user_id=users["other"].id, date="2025-06-10", time="09:00"
        )


async def test_unique_index_allows_rebooking_cancelled_slot(session, users, pets):
    a = await _book(session, users["owner"], pets["rex"])
    await appointment_store.cancel(session, a.id)
    await session.commit()
    b = await _book(session, users["other"], pets["tom"])
    assert b.status == AppointmentStatus.PENDING


async def test_search_filters_and_paginates(session, users, pets):
    owner, other = users["owner"], users["other"]
    for hour in ("09:00", "10:00", "11:00"):
        await _book(session, owner, pets["rex"], day="2025-06-10", time=hour)
    await _book(session, other, pets["tom"], day="2025-06-09", time="15:00", service_type=ServiceType.GROOMING)

    rows, total = await appointment_store.search(session, page=1, limit=2)
    assert total == 4
    assert [(a.date, a.time) for a, _, _ in rows] == [("2025-06-09", "15:00"), ("2025-06-10", "09:00")]
    _, pet, user = rows[0]
    assert pet.name == "Tom" and user.email == "other@example.com"

    rows, total = await appointment_store.search(session, search="re", page=1, limit=10)
    assert total == 3
    assert {p.name for _, p, _ in rows} == {"Rex"}

    rows, total = await appointment_store.search(session, service_type=ServiceType.GROOMING)
    assert total == 1

    rows, total = await appointment_store.search(session, date="2025-06-10", page=2, limit=2)
    assert total == 3
    assert [a.time for a, _, _ in rows] == ["11:00"]


async def test_timestamps_round_trip_as_naive_utc(session_maker, users, pets):
    async with session_maker() as s:
        a = await _book(s, users["owner"], pets["rex"])
        await appointment_store.update(s, a.id, {"notes": "rescheduled by phone"})
        await s.commit()

    async with session_maker() as s:
        stored = await appointment_store.find_by_id(s, a.id)
        assert stored.created_at.tzinfo is None
        assert stored.updated_at.tzinfo is None
        assert stored.updated_at >= stored.created_at
