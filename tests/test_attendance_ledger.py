import asyncio
import unittest
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from face_attendance.core.exceptions import (
    AttendanceRecordNotFoundError,
    DuplicateAttendanceError,
    StoreError,
    ValidationError,
)
from face_attendance.infrastructure.memory import InMemoryDatabase
from face_attendance.infrastructure.store import create_memory_store
from face_attendance.models.domain.attendance import AttendanceStatus, MarkStatus
from face_attendance.repositories.memory_repo import InMemoryAttendanceRepository
from face_attendance.services.attendance_ledger import AttendanceLedger
from face_attendance.services.gallery import Gallery

MAY_1_0900 = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
MAY_1_0905 = datetime(2024, 5, 1, 9, 5, tzinfo=timezone.utc)
MAY_2_0900 = datetime(2024, 5, 2, 9, 0, tzinfo=timezone.utc)


class LosingRaceRepository(InMemoryAttendanceRepository):
    """The pre-insert lookup misses a record another writer already inserted."""

    def __init__(self, db, misses=1):
        super().__init__(db)
        self.misses = misses

    async def get_for_day(self, identity_id, day):
        if self.misses:
            self.misses -= 1
            return None
        return await super().get_for_day(identity_id, day)


class AlwaysDuplicateRepository(InMemoryAttendanceRepository):

    async def get_for_day(self, identity_id, day):
        return None

    async def create(self, record):
        raise DuplicateAttendanceError(record.identity_id, record.date.isoformat())


class FlakyCascadeRepository(InMemoryAttendanceRepository):
    """The first delete_for_identity fails after nothing has been removed."""

    def __init__(self, db, failures=1):
        super().__init__(db)
        self.failures = failures

    async def delete_for_identity(self, identity_id):
        if self.failures:
            self.failures -= 1
            raise StoreError(operation="attendance.delete_for_identity")
        return await super().delete_for_identity(identity_id)


class MarkPresentTests(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.db = InMemoryDatabase()
        self.store = create_memory_store(self.db)
        self.ledger = AttendanceLedger(self.store.attendance)

    async def test_second_mark_same_day_returns_first_record(self):
        first = await self.ledger.mark_present("U1", 0.9, MAY_1_0900)
        second = await self.ledger.mark_present("U1", 0.95, MAY_1_0905)

        self.assertEqual(first.status, MarkStatus.CREATED)
        self.assertTrue(first.created)
        self.assertEqual(second.status, MarkStatus.ALREADY_MARKED)
        self.assertEqual(second.record.record_id, first.record.record_id)
        self.assertEqual(second.record.time_in, MAY_1_0900)
        self.assertEqual(second.record.confidence_score, 0.9)
        self.assertEqual(len(self.db.attendance), 1)

    async def test_new_record_fields(self):
        outcome = await self.ledger.mark_present("U1", 0.75, MAY_1_0900)
        record = outcome.record

        self.assertEqual(record.identity_id, "U1")
        self.assertEqual(record.date, date(2024, 5, 1))
        self.assertEqual(record.status, AttendanceStatus.PRESENT)
        self.assertEqual(record.confidence_score, 0.75)
        self.assertEqual(len(record.record_id), 36)

    async def test_each_day_gets_its_own_record(self):
        first = await self.ledger.mark_present("U1", 0.9, MAY_1_0900)
        second = await self.ledger.mark_present("U1", 0.9, MAY_2_0900)

        self.assertTrue(second.created)
        self.assertNotEqual(first.record.record_id, second.record.record_id)

    async def test_concurrent_marks_create_one_record(self):
        outcomes = await asyncio.gather(*[
            self.ledger.mark_present("U1", 0.9, MAY_1_0900) for _ in range(10)
        ])

        created = [o for o in outcomes if o.created]
        self.assertEqual(len(created), 1)
        self.assertEqual({o.record.record_id for o in outcomes}, {created[0].record.record_id})
        self.assertEqual(len(self.db.attendance), 1)

    async def test_lost_race_reports_winner(self):
        winner = await self.ledger.mark_present("U1", 0.8, MAY_1_0900)
        racing = AttendanceLedger(LosingRaceRepository(self.db))

        outcome = await racing.mark_present("U1", 0.99, MAY_1_0905)

        self.assertEqual(outcome.status, MarkStatus.ALREADY_MARKED)
        self.assertEqual(outcome.record.record_id, winner.record.record_id)
        self.assertEqual(len(self.db.attendance), 1)

    async def test_duplicate_without_winner_is_store_error(self):
        ledger = AttendanceLedger(AlwaysDuplicateRepository(self.db))

        with self.assertRaises(StoreError):
            await ledger.mark_present("U1", 0.9, MAY_1_0900)

    async def test_confidence_out_of_range(self):
        for score in (-0.1, 1.5):
            with self.subTest(score=score):
                with self.assertRaises(ValidationError):
                    await self.ledger.mark_present("U1", score, MAY_1_0900)
        self.assertEqual(self.db.attendance, {})

    async def test_missing_identity_id(self):
        with self.assertRaises(ValidationError):
            await self.ledger.mark_present("", 0.9, MAY_1_0900)

    async def test_naive_time_is_utc(self):
        outcome = await self.ledger.mark_present("U1", 0.9, datetime(2024, 5, 1, 23, 30))

        self.assertEqual(outcome.record.date, date(2024, 5, 1))
        self.assertEqual(outcome.record.time_in.tzinfo, timezone.utc)

    async def test_calendar_day_follows_timezone(self):
        ledger = AttendanceLedger(self.store.attendance, tz=ZoneInfo("America/New_York"))

        # 02:00 UTC on May 2nd is still May 1st in New York
        outcome = await ledger.mark_present("U1", 0.9, datetime(2024, 5, 2, 2, 0, tzinfo=timezone.utc))
        later = await ledger.mark_present("U1", 0.9, datetime(2024, 5, 1, 15, 0, tzinfo=timezone.utc))

        self.assertEqual(outcome.record.date, date(2024, 5, 1))
        self.assertFalse(later.created)

    async def test_defaults_to_now(self):
        outcome = await self.ledger.mark_present("U1", 0.9)

        self.assertEqual(outcome.record.date, self.ledger.today())


class AdministrationTests(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.db = InMemoryDatabase()
        self.store = create_memory_store(self.db)
        self.ledger = AttendanceLedger(self.store.attendance)
        self.gallery = Gallery(self.store.identities)
        self.gallery.on_remove(self.ledger.on_identity_removed)

    async def test_update_overwrites_status_and_time(self):
        outcome = await self.ledger.mark_present("U1", 0.9, MAY_1_0900)
        new_time = datetime(2024, 5, 2, 10, 0, tzinfo=timezone.utc)

        updated = await self.ledger.update(outcome.record.record_id, AttendanceStatus.LATE, new_time)

        self.assertEqual(updated.status, AttendanceStatus.LATE)
        self.assertEqual(updated.time_in, new_time)
        self.assertEqual(updated.date, date(2024, 5, 1))
        self.assertEqual((await self.ledger.get(outcome.record.record_id)).status, AttendanceStatus.LATE)

    async def test_update_unknown_record(self):
        with self.assertRaises(AttendanceRecordNotFoundError):
            await self.ledger.update("missing", AttendanceStatus.ABSENT, MAY_1_0900)

    async def test_delete_allows_marking_again(self):
        outcome = await self.ledger.mark_present("U1", 0.9, MAY_1_0900)

        await self.ledger.delete(outcome.record.record_id)
        again = await self.ledger.mark_present("U1", 0.9, MAY_1_0905)

        self.assertTrue(again.created)
        with self.assertRaises(AttendanceRecordNotFoundError):
            await self.ledger.get(outcome.record.record_id)

    async def test_delete_unknown_record(self):
        with self.assertRaises(AttendanceRecordNotFoundError):
            await self.ledger.delete("missing")

    async def test_list_for_date_joins_identity(self):
        await self.gallery.add("U1", "Alice", [0.1, 0.2], "alice.jpg")
        await self.ledger.mark_present("U1", 0.9, MAY_1_0900)
        await self.ledger.mark_present("ghost", 0.8, MAY_1_0905)
        await self.ledger.mark_present("U1", 0.9, MAY_2_0900)

        views = await self.ledger.list_for_date(date(2024, 5, 1))

        self.assertEqual([v.identity_id for v in views], ["ghost", "U1"])
        self.assertIsNone(views[0].display_name)
        self.assertEqual(views[1].display_name, "Alice")
        self.assertEqual(views[1].image_ref, "alice.jpg")

    async def test_removing_identity_cascades(self):
        await self.gallery.add("U1", "Alice", [0.1, 0.2], "alice.jpg")
        await self.gallery.add("U2", "Bob", [0.3, 0.4], "bob.jpg")
        await self.ledger.mark_present("U1", 0.9, MAY_1_0900)
        await self.ledger.mark_present("U1", 0.9, MAY_2_0900)
        await self.ledger.mark_present("U2", 0.9, MAY_1_0900)

        await self.gallery.remove("U1")

        remaining = await self.ledger.list_for_date(date(2024, 5, 1))
        self.assertEqual([v.identity_id for v in remaining], ["U2"])
        self.assertEqual(await self.ledger.list_for_date(date(2024, 5, 2)), [])
        self.assertEqual(await self.ledger.cascade_delete_for_identity("U1"), 0)

    async def test_failed_cascade_keeps_identity_for_retry(self):
        ledger = AttendanceLedger(FlakyCascadeRepository(self.db))
        gallery = Gallery(self.store.identities)
        gallery.on_remove(ledger.on_identity_removed)
        await gallery.add("U1", "Alice", [0.1, 0.2], "alice.jpg")
        await ledger.mark_present("U1", 0.9, MAY_1_0900)

        with self.assertRaises(StoreError):
            await gallery.remove("U1")

        self.assertTrue(await gallery.exists("U1"))
        self.assertEqual(len(await ledger.list_for_date(date(2024, 5, 1))), 1)

        removed = await gallery.remove("U1")

        self.assertEqual(removed.identity_id, "U1")
        self.assertFalse(await gallery.exists("U1"))
        self.assertEqual(await ledger.list_for_date(date(2024, 5, 1)), [])
        self.assertEqual(self.db.attendance, {})
