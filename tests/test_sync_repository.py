# -*- coding: utf-8 -*-

from __future__ import annotations

import json
import shutil
import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

from fitlog.workouts.models import BodyPart, Exercise, WorkoutSession
from fitlog.workouts.remote import RemoteResult, to_remote_row
from fitlog.workouts.repository import SyncRepository
from fitlog.workouts.storage import LegacyWorkoutStore, LocalWorkoutStore, WriteError, serialize_session


def _session(sid: str, when: datetime, notes: str = "") -> WorkoutSession:
    exercise = Exercise(name="Bench Press", body_part=BodyPart.CHEST)
    exercise.add_set(reps=8, weight=70)
    return WorkoutSession(id=sid, date=when, exercises=[exercise], notes=notes, created_at=when, updated_at=when)


class FakeReplica:
    """In-memory replica; individual operations can be told to raise."""

    def __init__(self, fail: tuple[str, ...] = ()) -> None:
        self.rows: Dict[str, Dict[str, Any]] = {}
        self.fail = set(fail)
        self.calls: List[tuple] = []

    def _maybe_fail(self, op: str) -> None:
        if op in self.fail:
            raise httpx.ConnectError(f"{op} unreachable")

    async def select(self, sync_code: str, id: Optional[str] = None) -> RemoteResult[List[Dict[str, Any]]]:
        self.calls.append(("select", sync_code))
        self._maybe_fail("select")
        rows = [r for r in self.rows.values() if r["sync_code"] == sync_code and (id is None or r["id"] == id)]
        rows.sort(key=lambda r: r["date"], reverse=True)
        return RemoteResult.success(rows)

    async def upsert(self, row: Dict[str, Any]) -> RemoteResult[None]:
        self.calls.append(("upsert", row["sync_code"], row["id"]))
        self._maybe_fail("upsert")
        self.rows[row["id"]] = row
        return RemoteResult.success()

    async def delete(self, sync_code: str, id: str) -> RemoteResult[None]:
        self.calls.append(("delete", sync_code, id))
        self._maybe_fail("delete")
        row = self.rows.get(id)
        if row and row["sync_code"] == sync_code:
            del self.rows[id]
        return RemoteResult.success()

    async def subscribe(self, sync_code, on_change):  # pragma: no cover - unused here
        raise NotImplementedError

    async def unsubscribe(self, handle):  # pragma: no cover - unused here
        raise NotImplementedError


class FailingResultReplica(FakeReplica):
    async def select(self, sync_code: str, id: Optional[str] = None) -> RemoteResult[List[Dict[str, Any]]]:
        self.calls.append(("select", sync_code))
        return RemoteResult.failure("HTTP 503")


class TestSyncRepository(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self._tmp = Path(tempfile.mkdtemp(prefix="fitlog-repo-"))
        self.local = LocalWorkoutStore(self._tmp / "fitlog.db")
        self.local.init()

    def tearDown(self) -> None:
        shutil.rmtree(self._tmp, ignore_errors=True)

    async def test_local_only_mode_never_touches_remote(self) -> None:
        remote = FakeReplica()
        repo = SyncRepository(self.local, remote, sync_code=None)
        await repo.save_workout(_session("a", datetime(2024, 6, 1)))
        await repo.save_workout(_session("b", datetime(2024, 6, 5)))
        await repo.delete_workout("a")

        workouts = await repo.get_all_workouts()
        self.assertEqual([w.id for w in workouts], ["b"])
        self.assertEqual(remote.calls, [])
        self.assertFalse(repo.remote_enabled)

    async def test_remote_select_failure_falls_back_to_local(self) -> None:
        self.local.save_session(_session("old", datetime(2024, 5, 1)))
        self.local.save_session(_session("new", datetime(2024, 6, 1)))
        repo = SyncRepository(self.local, FakeReplica(fail=("select",)), sync_code="abc")

        workouts = await repo.get_all_workouts()
        self.assertEqual([w.id for w in workouts], ["new", "old"])

    async def test_failure_result_falls_back_to_local(self) -> None:
        self.local.save_session(_session("only", datetime(2024, 5, 1)))
        repo = SyncRepository(self.local, FailingResultReplica(), sync_code="abc")
        self.assertEqual([w.id for w in await repo.get_all_workouts()], ["only"])

    async def test_remote_rows_win_and_are_copied_locally(self) -> None:
        self.local.save_session(_session("w1", datetime(2024, 6, 1), notes="mine"))
        remote = FakeReplica()
        coach_copy = _session("w1", datetime(2024, 6, 1), notes="coach edit")
        remote.rows["w1"] = to_remote_row(coach_copy, "ABC")
        remote.rows["w2"] = to_remote_row(_session("w2", datetime(2024, 6, 3)), "ABC")
        remote.rows["other"] = to_remote_row(_session("other", datetime(2024, 6, 4)), "ZZZ")

        repo = SyncRepository(self.local, remote, sync_code="abc")
        workouts = await repo.get_all_workouts()

        self.assertEqual([w.id for w in workouts], ["w2", "w1"])
        self.assertEqual(workouts[1].notes, "coach edit")
        local_w1 = self.local.load_session("w1")
        assert local_w1 is not None
        self.assertEqual(local_w1.notes, "coach edit")
        self.assertIsNotNone(self.local.load_session("w2"))
        self.assertIsNone(self.local.load_session("other"))

    async def test_malformed_remote_rows_fall_back(self) -> None:
        self.local.save_session(_session("local", datetime(2024, 6, 1)))
        remote = FakeReplica()
        remote.rows["bad"] = {"id": "bad", "sync_code": "ABC", "date": "not a date", "data": {}}
        repo = SyncRepository(self.local, remote, sync_code="ABC")
        self.assertEqual([w.id for w in await repo.get_all_workouts()], ["local"])
        self.assertIsNone(self.local.load_session("bad"))

    async def test_save_survives_remote_upsert_failure(self) -> None:
        remote = FakeReplica(fail=("upsert", "select"))
        repo = SyncRepository(self.local, remote, sync_code="ABC")

        await repo.save_workout(_session("w1", datetime(2024, 6, 1)))

        self.assertIn(("upsert", "ABC", "w1"), remote.calls)
        workouts = await repo.get_all_workouts()
        self.assertEqual([w.id for w in workouts], ["w1"])

    async def test_save_mirrors_with_sync_code_and_fresh_timestamp(self) -> None:
        remote = FakeReplica()
        stamp = datetime(2024, 7, 1, 12, 0)
        repo = SyncRepository(self.local, remote, sync_code="abc", clock=lambda: stamp)

        saved = await repo.save_workout(_session("w1", datetime(2024, 6, 1)))

        self.assertEqual(saved.updated_at, stamp)
        row = remote.rows["w1"]
        self.assertEqual(row["sync_code"], "ABC")
        self.assertEqual(datetime.fromisoformat(row["updated_at"]), stamp.astimezone(timezone.utc))
        self.assertEqual(row["data"]["updatedAt"], row["updated_at"])
        local = self.local.load_session("w1")
        assert local is not None
        self.assertEqual(local.updated_at, stamp)

    async def test_local_write_failure_skips_remote(self) -> None:
        remote = FakeReplica()
        repo = SyncRepository(LocalWorkoutStore(self._tmp), remote, sync_code="ABC")
        with self.assertRaises(WriteError):
            await repo.save_workout(_session("w1", datetime(2024, 6, 1)))
        with self.assertRaises(WriteError):
            await repo.delete_workout("w1")
        self.assertEqual(remote.calls, [])

    async def test_delete_is_scoped_to_sync_code(self) -> None:
        remote = FakeReplica()
        remote.rows["w1"] = to_remote_row(_session("w1", datetime(2024, 6, 1)), "OTHER")
        repo = SyncRepository(self.local, remote, sync_code="ABC")
        await repo.save_workout(_session("w2", datetime(2024, 6, 2)))

        await repo.delete_workout("w1")
        await repo.delete_workout("w2")

        self.assertIn(("delete", "ABC", "w1"), remote.calls)
        self.assertIn("w1", remote.rows)
        self.assertNotIn("w2", remote.rows)

    async def test_delete_survives_remote_failure(self) -> None:
        remote = FakeReplica(fail=("delete",))
        repo = SyncRepository(self.local, remote, sync_code="ABC")
        await repo.save_workout(_session("w1", datetime(2024, 6, 1)))
        await repo.delete_workout("w1")
        self.assertIsNone(self.local.load_session("w1"))

    async def test_legacy_migration_is_repeatable(self) -> None:
        legacy_path = self._tmp / "workouts.json"
        records = [json.loads(serialize_session(_session(sid, datetime(2024, 6, d)))) for sid, d in (("a", 1), ("b", 2))]
        records.append({"id": "broken"})
        legacy_path.write_text(json.dumps(records), encoding="utf-8")
        before = legacy_path.read_text(encoding="utf-8")

        repo = SyncRepository(self.local)
        self.assertEqual(await repo.migrate_legacy(LegacyWorkoutStore(legacy_path)), 2)
        self.assertEqual(await repo.migrate_legacy(LegacyWorkoutStore(legacy_path)), 0)

        self.assertEqual([w.id for w in await repo.get_all_workouts()], ["b", "a"])
        self.assertEqual(legacy_path.read_text(encoding="utf-8"), before)

    async def test_edits_survive_a_second_migration(self) -> None:
        legacy_path = self._tmp / "workouts.json"
        original = _session("w1", datetime(2024, 6, 1), notes="legacy")
        legacy_path.write_text(json.dumps([json.loads(serialize_session(original))]), encoding="utf-8")
        remote = FakeReplica()
        stamps = iter([datetime(2024, 6, 2), datetime(2024, 6, 3), datetime(2024, 6, 4)])
        repo = SyncRepository(self.local, remote, sync_code="ABC", clock=lambda: next(stamps))

        await repo.migrate_legacy(LegacyWorkoutStore(legacy_path))
        edited = self.local.load_session("w1")
        assert edited is not None
        await repo.save_workout(edited.model_copy(update={"notes": "edited later"}))

        self.assertEqual(await repo.migrate_legacy(LegacyWorkoutStore(legacy_path)), 0)

        local = self.local.load_session("w1")
        assert local is not None
        self.assertEqual(local.notes, "edited later")
        self.assertEqual(local.updated_at, datetime(2024, 6, 3))
        self.assertEqual(remote.rows["w1"]["data"]["notes"], "edited later")
        self.assertEqual([c[0] for c in remote.calls], ["upsert", "upsert"])

    async def test_migration_without_legacy_file(self) -> None:
        repo = SyncRepository(self.local)
        self.assertEqual(await repo.migrate_legacy(LegacyWorkoutStore(self._tmp / "missing.json")), 0)


if __name__ == "__main__":
    unittest.main()
