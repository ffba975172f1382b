import json
from datetime import timedelta

import pytest

from interview_prep.models.interview import InterviewSession, Question
from interview_prep.models.metrics import PerformanceMetrics
from interview_prep.models.user import User
from interview_prep.services.storage_manager import StorageManager
from interview_prep.utils.exceptions import DuplicateResourceError, NotFoundError, StorageError


def make_user(email="ada@example.com") -> User:
    return User(name="Ada", email=email, password_hash="hash", password_salt="salt")


def make_session(user_id: str) -> InterviewSession:
    return InterviewSession.start(user_id, "SRE", "", [Question(text="Why SRE?"), Question(text="Tell me more.")])


@pytest.fixture(params=["memory", "file"])
async def manager(request, tmp_path):
    if request.param == "file":
        storage = StorageManager("file", base_path=str(tmp_path / "data"))
    else:
        storage = StorageManager("memory")
    await storage.initialize()
    yield storage
    await storage.close()


class TestRecordStore:
    async def test_create_and_get_round_trip(self, manager):
        user = make_user()
        await manager.accounts.create(user)

        loaded = await manager.accounts.get(user.id)
        assert loaded == user
        assert loaded is not user

    async def test_get_missing_returns_none(self, manager):
        assert await manager.sessions.get("does-not-exist") is None

    async def test_unsafe_ids_are_never_read(self, manager):
        assert await manager.accounts.get("../accounts/x") is None
        assert await manager.accounts.get("") is None

    async def test_require_missing_raises(self, manager):
        with pytest.raises(NotFoundError) as exc_info:
            await manager.resumes.require("missing")
        assert exc_info.value.resource_type == "Resume"

    async def test_duplicate_create_rejected(self, manager):
        user = make_user()
        await manager.accounts.create(user)
        with pytest.raises(DuplicateResourceError):
            await manager.accounts.create(user)

    async def test_update_requires_existing_record(self, manager):
        with pytest.raises(NotFoundError):
            await manager.accounts.update(make_user())

    async def test_update_sets_timestamp(self, manager):
        user = make_user()
        await manager.accounts.create(user)
        assert user.updated_at is None

        user.name = "Ada L."
        await manager.accounts.update(user)

        loaded = await manager.accounts.require(user.id)
        assert loaded.name == "Ada L."
        assert loaded.updated_at is not None

    async def test_mutating_loaded_record_does_not_touch_store(self, manager):
        session = make_session("u1")
        await manager.sessions.create(session)

        loaded = await manager.sessions.require(session.id)
        loaded.answers[0].text = "changed"

        again = await manager.sessions.require(session.id)
        assert again.answers[0].text == ""

    async def test_list_by_user_filters_and_orders(self, manager):
        first = make_session("u1")
        second = make_session("u1")
        second.created_at = first.created_at + timedelta(seconds=1)
        other = make_session("u2")
        for session in (first, second, other):
            await manager.sessions.create(session)

        listed = await manager.sessions.list_by_user("u1")
        assert [s.id for s in listed] == [second.id, first.id]

    async def test_find_by_email(self, manager):
        user = make_user("grace@example.com")
        await manager.accounts.create(user)

        assert (await manager.accounts.find_by_email("grace@example.com")).id == user.id
        assert await manager.accounts.find_by_email("nobody@example.com") is None

    async def test_metrics_keyed_by_user(self, manager):
        await manager.metrics.create(PerformanceMetrics(id="u1", user_id="u1", scores=[80], timestamps=[make_user().created_at]))

        metrics = await manager.metrics.for_user("u1")
        assert metrics.scores == [80]
        with pytest.raises(NotFoundError):
            await manager.metrics.for_user("u2")


class TestLifecycle:
    async def test_stores_unavailable_before_initialize(self):
        storage = StorageManager("memory")
        with pytest.raises(StorageError):
            storage.accounts

    async def test_stores_unavailable_after_close(self):
        async with StorageManager("memory") as storage:
            assert storage.is_open
        assert not storage.is_open
        with pytest.raises(StorageError):
            storage.sessions

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            StorageManager("postgres")


class TestFileBackend:
    async def test_records_written_as_json_files(self, tmp_path):
        base = tmp_path / "store"
        async with StorageManager("file", base_path=str(base)) as storage:
            user = make_user()
            await storage.accounts.create(user)

        record_file = base / "accounts" / f"{user.id}.json"
        assert record_file.exists()
        assert json.loads(record_file.read_text())["email"] == "ada@example.com"
        assert not list((base / "accounts").glob("*.tmp"))

    async def test_records_survive_reopen(self, tmp_path):
        base = str(tmp_path / "store")
        async with StorageManager("file", base_path=base) as storage:
            user = make_user()
            await storage.accounts.create(user)

        async with StorageManager("file", base_path=base) as storage:
            assert (await storage.accounts.require(user.id)).email == user.email

    async def test_corrupt_record_raises_storage_error(self, tmp_path):
        base = tmp_path / "store"
        async with StorageManager("file", base_path=str(base)) as storage:
            user = make_user()
            await storage.accounts.create(user)
            (base / "accounts" / f"{user.id}.json").write_text("{not json")

            with pytest.raises(StorageError):
                await storage.accounts.get(user.id)
