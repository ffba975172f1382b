import asyncio

import pytest

from interview_prep.models.enums import Level
from interview_prep.utils.exceptions import DuplicateResourceError

from conftest import TEST_PASSWORD


@pytest.fixture
def slow_backend(storage, monkeypatch):
    """Yield to the event loop on every store access so interleavings actually happen."""
    backend = storage.storage_interface
    original_read = backend.read
    original_write = backend.write

    async def slow_read(collection, record_id):
        await asyncio.sleep(0.001)
        return await original_read(collection, record_id)

    async def slow_write(collection, record_id, payload):
        await asyncio.sleep(0.001)
        await original_write(collection, record_id, payload)

    monkeypatch.setattr(backend, "read", slow_read)
    monkeypatch.setattr(backend, "write", slow_write)
    return backend


async def test_concurrent_completions_do_not_lose_updates(services, user, slow_backend):
    scores = [70, 75, 80, 85, 90, 95, 60, 65, 88, 92, 77, 81]

    await asyncio.gather(*[
        services.progression.record_interview(user.id, "Backend Developer", score) for score in scores
    ])

    metrics = await services.accounts.get_performance(user.id)
    profile = await services.accounts.get_profile(user.id)
    assert sorted(metrics.scores) == sorted(scores)
    assert len(metrics.timestamps) == len(scores)
    assert metrics.interviews_by_role.get("backend_developer") == len(scores)
    assert profile.xp_points == 100 * len(scores)
    assert profile.level == Level.INTERMEDIATE
    assert [b.name for b in profile.badges] == ["Intermediate Interviewer"]


async def test_concurrent_interview_and_resume_xp(services, user, slow_backend):
    resume = await services.resume_analyzer.upload(user.id, "cv.pdf", b"%PDF-1.4 resume")

    await asyncio.gather(
        services.progression.record_interview(user.id, "QA", 80),
        services.resume_analyzer.analyze(user.id, resume.id, "QA Engineer"),
        services.progression.record_interview(user.id, "QA", 70),
    )

    profile = await services.accounts.get_profile(user.id)
    assert profile.xp_points == 250
    assert profile.resume_url == resume.file_url


async def test_concurrent_feedback_requests_record_once(services, user, slow_backend):
    session = await services.orchestrator.start_interview(user.id, "Data Engineer")

    results = await asyncio.gather(*[
        services.orchestrator.generate_feedback(user.id, session.id) for _ in range(5)
    ])

    assert all(r == results[0] for r in results)
    metrics = await services.accounts.get_performance(user.id)
    assert len(metrics.scores) == 1
    assert (await services.accounts.get_profile(user.id)).xp_points == 100


async def test_concurrent_answers_to_different_slots_are_all_kept(services, user, slow_backend):
    session = await services.orchestrator.start_interview(user.id, "Data Engineer")

    await asyncio.gather(*[
        services.orchestrator.submit_answer(user.id, session.id, i, f"answer {i}")
        for i in range(session.question_count)
    ])

    stored = await services.storage.sessions.require(session.id)
    assert [a.text for a in stored.answers] == [f"answer {i}" for i in range(session.question_count)]


async def test_concurrent_session_starts_all_land_in_history(services, user, slow_backend):
    sessions = await asyncio.gather(*[
        services.orchestrator.start_interview(user.id, f"Role {i}") for i in range(6)
    ])

    profile = await services.accounts.get_profile(user.id)
    assert sorted(profile.history) == sorted(s.id for s in sessions)


async def test_report_and_feedback_on_the_same_session_both_persist(services, user, slow_backend):
    session = await services.orchestrator.start_interview(user.id, "Data Engineer")

    feedback, report_url = await asyncio.gather(
        services.orchestrator.generate_feedback(user.id, session.id),
        services.reports.generate_report(user.id, session.id),
    )

    stored = await services.storage.sessions.require(session.id)
    assert stored.report_url == report_url
    assert stored.feedback == feedback.feedback
    assert stored.progress_recorded
    assert await services.reports.get_report(user.id, session.id) == report_url

    await services.orchestrator.generate_feedback(user.id, session.id)
    assert len((await services.accounts.get_performance(user.id)).scores) == 1
    assert (await services.accounts.get_profile(user.id)).xp_points == 100


async def test_slow_report_write_does_not_undo_recorded_feedback(services, user, storage, monkeypatch):
    session = await services.orchestrator.start_interview(user.id, "Data Engineer")
    backend = storage.storage_interface
    original_write = backend.write

    async def slow_session_write(collection, record_id, payload):
        if '"report_url":"/reports/' in payload:
            await asyncio.sleep(0.01)
        await original_write(collection, record_id, payload)

    monkeypatch.setattr(backend, "write", slow_session_write)

    await asyncio.gather(
        services.reports.generate_report(user.id, session.id),
        services.orchestrator.generate_feedback(user.id, session.id),
    )
    await services.orchestrator.generate_feedback(user.id, session.id)

    stored = await services.storage.sessions.require(session.id)
    assert stored.feedback_generated
    assert stored.progress_recorded
    assert stored.report_url
    assert len((await services.accounts.get_performance(user.id)).scores) == 1


async def test_concurrent_registrations_with_one_email_create_one_account(services, slow_backend):
    results = await asyncio.gather(*[
        services.accounts.register(f"Ada {i}", "Same@Example.com", TEST_PASSWORD) for i in range(3)
    ], return_exceptions=True)

    created = [r for r in results if isinstance(r, tuple)]
    rejected = [r for r in results if isinstance(r, DuplicateResourceError)]
    assert len(created) == 1
    assert len(rejected) == 2

    accounts = [a for a in await services.storage.accounts.list_all() if a.email == "same@example.com"]
    assert [a.id for a in accounts] == [created[0][0].id]


async def test_concurrent_email_changes_to_one_address(services, user, other_user, slow_backend):
    results = await asyncio.gather(
        services.accounts.update_profile(user.id, email="shared@example.com"),
        services.accounts.update_profile(other_user.id, email="shared@example.com"),
        return_exceptions=True,
    )

    assert sum(isinstance(r, DuplicateResourceError) for r in results) == 1
    accounts = [a for a in await services.storage.accounts.list_all() if a.email == "shared@example.com"]
    assert len(accounts) == 1
