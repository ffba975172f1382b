import pytest

from interview_prep.container import build_services
from interview_prep.services.configuration_manager import AppConfig, SecurityConfig
from interview_prep.services.scoring import FixedScoreProvider
from interview_prep.services.storage_manager import StorageManager

TEST_SECRET = "test-secret-key"
TEST_PASSWORD = "s3cret-pass"

# clarity, confidence, filler words, keyword usage, overall
HIGH_SCORES = [85, 82, 3, 90, 88]


@pytest.fixture(autouse=True)
def _test_env(monkeypatch: pytest.MonkeyPatch):
    for name in ("ENVIRONMENT", "LOG_LEVEL", "INTERVIEW_PREP_SECRET_KEY",
                 "INTERVIEW_PREP_DATA_DIR", "INTERVIEW_PREP_STORAGE_BACKEND"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(security=SecurityConfig(secret_key=TEST_SECRET, password_iterations=1000))


@pytest.fixture
def score_provider() -> FixedScoreProvider:
    return FixedScoreProvider(HIGH_SCORES)


@pytest.fixture
async def storage():
    manager = StorageManager("memory")
    await manager.initialize()
    yield manager
    await manager.close()


@pytest.fixture
async def services(app_config, storage, score_provider):
    container = build_services(app_config, storage=storage, score_provider=score_provider)
    await container.start()
    yield container
    await container.close()


@pytest.fixture
async def user(services):
    registered, _ = await services.accounts.register("Ada Lovelace", "ada@example.com", TEST_PASSWORD)
    return registered


@pytest.fixture
async def other_user(services):
    registered, _ = await services.accounts.register("Grace Hopper", "grace@example.com", TEST_PASSWORD)
    return registered


@pytest.fixture
def high_scores():
    return list(HIGH_SCORES)
