import logging
import logging.handlers

import pytest
from fastapi.testclient import TestClient

from interview_prep.api import create_app
from interview_prep.services.configuration_manager import ConfigurationManager
from interview_prep.services.scoring import FixedScoreProvider
from interview_prep.services.storage_manager import StorageManager

from conftest import HIGH_SCORES, TEST_PASSWORD


def build_app(tmp_path, config_text=""):
    config_dir = tmp_path / "config"
    config_dir.mkdir(exist_ok=True)
    (config_dir / "config.yaml").write_text(
        "security:\n  password_iterations: 1000\n" + config_text,
        encoding="utf-8",
    )
    config_manager = ConfigurationManager(str(config_dir), env_file=str(tmp_path / ".env"))
    config_manager.initialize()

    return create_app(
        config_manager,
        storage=StorageManager("memory"),
        score_provider=FixedScoreProvider(HIGH_SCORES),
    )


@pytest.fixture
def client(tmp_path):
    with TestClient(build_app(tmp_path)) as test_client:
        yield test_client


def register(client, name="Ada", email="ada@example.com"):
    response = client.post("/api/users/register", json={"name": name, "email": email, "password": TEST_PASSWORD})
    assert response.status_code == 201, response.text
    return response.json()


def auth(account):
    return {"Authorization": f"Bearer {account['token']}"}


@pytest.fixture
def account(client):
    return register(client)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert "X-Request-ID" in response.headers


class TestUsers:
    def test_register_and_login(self, client, account):
        assert account["level"] == "Beginner"
        assert account["xp_points"] == 0

        response = client.post("/api/users/login", json={"email": "ada@example.com", "password": TEST_PASSWORD})
        assert response.status_code == 200
        assert response.json()["id"] == account["id"]

    def test_duplicate_registration(self, client, account):
        response = client.post(
            "/api/users/register", json={"name": "Ada", "email": "ada@example.com", "password": TEST_PASSWORD}
        )
        assert response.status_code == 409
        assert response.json() == {"message": "User already exists", "error_code": "DUPLICATE_RESOURCE_ERROR"}

    def test_bad_login(self, client, account):
        response = client.post("/api/users/login", json={"email": "ada@example.com", "password": "nope-nope"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    @pytest.mark.parametrize("headers", [{}, {"Authorization": "Bearer junk"}, {"Authorization": "Basic abc"}])
    def test_protected_routes_need_token(self, client, headers):
        assert client.get("/api/users/profile", headers=headers).status_code == 401

    def test_profile_round_trip(self, client, account):
        profile = client.get("/api/users/profile", headers=auth(account)).json()
        assert profile["email"] == "ada@example.com"
        assert "password_hash" not in profile

        response = client.put("/api/users/profile", json={"name": "Countess"}, headers=auth(account))
        assert response.status_code == 200
        assert response.json()["name"] == "Countess"

    def test_performance_and_dashboard(self, client, account):
        performance = client.get("/api/users/performance", headers=auth(account)).json()
        assert performance["scores"] == []
        assert performance["progress_level"] == "Beginner"

        dashboard = client.get("/api/users/dashboard", headers=auth(account)).json()
        assert dashboard["interview_count"] == 0
        assert dashboard["account_level"] == "Beginner"


class TestInterviewFlow:
    def test_full_interview(self, client, account):
        headers = auth(account)
        started = client.post(
            "/api/interview/start", json={"role": "Frontend Developer", "jobDescription": ""}, headers=headers
        )
        assert started.status_code == 201
        session = started.json()
        assert len(session["questions"]) == 5

        for index in range(5):
            response = client.post("/api/interview/submit-answer", json={
                "sessionId": session["id"],
                "questionIndex": index,
                "answer": f"answer {index}",
            }, headers=headers)
            assert response.status_code == 200
            body = response.json()
            assert body["success"] is True
            assert body["is_last_question"] is (index == 4)
            assert body["next_question_index"] == (None if index == 4 else index + 1)

        feedback = client.post("/api/interview/feedback", json={"sessionId": session["id"]}, headers=headers)
        assert feedback.status_code == 200
        result = feedback.json()
        assert result["feedback"]["overall_score"] == HIGH_SCORES[-1]
        assert result["feedback"]["emotion"] == "Neutral"
        assert "Q: " in result["transcript"]

        again = client.post("/api/interview/feedback", json={"sessionId": session["id"]}, headers=headers)
        assert again.json() == result

        performance = client.get("/api/users/performance", headers=headers).json()
        assert performance["scores"] == [HIGH_SCORES[-1]]
        assert performance["interviews_by_role"] == {"frontend_developer": 1}

        listed = client.get("/api/interview", headers=headers).json()
        assert [s["id"] for s in listed] == [session["id"]]
        detail = client.get(f"/api/interview/{session['id']}", headers=headers).json()
        assert detail["progress_recorded"] is True

    def test_start_requires_role(self, client, account):
        response = client.post("/api/interview/start", json={"role": "  "}, headers=auth(account))
        assert response.status_code == 400
        assert response.json() == {"message": "Role is required", "error_code": "VALIDATION_ERROR"}

    def test_out_of_range_and_missing_fields(self, client, account):
        headers = auth(account)
        session = client.post("/api/interview/start", json={"role": "QA"}, headers=headers).json()

        out_of_range = client.post("/api/interview/submit-answer", json={
            "sessionId": session["id"], "questionIndex": 5, "answer": "x",
        }, headers=headers)
        assert out_of_range.status_code == 400

        missing = client.post("/api/interview/submit-answer", json={"sessionId": session["id"]}, headers=headers)
        assert missing.status_code == 400
        assert missing.json()["error_code"] == "VALIDATION_ERROR"

    def test_other_users_session(self, client, account):
        session = client.post("/api/interview/start", json={"role": "QA"}, headers=auth(account)).json()
        intruder = register(client, name="Eve", email="eve@example.com")

        response = client.post("/api/interview/submit-answer", json={
            "sessionId": session["id"], "questionIndex": 0, "answer": "x",
        }, headers=auth(intruder))
        assert response.status_code == 403
        assert response.json()["message"] == "Not authorized"

        assert client.get("/api/interview/missing-id", headers=auth(intruder)).status_code == 404


class TestResumeAndReport:
    def test_upload_analyze_and_report(self, client, account):
        headers = auth(account)
        upload = client.post(
            "/api/resume/upload",
            files={"file": ("ada.pdf", b"%PDF-1.4 resume", "application/pdf")},
            headers=headers,
        )
        assert upload.status_code == 201
        resume = upload.json()
        assert resume["file_url"].endswith(".pdf")

        analysis = client.post(
            "/api/resume/ats-score", json={"resumeId": resume["id"], "role": "Frontend Developer"}, headers=headers
        )
        assert analysis.status_code == 200
        assert 60 <= analysis.json()["ats_score"] <= 100

        assert [r["id"] for r in client.get("/api/resume", headers=headers).json()] == [resume["id"]]
        assert client.get(f"/api/resume/{resume['id']}", headers=headers).json()["ats_score"] is not None

        session = client.post("/api/interview/start", json={"role": "QA"}, headers=headers).json()
        assert client.get(f"/api/report/{session['id']}", headers=headers).status_code == 404

        report = client.post(
            "/api/report/pdf", json={"interviewId": session["id"], "resumeId": resume["id"]}, headers=headers
        )
        assert report.status_code == 200
        report_url = report.json()["report_url"]
        assert client.get(f"/api/report/{session['id']}", headers=headers).json() == {"report_url": report_url}

        dashboard = client.get("/api/users/dashboard", headers=headers).json()
        assert dashboard["xp_points"] == 50
        assert dashboard["resume_count"] == 1

    def test_rejects_other_file_types(self, client, account):
        response = client.post(
            "/api/resume/upload",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            headers=auth(account),
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Only PDF and Word documents are allowed"


class TestConfiguration:
    def test_disabled_features_hide_their_routes(self, tmp_path):
        app = build_app(tmp_path, "features:\n  reports: false\n  resume_analysis: false\n")
        with TestClient(app) as client:
            headers = auth(register(client))
            session = client.post("/api/interview/start", json={"role": "QA"}, headers=headers).json()

            report = client.post("/api/report/pdf", json={"interviewId": session["id"]}, headers=headers)
            assert report.status_code == 404
            assert report.json()["error_code"] == "NOT_FOUND_ERROR"
            assert client.get("/api/resume", headers=headers).status_code == 404

            assert client.get(f"/api/interview/{session['id']}", headers=headers).status_code == 200

    def test_logging_section_is_applied(self, tmp_path):
        log_file = tmp_path / "logs" / "api.log"
        build_app(tmp_path, (
            "logging:\n"
            "  level: WARNING\n"
            "  format: json\n"
            f"  file_path: {log_file}\n"
            "  file_output: true\n"
        ))

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in root.handlers)
        assert log_file.parent.is_dir()
