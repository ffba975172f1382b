import logging
import re

import pytest
from click.testing import CliRunner

from interview_prep.cli import cli

from conftest import TEST_PASSWORD


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def base_args(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "config.yaml").write_text(
        "security:\n  secret_key: cli-test-secret\n  password_iterations: 1000\n",
        encoding="utf-8",
    )
    return ["--config", str(config_dir), "--data-dir", str(tmp_path / "data")]


def invoke(runner, base_args, *args, input=None):
    return runner.invoke(cli, [*base_args, *args], input=input)


def register(runner, base_args):
    result = invoke(
        runner, base_args, "register", "--name", "Ada", "--email", "ada@example.com", "--password", TEST_PASSWORD
    )
    assert result.exit_code == 0, result.output
    return result


def login_args(*args):
    return [*args, "--email", "ada@example.com", "--password", TEST_PASSWORD]


def test_register(runner, base_args, tmp_path):
    result = register(runner, base_args)

    assert "Account created" in result.output
    assert "Welcome, Ada!" in result.output
    assert (tmp_path / "data").is_dir()


def test_duplicate_register_exits_with_error(runner, base_args):
    register(runner, base_args)
    result = invoke(
        runner, base_args, "register", "--name", "Ada", "--email", "ada@example.com", "--password", TEST_PASSWORD
    )

    assert result.exit_code == 1
    assert "User already exists" in result.output


def test_wrong_password(runner, base_args):
    register(runner, base_args)
    result = invoke(runner, base_args, "dashboard", "--email", "ada@example.com", "--password", "not-it")

    assert result.exit_code == 1
    assert "Invalid email or password" in result.output


def test_interview_then_dashboard(runner, base_args):
    register(runner, base_args)

    interview = invoke(
        runner, base_args, *login_args("start-interview", "--role", "Frontend Developer"),
        input="I build UIs\nState lives in stores\n\nI profile first\nI ship it\n",
    )
    assert interview.exit_code == 0, interview.output
    assert "Interview started" in interview.output
    assert "Question skipped." in interview.output
    assert "Overall" in interview.output

    dashboard = invoke(runner, base_args, *login_args("dashboard"))
    assert dashboard.exit_code == 0, dashboard.output
    assert "Dashboard" in dashboard.output
    assert "100" in dashboard.output
    assert "frontend_developer: 1" in dashboard.output


def test_job_description_file(runner, base_args, tmp_path):
    register(runner, base_args)
    description = tmp_path / "job.txt"
    description.write_text("Build React dashboards", encoding="utf-8")

    result = invoke(
        runner, base_args, *login_args("start-interview", "--role", "QA", "--job-description", str(description)),
        input="\n" * 5,
    )

    assert result.exit_code == 0, result.output


def test_upload_and_analyze_resume(runner, base_args, tmp_path):
    register(runner, base_args)
    resume_file = tmp_path / "ada.pdf"
    resume_file.write_bytes(b"%PDF-1.4 resume")

    upload = invoke(runner, base_args, *login_args("upload-resume", str(resume_file)))
    assert upload.exit_code == 0, upload.output
    resume_id = re.search(r"ID: (\w+)", upload.output).group(1)

    analysis = invoke(runner, base_args, *login_args("analyze-resume", resume_id, "--role", "Frontend Developer"))
    assert analysis.exit_code == 0, analysis.output
    assert "ATS score" in analysis.output


def test_upload_rejects_text_files(runner, base_args, tmp_path):
    register(runner, base_args)
    notes = tmp_path / "notes.txt"
    notes.write_text("hello", encoding="utf-8")

    result = invoke(runner, base_args, *login_args("upload-resume", str(notes)))

    assert result.exit_code == 1
    assert "Only PDF and Word documents are allowed" in result.output


def config_with(tmp_path, text):
    config_dir = tmp_path / "config"
    with open(config_dir / "config.yaml", "a", encoding="utf-8") as f:
        f.write(text)


def test_logging_level_comes_from_config_unless_verbose(runner, base_args, tmp_path):
    config_with(tmp_path, "logging:\n  level: WARNING\n")

    register(runner, base_args)
    assert logging.getLogger().level == logging.WARNING

    result = invoke(runner, ["--verbose", *base_args], *login_args("dashboard"))
    assert result.exit_code == 0, result.output
    assert logging.getLogger().level == logging.DEBUG


def test_log_file_output(runner, base_args, tmp_path):
    log_file = tmp_path / "logs" / "cli.log"
    config_with(tmp_path, f"logging:\n  file_path: {log_file}\n  file_output: true\n")

    register(runner, base_args)

    assert log_file.exists()
    assert "User registered" in log_file.read_text(encoding="utf-8")


def test_resume_commands_respect_feature_flag(runner, base_args, tmp_path):
    config_with(tmp_path, "features:\n  resume_analysis: false\n")
    register(runner, base_args)
    resume_file = tmp_path / "ada.pdf"
    resume_file.write_bytes(b"%PDF-1.4 resume")

    result = invoke(runner, base_args, *login_args("upload-resume", str(resume_file)))

    assert result.exit_code == 1
    assert "feature is disabled" in result.output
