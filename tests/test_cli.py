"""Tests for the typer CLI."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from arete.cli import app
from arete.clients.llm_client import LLMClient, LLMResponse
from arete.config import AppConfig, UsageConfig
from arete.logging.usage_store import UsageStore
from conftest import make_analysis, make_gap

runner = CliRunner()


@pytest.fixture
def llm():
    client = AsyncMock(spec=LLMClient)
    client.generate.return_value = LLMResponse(text="{}", input_tokens=10, output_tokens=5)
    client.get_token_summary.return_value = {
        "input": 300,
        "output": 90,
        "calls": [("claude-haiku-4-5-20251001", 300, 90)],
    }
    with (
        patch("arete.cli.LLMClient", return_value=client),
        patch("arete.cli.load_config", return_value=AppConfig(usage=UsageConfig(enabled=False))),
    ):
        yield client


@pytest.fixture
def resume_file(tmp_path, sample_document):
    path = tmp_path / "resume.json"
    path.write_text(json.dumps(sample_document), encoding="utf-8")
    return path


class TestAnalyze:
    def test_prints_gaps_and_saves(self, llm, resume_file, tmp_path):
        jd = tmp_path / "jd.txt"
        jd.write_text("Kubernetes and Docker required.", encoding="utf-8")
        llm.generate.return_value = LLMResponse(
            text=json.dumps(make_analysis([make_gap()], overall_match=61).to_data()),
            input_tokens=10,
            output_tokens=5,
        )
        output = tmp_path / "analysis.json"

        result = runner.invoke(app, ["analyze", str(resume_file), "--jd", str(jd), "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert "Missing Docker experience" in result.output
        assert json.loads(output.read_text())["summary"]["overallMatch"] == 61

    def test_oversized_job_description(self, llm, resume_file, tmp_path):
        jd = tmp_path / "jd.txt"
        jd.write_text("x" * 10_001, encoding="utf-8")

        result = runner.invoke(app, ["analyze", str(resume_file), "--jd", str(jd)])

        assert result.exit_code == 1
        assert "too long" in result.output
        llm.generate.assert_not_called()

    def test_missing_job_description_file(self, llm, resume_file, tmp_path):
        result = runner.invoke(app, ["analyze", str(resume_file), "--jd", str(tmp_path / "nope.txt")])
        assert result.exit_code == 1


class TestTailor:
    def test_accepting_a_proposal_writes_tailored_resume(self, llm, resume_file, tmp_path):
        analysis = tmp_path / "analysis.json"
        analysis.write_text(json.dumps(make_analysis([make_gap()], overall_match=70).to_data()))

        result = runner.invoke(
            app,
            ["tailor", str(resume_file), "--analysis", str(analysis)],
            input="Docker and Kubernetes for every deployment\ny\n",
        )

        assert result.exit_code == 0, result.output
        tailored = json.loads((tmp_path / "resume_tailored.json").read_text())
        assert tailored["skills"]["technical"] == ["Python", "SQL", "Docker", "Kubernetes"]
        assert "100%" in result.output

    def test_requires_jd_or_analysis(self, llm, resume_file):
        result = runner.invoke(app, ["tailor", str(resume_file)])
        assert result.exit_code == 1

    def test_missing_job_description_file(self, llm, resume_file, tmp_path):
        result = runner.invoke(app, ["tailor", str(resume_file), "--jd", str(tmp_path / "nope.txt")])

        assert result.exit_code == 1
        assert "not found" in result.output
        llm.generate.assert_not_called()

    def test_walk_usage_recorded(self, llm, resume_file, tmp_path):
        db_path = tmp_path / "usage.db"
        analysis = tmp_path / "analysis.json"
        analysis.write_text(json.dumps(make_analysis([make_gap()], overall_match=70).to_data()))
        config = AppConfig(usage=UsageConfig(enabled=True, db_path=str(db_path)))

        with patch("arete.cli.load_config", return_value=config):
            result = runner.invoke(
                app,
                ["tailor", str(resume_file), "--analysis", str(analysis)],
                input="Docker and Kubernetes for every deployment\ny\n",
            )

        assert result.exit_code == 0, result.output
        llm.get_token_summary.assert_called_once()
        [log] = UsageStore(db_path).get_logs()
        assert log.mode == "gap_walk"
        assert log.gap_count == 1
        assert (log.total_input_tokens, log.total_output_tokens) == (300, 90)


class TestInterview:
    def test_answers_build_a_new_resume(self, llm, tmp_path):
        llm.generate.return_value = LLMResponse(
            text='Nice to meet you, Jane!<arete-data>{"profile": {"fullName": "Jane Doe"}, '
            '"stepComplete": "profile"}</arete-data>',
            input_tokens=10,
            output_tokens=5,
        )
        output = tmp_path / "built.json"

        result = runner.invoke(app, ["interview", "-o", str(output)], input="Jane Doe\n/done\n")

        assert result.exit_code == 0, result.output
        assert "Nice to meet you, Jane!" in result.output
        assert "Arete - experience" in result.output
        assert json.loads(output.read_text()) == {"profile": {"fullName": "Jane Doe"}}

    def test_accepted_change_is_saved(self, llm, resume_file, tmp_path):
        llm.generate.return_value = LLMResponse(
            text='Shall I add Docker?<arete-data>{"changeProposal": {"path": "skills.technical", '
            '"oldValue": ["Python", "SQL"], "newValue": ["Docker"], "description": "Add Docker"}}</arete-data>',
            input_tokens=10,
            output_tokens=5,
        )

        result = runner.invoke(app, ["interview", str(resume_file)], input="I use Docker daily\ny\n/done\n")

        assert result.exit_code == 0, result.output
        saved = json.loads((tmp_path / "resume_interview.json").read_text())
        assert saved["skills"]["technical"] == ["Python", "SQL", "Docker"]
