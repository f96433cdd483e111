"""Tests for energy_pipeline/cli/main.py."""

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from typer.testing import CliRunner

from energy_pipeline.cli.main import app
from energy_pipeline.core.types import DependencyStatus, RunResponse
from energy_pipeline.monitoring import HealthSnapshot

runner = CliRunner()

RUN_DATA = {
    "analysis_id": "abc",
    "execution_time_ms": 1200,
    "summary": {
        "news_articles": 12,
        "market_symbols": 21,
        "predictions_generated": 4,
        "analysis_quality": "full",
        "persistence": {"analysis": {"ok": True}, "news": {"ok": True}, "market": {"ok": True}},
        "delivery": {"subscribers": 3, "delivered": 3, "failed": 0},
    },
    "analysis": {"summary": [], "predictions": {}, "reasoning": "..."},
}


def _patch_run(response: RunResponse, health: HealthSnapshot):
    return patch(
        "energy_pipeline.cli.main._run_once",
        AsyncMock(return_value=(response, health)),
    )


class TestRunCommand:
    """`energy-pulse run` exit codes."""

    def test_json_output(self):
        with _patch_run(RunResponse(success=True, data=RUN_DATA), HealthSnapshot()):
            result = runner.invoke(app, ["run", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.stdout)["data"]["analysis_id"] == "abc"

    def test_table_output(self):
        with _patch_run(RunResponse(success=True, data=RUN_DATA), HealthSnapshot()):
            result = runner.invoke(app, ["run", "--quiet"])

        assert result.exit_code == 0
        assert "abc" in result.stdout

    def test_failed_run_exits_1(self):
        with _patch_run(RunResponse(success=False, error="boom"), HealthSnapshot()):
            result = runner.invoke(app, ["run", "--quiet"])

        assert result.exit_code == 1
        assert "boom" in result.stdout

    def test_degraded_run_exits_2(self):
        health = HealthSnapshot(news=DependencyStatus.FAILED)
        with _patch_run(RunResponse(success=True, data=RUN_DATA), health):
            result = runner.invoke(app, ["run", "--json"])

        assert result.exit_code == 2


class TestServiceCommands:
    """Commands that talk to a running service."""

    def test_health(self):
        body = {
            "status": "degraded",
            "system": HealthSnapshot(market=DependencyStatus.FAILED).to_dict(),
            "breakers": [
                {
                    "name": "market",
                    "state": "open",
                    "consecutive_failures": 3,
                    "failure_threshold": 3,
                    "retry_after_seconds": 42.0,
                }
            ],
        }
        with patch("energy_pipeline.cli.main.httpx.get", return_value=httpx.Response(503, json=body)):
            result = runner.invoke(app, ["health", "--url", "http://svc"])

        assert result.exit_code == 2
        assert "degraded" in result.stdout
        assert "market" in result.stdout

    def test_health_unreachable(self):
        with patch(
            "energy_pipeline.cli.main.httpx.get", side_effect=httpx.ConnectError("refused")
        ):
            result = runner.invoke(app, ["health"])
        assert result.exit_code == 1

    def test_summary_posts_secret(self):
        with patch(
            "energy_pipeline.cli.main.httpx.post",
            return_value=httpx.Response(200, json={"success": True}),
        ) as post:
            result = runner.invoke(app, ["summary", "--url", "http://svc", "--token", "s3cret"])

        assert result.exit_code == 0
        assert post.call_args.args[0] == "http://svc/api/health"
        assert post.call_args.kwargs["json"] == {
            "action": "send_health_summary",
            "auth_token": "s3cret",
        }

    def test_summary_without_token(self, monkeypatch):
        monkeypatch.delenv("CRON_SECRET", raising=False)
        result = runner.invoke(app, ["summary"])
        assert result.exit_code == 1

    @pytest.mark.parametrize("code", [401, 500])
    def test_summary_rejected(self, code):
        with patch(
            "energy_pipeline.cli.main.httpx.post",
            return_value=httpx.Response(code, text="nope"),
        ):
            result = runner.invoke(app, ["summary", "--token", "t"])
        assert result.exit_code == 1

    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "Energy Pulse v" in result.stdout
