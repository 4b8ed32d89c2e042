"""Tests for the cosmicpatterns command line."""

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest
from typer.testing import CliRunner

from cosmicpatterns.cli import cli
from tests.fixtures.builders import tarot_moon_history

runner = CliRunner()


def _json_output(result) -> dict:
    for line in reversed(result.stdout.splitlines()):
        if line.startswith("{"):
            return json.loads(line)
    raise AssertionError(f"No JSON in output: {result.stdout}")


@pytest.fixture
def workspace(tmp_path: Path):
    """Activity and context exports for ``user-1`` plus an isolated config."""
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"snapshots": {"database_path": str(tmp_path / "default.db")}}))
    events, contexts = tarot_moon_history(datetime.now(timezone.utc))

    activity = tmp_path / "activity.json"
    activity.write_text(
        json.dumps(
            [
                {
                    "user_id": "user-1",
                    "event_id": event.event_id,
                    "activity": event.activity.value,
                    "created_at": event.created_at.isoformat(),
                    "tags": list(event.tags),
                    "entities": list(event.entities),
                }
                for event in events
            ]
        )
    )
    context = tmp_path / "contexts.json"
    context.write_text(
        json.dumps(
            [
                {
                    "day": day.isoformat(),
                    "moon": {"name": ctx.moon.name, "illumination": ctx.moon.illumination},
                    "planets": {"Sun": {"sign": ctx.sign_of("Sun"), "degree": 12.0}},
                }
                for day, ctx in contexts.items()
            ]
        )
    )
    return {
        "activity": str(activity),
        "context": str(context),
        "config": str(config),
        "database": str(tmp_path / "snapshots.db"),
    }


def _detect_args(workspace, *extra):
    return [
        "detect",
        "user-1",
        "-a",
        workspace["activity"],
        "-c",
        workspace["context"],
        "--config",
        workspace["config"],
        *extra,
    ]


def _store_args(workspace, *extra):
    return [
        "--config",
        workspace["config"],
        "--database",
        workspace["database"],
        "--no-encryption",
        *extra,
    ]


class TestDetectCommand:
    def test_detect_json(self, workspace):
        result = runner.invoke(cli, _detect_args(workspace, "--tier", "premium", "--json"))

        assert result.exit_code == 0, result.output
        payload = _json_output(result)
        assert payload["success"] is True
        assert payload["meta"]["user_tier"] == "premium"
        assert payload["meta"]["events_analyzed"]["tarot"] == 10
        assert "tarot_moon_phase" in {p["type"] for p in payload["patterns"]}

    def test_detect_table(self, workspace):
        result = runner.invoke(cli, _detect_args(workspace))

        assert result.exit_code == 0, result.output
        assert "Cosmic Patterns" in result.output

    def test_insufficient_data(self, workspace):
        result = runner.invoke(
            cli,
            ["detect", "nobody", "-a", workspace["activity"], "-c", workspace["context"],
             "--config", workspace["config"]],
        )

        assert result.exit_code == 0, result.output
        assert "Not enough activity" in result.output

    def test_unknown_category(self, workspace):
        result = runner.invoke(cli, _detect_args(workspace, "--category", "horoscope", "--json"))

        assert result.exit_code == 1
        assert _json_output(result)["success"] is False

    def test_unreadable_activity_file(self, workspace, tmp_path):
        broken = tmp_path / "broken.json"
        broken.write_text("{oops")

        result = runner.invoke(
            cli,
            ["detect", "user-1", "-a", str(broken), "-c", workspace["context"],
             "--config", workspace["config"], "--json"],
        )

        assert result.exit_code == 1
        assert _json_output(result)["error"]["code"] == "SOURCE_ERROR"


class TestSnapshotCommands:
    def test_refresh_then_read(self, workspace):
        refresh = runner.invoke(
            cli,
            ["snapshots", "refresh", "user-1", "-a", workspace["activity"], "-c", workspace["context"],
             *_store_args(workspace, "--json")],
        )
        assert refresh.exit_code == 0, refresh.output
        summary = _json_output(refresh)
        assert summary["success"] is True
        assert "tarot_season" in summary["saved"]

        current = runner.invoke(cli, ["snapshots", "current", "user-1", *_store_args(workspace, "--json")])
        assert current.exit_code == 0, current.output
        assert "tarot_season" in _json_output(current)["snapshots"]
        assert "archetype" not in _json_output(current)["snapshots"]

        history = runner.invoke(
            cli,
            ["snapshots", "history", "user-1", "--type", "tarot_season", *_store_args(workspace, "--json")],
        )
        assert history.exit_code == 0, history.output
        rows = _json_output(history)
        assert rows["totalCount"] == 1
        assert rows["snapshots"][0]["type"] == "tarot_season"

    def test_refresh_cooldown(self, workspace):
        args = ["snapshots", "refresh", "user-1", "-a", workspace["activity"], "-c", workspace["context"],
                *_store_args(workspace)]
        assert runner.invoke(cli, args).exit_code == 0

        again = runner.invoke(cli, args)

        assert again.exit_code == 1
        assert "--force" in again.output
        assert runner.invoke(cli, [*args, "--force"]).exit_code == 0

    def test_empty_current(self, workspace):
        result = runner.invoke(cli, ["snapshots", "current", "user-1", *_store_args(workspace)])

        assert result.exit_code == 0
        assert "No snapshots stored yet" in result.output

    def test_backfill_and_purge(self, workspace):
        backfill = runner.invoke(
            cli,
            ["snapshots", "backfill", "user-1", "-a", workspace["activity"], "--weeks", "2",
             *_store_args(workspace, "--json")],
        )
        assert backfill.exit_code == 0, backfill.output
        created = _json_output(backfill)["snapshotsCreated"]
        assert created > 0

        purge = runner.invoke(
            cli, ["snapshots", "purge", "user-1", "--confirm", *_store_args(workspace, "--json")]
        )
        assert purge.exit_code == 0, purge.output
        assert _json_output(purge)["deleted"] == created

    def test_purge_requires_confirm(self, workspace):
        result = runner.invoke(cli, ["snapshots", "purge", "user-1", *_store_args(workspace)])

        assert result.exit_code == 1
        assert "--confirm" in result.output
