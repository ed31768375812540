"""Unit tests for the Typer CLI."""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest
import respx
from typer.testing import CliRunner

from cribl_provider.cli import app
from cribl_provider.config.models import PipelineResource, ResourceKind
from cribl_provider.reconcile.state import ProviderState, save_state

HOST = "http://cribl.test:9000"
BASE_URL = f"{HOST}/api/v1"

runner = CliRunner()

RESOURCES = """\
pipelines:
  - id: p1
    timeout_ms: 1000
    output: default
"""


@pytest.fixture
def provider_config(tmp_path: Path) -> str:
    path = tmp_path / "provider.yaml"
    path.write_text(f"base_url: {HOST}\ntoken: preissued\n")
    return str(path)


@pytest.fixture
def resources(tmp_path: Path) -> str:
    path = tmp_path / "resources.yaml"
    path.write_text(RESOURCES)
    return str(path)


@pytest.fixture
def state_path(tmp_path: Path) -> Path:
    return tmp_path / "cribl.state.json"


class TestValidate:
    def test_valid_document(self, resources: str):
        result = runner.invoke(app, ["validate", resources])
        assert result.exit_code == 0
        assert "Valid" in result.output
        assert "p1" in result.output

    def test_missing_file(self, tmp_path: Path):
        result = runner.invoke(app, ["validate", str(tmp_path / "nope.yaml")])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_invalid_document(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("pipelines:\n  - id: p1\n")
        result = runner.invoke(app, ["validate", str(path)])
        assert result.exit_code == 1
        assert "Validation error" in result.output


class TestLogLevel:
    def test_lowercase_level_accepted(self, resources: str):
        result = runner.invoke(app, ["--log-level", "debug", "validate", resources])
        assert result.exit_code == 0
        assert "Valid" in result.output

    def test_unknown_level_is_usage_error(self, resources: str):
        result = runner.invoke(app, ["--log-level", "LOUD", "validate", resources])
        assert result.exit_code == 2
        assert not isinstance(result.exception, ValueError)


class TestApply:
    @respx.mock
    def test_apply_creates_and_records_state(
        self, provider_config: str, resources: str, state_path: Path
    ):
        route = respx.post(f"{BASE_URL}/pipelines").mock(
            return_value=httpx.Response(200, json={"items": []})
        )
        result = runner.invoke(
            app,
            [
                "apply",
                resources,
                "--provider-config",
                provider_config,
                "--state",
                str(state_path),
            ],
        )
        assert result.exit_code == 0, result.output
        assert route.call_count == 1
        assert route.calls.last.request.headers["Authorization"] == "Bearer preissued"
        saved = json.loads(state_path.read_text())
        assert saved["resources"][0]["id"] == "p1"

    @respx.mock
    def test_apply_failure_exits_nonzero(
        self, provider_config: str, resources: str, state_path: Path
    ):
        respx.post(f"{BASE_URL}/pipelines").mock(
            return_value=httpx.Response(500, json={"message": "boom"})
        )
        result = runner.invoke(
            app,
            [
                "apply",
                resources,
                "--provider-config",
                provider_config,
                "--state",
                str(state_path),
            ],
        )
        assert result.exit_code == 1
        assert "Unable to create pipeline in Cribl" in result.output
        assert json.loads(state_path.read_text())["resources"] == []


class TestPlan:
    @respx.mock
    def test_plan_lists_creates_without_writing(
        self, provider_config: str, resources: str, state_path: Path
    ):
        result = runner.invoke(
            app,
            [
                "plan",
                resources,
                "--provider-config",
                provider_config,
                "--state",
                str(state_path),
            ],
        )
        assert result.exit_code == 0, result.output
        assert "create" in result.output
        assert len(respx.calls) == 0
        assert not state_path.exists()

    @respx.mock
    def test_plan_warns_on_remote_deletion(
        self, provider_config: str, resources: str, state_path: Path
    ):
        state = ProviderState()
        state.put(
            ResourceKind.PIPELINE,
            PipelineResource(id="p1", timeout_ms=1000, output="default"),
        )
        save_state(state, state_path)
        respx.get(f"{BASE_URL}/pipelines/p1").mock(return_value=httpx.Response(404))
        result = runner.invoke(
            app,
            [
                "plan",
                resources,
                "--provider-config",
                provider_config,
                "--state",
                str(state_path),
            ],
        )
        assert result.exit_code == 0, result.output
        assert "warning" in result.output
        assert "no longer exists" in result.output
        assert "create" in result.output


class TestImportAndDestroy:
    @respx.mock
    def test_import_then_destroy(self, provider_config: str, state_path: Path):
        respx.get(f"{BASE_URL}/system/inputs/gen").mock(
            return_value=httpx.Response(
                200, json={"items": [{"id": "gen", "type": "datagen"}]}
            )
        )
        delete = respx.delete(f"{BASE_URL}/system/inputs/gen").mock(
            return_value=httpx.Response(200, json={"items": []})
        )
        common = ["--provider-config", provider_config, "--state", str(state_path)]

        result = runner.invoke(app, ["import", "input_datagen", "gen", *common])
        assert result.exit_code == 0, result.output
        assert json.loads(state_path.read_text())["resources"][0]["kind"] == (
            "input_datagen"
        )

        result = runner.invoke(app, ["destroy", "--yes", *common])
        assert result.exit_code == 0, result.output
        assert delete.called
        assert json.loads(state_path.read_text())["resources"] == []

    @respx.mock
    def test_import_missing(self, provider_config: str, state_path: Path):
        respx.get(f"{BASE_URL}/pipelines/ghost").mock(return_value=httpx.Response(404))
        result = runner.invoke(
            app,
            [
                "import",
                "pipeline",
                "ghost",
                "--provider-config",
                provider_config,
                "--state",
                str(state_path),
            ],
        )
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_destroy_empty_state(self, provider_config: str, state_path: Path):
        result = runner.invoke(
            app,
            ["destroy", "--provider-config", provider_config, "--state", str(state_path)],
        )
        assert result.exit_code == 0
        assert "Nothing to destroy" in result.output


class TestSystemAndHealth:
    @respx.mock
    def test_system(self, provider_config: str):
        respx.get(f"{BASE_URL}/system/info").mock(
            return_value=httpx.Response(
                200,
                json={
                    "items": [
                        {"hostname": "leader", "BUILD": {"VERSION": "4.5.1", "BRANCH": "main"}}
                    ]
                },
            )
        )
        result = runner.invoke(app, ["system", "--provider-config", provider_config])
        assert result.exit_code == 0, result.output
        assert "4.5.1" in result.output

    @respx.mock
    def test_unreachable_reports_error(self, provider_config: str):
        respx.get(f"{BASE_URL}/system/info").mock(
            side_effect=httpx.ConnectError("refused")
        )
        result = runner.invoke(app, ["system", "--provider-config", provider_config])
        assert result.exit_code == 1
        assert "refused" in result.output

    def test_missing_url(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("CRIBL_URL", raising=False)
        result = runner.invoke(app, ["health"])
        assert result.exit_code == 1
        assert "Unknown URL" in result.output
