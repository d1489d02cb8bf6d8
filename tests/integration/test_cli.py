"""Integration tests for the pws command line."""

import httpx
import pytest
from typer.testing import CliRunner

from pws.api.client import HttpWorkspaceRepository
from pws.cli import main as cli

from ..fakes import API_URL, JOB_ID, FakeWorkspaceApi

runner = CliRunner()


@pytest.fixture
def cli_api(monkeypatch, fake_api: FakeWorkspaceApi) -> FakeWorkspaceApi:
    def repository(base_url=None):
        return HttpWorkspaceRepository(base_url=API_URL, transport=httpx.MockTransport(fake_api.handler))

    monkeypatch.setattr(cli, "HttpWorkspaceRepository", repository)
    return fake_api


@pytest.mark.integration
class TestCli:
    def test_show(self, cli_api) -> None:
        result = runner.invoke(cli.app, ["show", JOB_ID, "--mark-viewed"])
        assert result.exit_code == 0, result.output
        assert "Kitchen" in result.output
        assert "2 sections, 3 items" in result.output
        assert len(cli_api.requests_to("viewed")) == 1

    def test_add_section(self, cli_api) -> None:
        result = runner.invoke(cli.app, ["add-section", JOB_ID, "--title", "Garden"])
        assert result.exit_code == 0, result.output
        assert [s["title"] for s in cli_api.sections][-1] == "Garden"

    def test_client_cannot_add_section(self, cli_api) -> None:
        result = runner.invoke(cli.app, ["add-section", JOB_ID, "--title", "Garden", "--role", "client"])
        assert result.exit_code == 1
        assert cli_api.requests_to("create_section") == []

    def test_react_and_comment(self, cli_api) -> None:
        result = runner.invoke(cli.app, ["react", JOB_ID, "sec-a", "item-1", "love", "--user-id", "user-client"])
        assert result.exit_code == 0, result.output
        assert "love: 1" in result.output
        assert "Your reaction: love" in result.output

        result = runner.invoke(cli.app, ["comment", JOB_ID, "sec-a", "item-1", "Lovely"])
        assert result.exit_code == 0, result.output
        assert "Lovely" in result.output

    def test_add_link_item(self, cli_api) -> None:
        result = runner.invoke(
            cli.app,
            ["add-item", JOB_ID, "sec-b", "--type", "link", "--title", "Idea", "--link", "https://pin.test/1"],
        )
        assert result.exit_code == 0, result.output
        created = cli_api.sections[1]["items"][-1]
        assert created["linkUrl"] == "https://pin.test/1"
        assert "fileUrl" not in created

    def test_delete_section_with_yes(self, cli_api) -> None:
        result = runner.invoke(cli.app, ["delete-section", JOB_ID, "sec-b", "--yes"])
        assert result.exit_code == 0, result.output
        assert [s["_id"] for s in cli_api.sections] == ["sec-a"]

    def test_missing_workspace_shows_empty(self, cli_api) -> None:
        cli_api.exists = False
        result = runner.invoke(cli.app, ["show", JOB_ID])
        assert result.exit_code == 0, result.output
        assert "Workspace is empty" in result.output

    def test_upload_public_prints_url(self, cli_api, tmp_path) -> None:
        plan = tmp_path / "plan.pdf"
        plan.write_bytes(b"%PDF-1.4")
        result = runner.invoke(cli.app, ["upload", JOB_ID, str(plan), "--public"])
        assert result.exit_code == 0, result.output
        assert f"{API_URL}/uploads/public-file" in result.output
        assert len(cli_api.requests_to("upload_public")) == 1

    def test_upload_item_file(self, cli_api, tmp_path) -> None:
        tile = tmp_path / "tile.png"
        tile.write_bytes(b"\x89PNG")
        result = runner.invoke(cli.app, ["upload", JOB_ID, str(tile)])
        assert result.exit_code == 0, result.output
        assert "https://cdn.test/files/generic.bin" in result.output

    def test_upload_rejected_file_type(self, cli_api, tmp_path) -> None:
        binary = tmp_path / "setup.exe"
        binary.write_bytes(b"MZ")
        result = runner.invoke(cli.app, ["upload", JOB_ID, str(binary)])
        assert result.exit_code == 1
        assert cli_api.requests_to("upload") == []
