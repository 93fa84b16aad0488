import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

from click.testing import CliRunner

from openapi_docgen.cli import main
from openapi_docgen.errors import IngestionError
from openapi_docgen.source.remote import parse_source_root

FIXTURES = Path(__file__).parent / "fixtures"
ENDPOINTS = parse_source_root(json.loads((FIXTURES / "http_apis.json").read_text(encoding="utf-8")))


class TestCliGenerate:
    @patch("openapi_docgen.generator.orchestrator.fetch_endpoints", new_callable=AsyncMock)
    def test_generate(self, mock_fetch, tmp_path):
        mock_fetch.return_value = ENDPOINTS
        output = tmp_path / "generated"

        runner = CliRunner()
        result = runner.invoke(main, [
            "generate",
            "--source-url", "https://example.test/apis",
            "--headers", '{"Authorization": "Bearer t"}',
            "--definitions", str(FIXTURES / "project.apifox.json"),
            "-o", str(output),
        ])

        assert result.exit_code == 0, result.output
        assert "Generated 3 per-endpoint OpenAPI files" in result.output
        assert "Used 4 schema definitions" in result.output
        assert len(list(output.rglob("*.json"))) == 3
        args, kwargs = mock_fetch.call_args
        assert args == ("https://example.test/apis", {"Authorization": "Bearer t"})

    @patch("openapi_docgen.generator.orchestrator.fetch_endpoints", new_callable=AsyncMock)
    def test_generate_with_pages(self, mock_fetch, tmp_path):
        mock_fetch.return_value = ENDPOINTS
        content = tmp_path / "content"

        runner = CliRunner()
        result = runner.invoke(main, [
            "generate",
            "--definitions", str(tmp_path / "missing.json"),
            "-o", str(tmp_path / "generated"),
            "--content", str(content),
            "--pages-locale", "zh",
        ])

        assert result.exit_code == 0, result.output
        assert "No schema definitions used" in result.output
        assert len(list((content / "zh" / "api").rglob("*.mdx"))) == 3

    @patch("openapi_docgen.generator.orchestrator.fetch_endpoints", new_callable=AsyncMock)
    def test_ingestion_failure_exits_non_zero(self, mock_fetch, tmp_path):
        mock_fetch.side_effect = IngestionError("endpoint source fetch failed: 502")

        runner = CliRunner()
        result = runner.invoke(main, ["generate", "-o", str(tmp_path / "generated")])

        assert result.exit_code == 1
        assert "502" in result.output

    @patch("openapi_docgen.generator.orchestrator.shutil.rmtree", side_effect=PermissionError("read-only"))
    def test_failed_wipe_exits_non_zero(self, mock_rmtree, tmp_path):
        output = tmp_path / "generated"
        output.mkdir()

        runner = CliRunner()
        result = runner.invoke(main, ["generate", "-o", str(output)])

        assert result.exit_code == 1
        assert "read-only" in result.output

    def test_bad_headers_env(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(
            main,
            ["generate", "-o", str(tmp_path / "generated")],
            env={"HTTP_SOURCE_HEADERS": "not json"},
        )
        assert result.exit_code == 1
        assert "HTTP_SOURCE_HEADERS" in result.output


class TestCliRepair:
    def test_repair_prints_summary(self, tmp_path):
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path):
            output = Path("openapi/generated")
            (output / "ai-model" / "Chat").mkdir(parents=True)
            (output / "ai-model" / "Chat" / "post-chat-1.json").write_text("{}", encoding="utf-8")
            page = Path("content/en/api/chat.mdx")
            page.parent.mkdir(parents=True)
            page.write_text('<APIPage document={"openapi/generated/old/post-chat-1.json"} />', encoding="utf-8")

            result = runner.invoke(main, [
                "repair", "-l", "en", "-l", "ja",
                "-o", "openapi/generated",
                "--content", "content",
            ])

            assert result.exit_code == 0, result.output
            assert "[repair] en: scanned=1, changed=1, fixedRefs=1, unresolvedRefs=0" in result.output
            assert "[repair] ja: scanned=0" in result.output
            assert 'document={"openapi/generated/ai-model/Chat/post-chat-1.json"}' in page.read_text(encoding="utf-8")


class TestCliCheck:
    def test_check_reports_problems(self, tmp_path):
        (tmp_path / "bad.json").write_text('{"openapi": "3.1.0", "paths": {}}', encoding="utf-8")

        runner = CliRunner()
        result = runner.invoke(main, ["check", "-o", str(tmp_path)])

        assert result.exit_code == 1
        assert "bad.json: document must have exactly one path" in result.output

    def test_check_empty_tree(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(main, ["check", "-o", str(tmp_path)])
        assert result.exit_code == 0
        assert "All documents valid." in result.output
