"""Tests for the CLI commands"""

import json
import re
from pathlib import Path

import pytest
from rich.console import Console
from typer.testing import CliRunner

from legal_forms.cli import main as cli_main
from legal_forms.cli.main import app
from legal_forms.utils.config import get_settings

runner = CliRunner()

DOC_ID = re.compile(r"doc_[0-9a-f]{12}")


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    """Wide console so tables are not wrapped; quiet logs keep stdout parseable"""
    monkeypatch.setattr(cli_main, "console", Console(width=200, color_system=None))
    monkeypatch.setenv("LOG_LEVEL", "WARNING")


def _invoke(*args, **kwargs):
    return runner.invoke(app, list(args), **kwargs)


def _new(template_id, data, *extra):
    result = _invoke("new", template_id, "--data", json.dumps(data), *extra)
    match = DOC_ID.search(result.output)
    return result, match.group(0) if match else None


class TestTemplateCommands:

    def test_templates(self):
        result = _invoke("templates")
        assert result.exit_code == 0
        for template_id in ("purchase-agreement", "termination-letter", "counter-offer"):
            assert template_id in result.output

    def test_templates_by_category(self):
        result = _invoke("templates", "--category", "termination")
        assert result.exit_code == 0
        assert "termination-letter" in result.output
        assert "counter-offer" not in result.output

    def test_templates_unknown_category(self):
        result = _invoke("templates", "--category", "nonsense")
        assert result.exit_code == 1
        assert "Unknown category" in result.output

    def test_template_fields(self):
        result = _invoke("template", "counter-offer", "--fields")
        assert result.exit_code == 0
        assert "acceptanceType" in result.output
        assert "Buyer Response" in result.output

    def test_template_not_found(self):
        result = _invoke("template", "no-such-form")
        assert result.exit_code == 1
        assert "not found" in result.output


class TestDocumentCommands:

    def test_init(self):
        result = _invoke("init")
        assert result.exit_code == 0
        assert Path(get_settings().database_path).exists()

    def test_new_complete(self, purchase_data):
        result, doc_id = _new("purchase-agreement", purchase_data, "--complete")
        assert result.exit_code == 0
        assert doc_id is not None
        assert "completed" in result.output
        assert "100% complete" in result.output

    def test_new_complete_with_missing_fields(self):
        result, _ = _new("termination-letter", {"sellerName": "Jane Seller"}, "--complete")
        assert result.exit_code == 1
        assert "Fields to fix" in result.output
        assert "buyerName" in result.output

    def test_new_draft_reports_invalid_values(self):
        result, doc_id = _new("termination-letter", {"contractDate": "last spring"})
        assert result.exit_code == 0
        assert doc_id is not None
        assert "valid date" in result.output
        assert "draft" in result.output

    def test_new_from_data_file(self, tmp_path, counter_offer_data):
        data_file = tmp_path / "offer.json"
        data_file.write_text(json.dumps(counter_offer_data), encoding="utf-8")
        result = _invoke("new", "counter-offer", "--data-file", str(data_file), "--complete")
        assert result.exit_code == 0
        assert "completed" in result.output

    def test_new_invalid_json(self):
        result = _invoke("new", "counter-offer", "--data", "{not json")
        assert result.exit_code == 1
        assert "Invalid JSON" in result.output

    def test_new_unknown_template(self):
        result = _invoke("new", "no-such-form")
        assert result.exit_code == 1
        assert "Template not found" in result.output

    def test_new_interactive(self):
        answers = "Jane Seller\nJohn Buyer\n56 Maple Road\n2024-03-15\n\n\n\n"
        result = _invoke("new", "termination-letter", "--interactive", "--complete", input=answers)
        assert result.exit_code == 0, result.output
        assert "Completion: 100%" in result.output

    def test_edit(self):
        _, doc_id = _new("termination-letter", {"sellerName": "Jane Seller"})
        result = _invoke("edit", doc_id, "--set", "buyerName=John Buyer",
                         "--set", "propertyAddress=56 Maple Road",
                         "--set", "contractDate=2024-03-15", "--complete")
        assert result.exit_code == 0
        assert doc_id in result.output
        assert "completed" in result.output

    def test_edit_bad_assignment(self):
        _, doc_id = _new("termination-letter", {"sellerName": "Jane Seller"})
        result = _invoke("edit", doc_id, "--set", "buyerName")
        assert result.exit_code == 1
        assert "name=value" in result.output

    def test_edit_unknown_field(self):
        _, doc_id = _new("termination-letter", {"sellerName": "Jane Seller"})
        result = _invoke("edit", doc_id, "--set", "nickname=JJ")
        assert result.exit_code == 1
        assert "nickname" in result.output

    def test_documents_json(self, purchase_data):
        _, complete_id = _new("purchase-agreement", purchase_data, "--complete")
        _, draft_id = _new("termination-letter", {"sellerName": "Jane Seller"})

        result = _invoke("documents", "--json")
        assert result.exit_code == 0
        assert [d["id"] for d in json.loads(result.stdout)] == [complete_id, draft_id]

        result = _invoke("documents", "--json", "--status", "draft")
        assert [d["id"] for d in json.loads(result.stdout)] == [draft_id]

    def test_documents_empty(self):
        result = _invoke("documents")
        assert result.exit_code == 0
        assert "No documents found" in result.output

    def test_generate(self, purchase_data):
        _, doc_id = _new("purchase-agreement", purchase_data, "--complete")
        result = _invoke("generate", doc_id)
        assert result.exit_code == 0
        pdfs = list(Path(get_settings().output_dir).glob("*.pdf"))
        assert len(pdfs) == 1
        assert pdfs[0].read_bytes().startswith(b"%PDF")

    def test_generate_incomplete(self):
        _, doc_id = _new("termination-letter", {"sellerName": "Jane Seller"})
        result = _invoke("generate", doc_id)
        assert result.exit_code == 1
        assert "25% complete" in result.output

        result = _invoke("generate", doc_id, "--force")
        assert result.exit_code == 0

    def test_render(self, tmp_path, counter_offer_data):
        output = tmp_path / "offer.pdf"
        result = _invoke("render", "counter-offer", "--data", json.dumps(counter_offer_data),
                         "--output", str(output))
        assert result.exit_code == 0
        assert output.read_bytes().startswith(b"%PDF")

    def test_delete(self):
        _, doc_id = _new("counter-offer", {"sellerName": "Jane Seller"})
        assert _invoke("delete", doc_id).exit_code == 0
        result = _invoke("delete", doc_id)
        assert result.exit_code == 1
        assert "Document not found" in result.output
