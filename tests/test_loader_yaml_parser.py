"""Tests for the request parser with key positions."""

from pathlib import Path

import pytest

from evaldesk.loader.yaml_parser import RequestParseError, parse_request_file, parse_request_source


class TestParseRequestSource:
    """Tests for parse_request_source function."""

    def test_returns_data_and_positions(self):
        source = "name: demo\nmetrics:\n  - name: bleu\n"
        data, positions = parse_request_source(source)
        assert data == {"name": "demo", "metrics": [{"name": "bleu"}]}
        assert positions["name"] == (1, 1)
        assert positions["metrics"] == (2, 1)

    def test_list_items_addressed_by_index(self):
        source = (
            "prompts:\n"
            "  - id: p1\n"
            "    text: one\n"
            "  - id: p2\n"
            "    text: two\n"
        )
        _, positions = parse_request_source(source)
        assert positions["prompts.0.id"] == (2, 5)
        assert positions["prompts.1.text"] == (5, 5)

    def test_nested_mappings(self):
        source = "models:\n  - id: m1\n    parameters:\n      temperature: 0.5\n"
        _, positions = parse_request_source(source)
        assert positions["models.0.parameters.temperature"][0] == 4

    def test_json_input(self):
        data, positions = parse_request_source('{"name": "demo",\n "prompts": []}')
        assert data == {"name": "demo", "prompts": []}
        assert positions["prompts"][0] == 2

    def test_syntax_error_has_position(self):
        with pytest.raises(RequestParseError) as exc_info:
            parse_request_source("name: [unclosed\nother: 1\n", filename="bad.yaml")
        err = exc_info.value
        assert err.filename == "bad.yaml"
        assert err.line is not None

    @pytest.mark.parametrize("source", ["", "- just\n- a list\n", "plain scalar"])
    def test_non_mapping_returns_none(self, source: str):
        assert parse_request_source(source) == (None, {})


class TestParseRequestFile:
    def test_include_relative_to_file(self, tmp_path: Path):
        (tmp_path / "prompts.yaml").write_text("- id: p1\n  text: included\n")
        request = tmp_path / "request.yaml"
        request.write_text("name: demo\nprompts: !include prompts.yaml\n")

        data, _ = parse_request_file(request)
        assert data["prompts"] == [{"id": "p1", "text": "included"}]

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            parse_request_file(tmp_path / "nope.yaml")
