"""Command-line entry point with a scripted provider."""

import json

import pytest
import yaml

from gemini_structured import cli, frontdoor
from gemini_structured.cli import EXIT_FAILURE, EXIT_OK, EXIT_USAGE, load_request, main
from tests.helpers import ScriptedAdapter, bad_request_error, function_call_response

pytestmark = pytest.mark.integration

HELLO = "Hello, little friend!"


@pytest.fixture
def request_file(tmp_path, greeting_shapes):
    path = tmp_path / "request.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "query": "Greet me",
                "context": ["You are a fox."],
                "select": greeting_shapes,
            }
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def scripted(monkeypatch):
    """Route the real adapter factory to a scripted adapter."""
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    monkeypatch.setenv("GEMINI_RETRY_BASE_DELAY", "0")
    monkeypatch.setenv("GEMINI_RETRY_MAX_DELAY", "0")
    holder = {}

    def _install(script):
        adapter = ScriptedAdapter(script)

        def _factory(api_key):
            holder["api_key"] = api_key
            return adapter

        monkeypatch.setattr(frontdoor, "GoogleGenAIAdapter", _factory)
        return adapter, holder

    return _install


def test_prints_validated_answer(request_file, scripted, capsys):
    adapter, holder = scripted(
        [
            function_call_response("option-0", {"answer": HELLO}),
            function_call_response("option-0", {"answer": HELLO, "remarks": "hi"}),
        ]
    )

    assert main([str(request_file)]) == EXIT_OK

    assert json.loads(capsys.readouterr().out) == {"answer": HELLO, "remarks": "hi"}
    assert holder["api_key"] == "test-key"
    assert adapter.calls[0].config.system_instruction == "You are a fox."


def test_flags_override_environment(request_file, scripted):
    adapter, _ = scripted([function_call_response("option-0", {"answer": HELLO})] * 3)

    assert main([str(request_file), "--max-attempts", "3", "--model", "m-1"]) == EXIT_FAILURE
    assert adapter.call_count == 3
    assert adapter.calls[0].model == "m-1"


def test_exhausted_corrections_exit_with_failure(request_file, scripted, capsys):
    scripted([function_call_response("option-0", {"answer": HELLO})] * 2)

    assert main([str(request_file)]) == EXIT_FAILURE
    assert "CorrectionAttemptsExceededError" in capsys.readouterr().err


def test_provider_error_exits_with_failure(request_file, scripted, capsys):
    scripted([bad_request_error()])

    assert main([str(request_file)]) == EXIT_FAILURE
    assert "ClientError" in capsys.readouterr().err


def test_missing_api_key_exits_with_failure(request_file, capsys):
    assert main([str(request_file)]) == EXIT_FAILURE
    assert "GEMINI_API_KEY" in capsys.readouterr().err


def test_missing_file_is_usage_error(tmp_path, capsys):
    assert main([str(tmp_path / "absent.yaml")]) == EXIT_USAGE
    assert "Cannot read request file" in capsys.readouterr().err


def test_invalid_document_is_usage_error(tmp_path, capsys):
    path = tmp_path / "request.json"
    path.write_text(json.dumps({"query": "Greet me", "select": []}), encoding="utf-8")

    assert main([str(path)]) == EXIT_USAGE
    assert "Invalid request file" in capsys.readouterr().err


def test_load_request_accepts_json(tmp_path):
    path = tmp_path / "request.json"
    path.write_text(
        json.dumps({"query": "q", "select": [{"a": "string"}]}), encoding="utf-8"
    )

    document = load_request(path)

    assert document.context == []
    assert document.select == [{"a": "string"}]


def test_parser_defaults():
    args = cli.build_parser().parse_args(["r.yaml"])
    assert args.log_level == "WARNING"
    assert args.max_attempts is None


def test_blank_query_is_usage_error(tmp_path, capsys):
    path = tmp_path / "request.yaml"
    path.write_text(
        yaml.safe_dump({"query": "   ", "select": [{"a": "string"}]}), encoding="utf-8"
    )

    assert main([str(path)]) == EXIT_USAGE
    err = capsys.readouterr().err
    assert err.startswith("error: Invalid request file")
    assert "query must not be blank" in err


def test_unquoted_yaml_literals_become_predicates(tmp_path):
    path = tmp_path / "request.yaml"
    path.write_text(
        'query: Finish up\nselect:\n  - done: true\n    code: 42\n    ratio: 0.5\n',
        encoding="utf-8",
    )

    document = load_request(path)

    assert document.select == [{"done": "true", "code": "42", "ratio": "0.5"}]


def test_unquoted_boolean_literal_end_to_end(tmp_path, scripted, capsys):
    path = tmp_path / "request.yaml"
    path.write_text("query: Finish up\nselect:\n  - done: true\n", encoding="utf-8")
    scripted([function_call_response("option-0", {"done": True})])

    assert main([str(path)]) == EXIT_OK
    assert json.loads(capsys.readouterr().out) == {"done": True}
