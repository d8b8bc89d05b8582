import json
from pathlib import Path

from gobl_validator.cli import main


def stub_path(name):
    repo_root = Path(__file__).resolve().parents[1]
    return str(repo_root / "tests" / "stubs" / f"{name}.json")


def test_valid_document_prints_ok(capsys):
    assert main([stub_path("valid-invoice")]) == 0
    assert capsys.readouterr().out.strip() == "OK"


def test_violation_prints_report(capsys):
    assert main([stub_path("invalid-invoice-bad-currency")]) == 1

    out = capsys.readouterr().out
    assert json.loads(out) == {"/currency": ['The value "EURO" is not a valid option']}


def test_raw_flag_prints_failure_tree(capsys):
    assert main([stub_path("invalid-invoice-bad-currency"), "--raw"]) == 1

    tree = json.loads(capsys.readouterr().out)
    assert tree["keyword"] == "$ref"
    assert len(tree["children"][0]["children"]) > 10


def test_as_flag_selects_root_schema(capsys):
    assert main([stub_path("valid-invoice"), "--as", "envelope"]) == 1
    assert "/" in json.loads(capsys.readouterr().out)


def test_input_errors_exit_2(tmp_path, capsys):
    bad = tmp_path / "bad.json"
    bad.write_text("not json", encoding="utf-8")

    assert main([str(bad)]) == 2
    assert "Invalid JSON" in capsys.readouterr().err
    assert main([str(tmp_path / "missing.json")]) == 2


def test_utf8_bom_is_accepted(tmp_path, capsys):
    doc = tmp_path / "bom.json"
    doc.write_bytes(b"\xef\xbb\xbf" + Path(stub_path("valid-invoice")).read_bytes())

    assert main([str(doc)]) == 0
    assert capsys.readouterr().out.strip() == "OK"


def test_invalid_utf8_exits_2(tmp_path, capsys):
    doc = tmp_path / "latin.json"
    doc.write_bytes(b'{"$schema": "\xff\xfe"}')

    assert main([str(doc)]) == 2
    assert "Invalid JSON" in capsys.readouterr().err


def test_missing_schema_bundle_exits_2(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("GOBL_SCHEMAS_PATH", str(tmp_path))

    assert main([stub_path("valid-invoice")]) == 2
    assert "https://gobl.org/draft-0/bill/invoice" in capsys.readouterr().err
