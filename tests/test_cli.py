"""CLI parser and command behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from polygen.cli import _build_parser, main
from tests._fixtures.spec_builder import SpecBuilder, todo_spec, user_spec


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "targets"])
    assert args.verbose is True
    assert args.command == "targets"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["check", "spec.yaml", "--verbose"])
    assert args.verbose is True
    assert args.command == "check"
    assert args.spec == Path("spec.yaml")


def test_cli_collects_repeated_targets() -> None:
    parser = _build_parser()
    args = parser.parse_args(["compile", "spec.yaml", "-t", "web-react", "--target", "backend-java"])
    assert args.targets == ["web-react", "backend-java"]
    assert args.format is None
    assert args.out is None


def test_cli_rejects_unknown_report_format() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["compile", "spec.yaml", "--format", "html"])


def test_targets_command_lists_catalog(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["targets"]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 8
    assert lines[0].startswith("web-react")


def test_targets_command_emits_json(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["targets", "--json"]) == 0

    catalog = json.loads(capsys.readouterr().out)
    assert [item["id"] for item in catalog][:2] == ["web-react", "web-vue"]
    assert catalog[0]["framework"] == "react"


def test_check_command_reports_sound_specification(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    spec_path = todo_spec().write(tmp_path / "todo.yaml")

    assert main(["check", str(spec_path)]) == 0

    assert capsys.readouterr().out.strip() == "Todo App: ok (2 entities, 1 flows, 2 components, 2 rules)"


def test_check_command_lists_structural_problems(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    spec_path = (
        SpecBuilder()
        .entity("user", [{"id": "id", "type": "uuid"}], relationships=[{"name": "team", "targetEntity": "X"}])
        .write(tmp_path / "broken.json")
    )

    assert main(["check", str(spec_path)]) == 1

    out = capsys.readouterr().out
    assert "1 structural problem(s)" in out
    assert "references unknown entity 'X'" in out


def test_check_command_rejects_unsupported_version(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    spec_path = user_spec().version("9.0.0").write(tmp_path / "future.yaml")

    assert main(["check", str(spec_path)]) == 2

    assert "not supported" in capsys.readouterr().err


def test_compile_command_writes_report_and_bundle(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    spec_path = user_spec().write(tmp_path / "users.yaml")
    out_dir = tmp_path / "generated"
    report_path = tmp_path / "reports" / "evidence.json"

    exit_code = main(
        [
            "compile",
            str(spec_path),
            "--config",
            str(tmp_path),
            "-t",
            "web-react",
            "-t",
            "backend-python",
            "--out",
            str(out_dir),
            "--report",
            str(report_path),
        ]
    )

    assert exit_code == 0
    report = json.loads(report_path.read_text(encoding="utf-8"))
    assert [item["target_id"] for item in report["targets"]] == ["web-react", "backend-python"]
    assert report["complete"] is True
    assert (out_dir / "web-react").is_dir()
    assert (out_dir / "backend-python").is_dir()
    assert any(path.suffix == ".py" for path in (out_dir / "backend-python").rglob("*"))
    captured = capsys.readouterr()
    assert "Report written to" in captured.out
    assert "2/2 target(s) succeeded" in captured.err


def test_compile_command_prints_markdown_to_stdout(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    spec_path = user_spec().write(tmp_path / "users.json")

    exit_code = main(
        ["compile", str(spec_path), "--config", str(tmp_path), "-t", "backend-nodejs", "--format", "markdown"]
    )

    assert exit_code == 0
    assert capsys.readouterr().out.startswith("# Compilation evidence for Users")


def test_compile_command_uses_config_defaults(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (tmp_path / ".polygen.yml").write_text(
        "compiler:\n  targets: [web-vue]\noutput:\n  report: evidence.md\n  format: markdown\n",
        encoding="utf-8",
    )
    spec_path = user_spec().write(tmp_path / "users.yaml")

    assert main(["compile", str(spec_path), "--config", str(tmp_path)]) == 0

    markdown = (tmp_path / "evidence.md").read_text(encoding="utf-8")
    assert "| `web-vue` |" in markdown
    assert "| `web-react` |" not in markdown


def test_compile_command_fails_on_unsupported_version(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    spec_path = user_spec().version("9.0.0").write(tmp_path / "future.yaml")

    assert main(["compile", str(spec_path), "--config", str(tmp_path)]) == 2

    assert "not supported" in capsys.readouterr().err


def test_compile_command_exits_on_unknown_target(tmp_path: Path) -> None:
    spec_path = user_spec().write(tmp_path / "users.yaml")

    with pytest.raises(SystemExit) as excinfo:
        main(["compile", str(spec_path), "--config", str(tmp_path), "-t", "desktop-qt"])

    assert excinfo.value.code == 2


def test_compile_command_rejects_unknown_validation_axis(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (tmp_path / ".polygen.yml").write_text("validation:\n  axes: [syntax, spelling]\n", encoding="utf-8")
    spec_path = user_spec().write(tmp_path / "users.yaml")

    with pytest.raises(SystemExit) as excinfo:
        main(["compile", str(spec_path), "--config", str(tmp_path), "-t", "web-vue"])

    assert excinfo.value.code == 2
    assert "Unknown validators requested: spelling" in capsys.readouterr().err


def test_log_file_records_the_run(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    spec_path = user_spec().write(tmp_path / "users.yaml")
    log_file = tmp_path / "run.log"

    exit_code = main(
        ["--log-file", str(log_file), "compile", str(spec_path), "--config", str(tmp_path), "-t", "web-vue"]
    )

    assert exit_code == 0
    text = log_file.read_text(encoding="utf-8")
    assert "INFO polygen.orchestrator [MainThread]: Compiling Users for 1 target(s)" in text
    assert "Run state generating -> validating" in text
