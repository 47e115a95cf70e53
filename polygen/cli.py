"""CLI entrypoints for polygen commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from .config import ConfigError, PolygenConfig, load_config
from .errors import SchemaVersionUnsupported, SpecInvalid, TargetNotFound
from .generators import Generator, TemplateLibrary
from .logging import configure_logging, get_logger
from .models import GenerationResult
from .orchestrator import Orchestrator, RunOutcome
from .report import render_markdown, report_to_json
from .spec import find_structural_errors, load_specification
from .targets import TargetRegistry, describe_target
from .validators import CompilationValidator, discover_validators


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_config_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a .polygen.yml file (defaults to the one in the current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="polygen",
        description="Compile a platform-agnostic application specification into several targets.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write debug logs, tagged with target and worker thread, to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    compile_parser = subparsers.add_parser(
        "compile",
        help="Generate, validate and analyze every selected target.",
    )
    _add_verbose_option(compile_parser, suppress_default=True)
    _add_config_option(compile_parser)
    compile_parser.add_argument("spec", type=Path, help="Specification document (JSON or YAML).")
    compile_parser.add_argument(
        "-t",
        "--target",
        dest="targets",
        action="append",
        default=None,
        help="Target id to compile for; repeat to select several (defaults to all).",
    )
    compile_parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Directory to write each target's generated files into.",
    )
    compile_parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Write the evidence report to this path instead of stdout.",
    )
    compile_parser.add_argument(
        "--format",
        choices=("json", "markdown"),
        default=None,
        help="Evidence report format (defaults to json).",
    )

    targets_parser = subparsers.add_parser("targets", help="List registered compilation targets.")
    _add_verbose_option(targets_parser, suppress_default=True)
    targets_parser.add_argument("--json", action="store_true", help="Emit the catalog as JSON.")

    check_parser = subparsers.add_parser(
        "check",
        help="Load a specification and report structural problems without generating.",
    )
    _add_verbose_option(check_parser, suppress_default=True)
    check_parser.add_argument("spec", type=Path, help="Specification document (JSON or YAML).")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument(
        "--cache",
        type=Path,
        default=None,
        help="JSON file used to persist compiled reports between restarts.",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint for polygen commands; returns the process exit status."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    if args.command == "compile":
        return _run_compile(parser, args)
    if args.command == "targets":
        return _run_targets(bool(args.json))
    if args.command == "check":
        return _run_check(args.spec)
    if args.command == "serve":  # pragma: no cover - integration path
        from .service import run_service

        run_service(host=args.host, port=args.port, cache_path=args.cache)
        return 0
    parser.exit(2, "Unknown command\n")  # pragma: no cover - argparse enforces choices
    return 2  # pragma: no cover


def _run_compile(parser: argparse.ArgumentParser, args: argparse.Namespace) -> int:
    try:
        config = load_config(args.config or Path.cwd())
    except ConfigError as exc:
        parser.exit(2, f"polygen: {exc}\n")

    try:
        orchestrator = _build_orchestrator(config)
    except ValueError as exc:
        parser.exit(2, f"polygen: validation.axes: {exc}\n")
    try:
        outcome = orchestrator.compile_path(args.spec, args.targets)
    except TargetNotFound as exc:
        parser.exit(2, f"polygen: {exc}\n")

    if outcome.report is None:
        error = outcome.error
        message = error.message if error is not None else "compilation failed"
        details = "".join(f"  - {problem}\n" for problem in (error.problems if error else ()))
        sys.stderr.write(f"polygen: {message}\n{details}")
        return outcome.exit_code

    out_dir: Optional[Path] = args.out or config.output.directory
    if out_dir is not None:
        written = sum(_write_bundle(result, out_dir) for result in outcome.results)
        get_logger("cli").info("Wrote %d file(s) under %s", written, out_dir)

    report_format = args.format or config.output.report_format
    text = render_markdown(outcome.report) if report_format == "markdown" else report_to_json(outcome.report) + "\n"
    report_path: Optional[Path] = args.report or config.output.report_path
    if report_path is not None:
        report_path.parent.mkdir(parents=True, exist_ok=True)
        report_path.write_text(text, encoding="utf-8")
        print(f"Report written to {_relativize(report_path)}")
    else:
        sys.stdout.write(text)
    _print_status(outcome)
    return outcome.exit_code


def _build_orchestrator(config: PolygenConfig) -> Orchestrator:
    templates_dirs = [config.templates_dir] if config.templates_dir else None
    validators = discover_validators(config.validation.axes or None)
    return Orchestrator(
        generator=Generator(TemplateLibrary(templates_dirs)),
        validator=CompilationValidator(
            validators, performance_tolerance=config.validation.performance_tolerance
        ),
        config=config.compiler,
    )


def _write_bundle(result: GenerationResult, out_dir: Path) -> int:
    if not result.success:
        return 0
    root = out_dir / result.target_id
    documents: List[tuple[str, str]] = [(artifact.path, artifact.content) for artifact in result.output.files]
    documents.extend((item.path, item.content) for item in result.output.configuration)
    documents.extend((item.path, item.content) for item in result.output.documentation)
    for relative, content in documents:
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return len(documents)


def _print_status(outcome: RunOutcome) -> None:
    summary = outcome.report.summary if outcome.report else None
    if summary is None:
        return
    status = f"{summary.successful}/{summary.total_targets} target(s) succeeded"
    if outcome.missing:
        status += f"; incomplete, missing {', '.join(outcome.missing)}"
    sys.stderr.write(f"polygen: {status}\n")


def _run_targets(as_json: bool) -> int:
    registry = TargetRegistry.default()
    if as_json:
        print(json.dumps([describe_target(target) for target in registry], indent=2))
        return 0
    for target in registry:
        print(f"{target.id:<24} {target.framework.value:<16} {target.language.value:<12} {target.maturity.value}")
    return 0


def _run_check(spec_path: Path) -> int:
    try:
        spec = load_specification(spec_path)
    except (SpecInvalid, SchemaVersionUnsupported) as exc:
        sys.stderr.write(f"polygen: {exc}\n")
        for problem in getattr(exc, "problems", []):
            sys.stderr.write(f"  - {problem}\n")
        return 2
    problems = find_structural_errors(spec)
    if problems:
        print(f"{spec.metadata.name}: {len(problems)} structural problem(s)")
        for problem in problems:
            print(f"  - {problem}")
        return 1
    print(
        f"{spec.metadata.name}: ok ({len(spec.entities)} entities, {len(spec.flows)} flows, "
        f"{len(spec.architecture.components)} components, {len(spec.compliance.rules)} rules)"
    )
    return 0


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
