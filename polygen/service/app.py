"""FastAPI application entrypoint for polygen service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import uvicorn
from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..errors import TargetNotFound
from ..orchestrator import Orchestrator, RunOutcome, RunState
from ..report import report_to_dict
from ..stores import ReportCache
from ..targets import describe_target


class CompileRequest(BaseModel):
    specification: Dict[str, Any]
    targets: List[str] = Field(default_factory=list)


class RunError(BaseModel):
    kind: str
    message: str
    problems: List[str] = Field(default_factory=list)


class CompileResponse(BaseModel):
    state: str
    exit_code: int
    complete: bool
    fingerprint: Optional[str] = None
    missing: List[str] = Field(default_factory=list)
    error: Optional[RunError] = None
    report: Optional[Dict[str, Any]] = None


class HealthResponse(BaseModel):
    status: str
    targets: int


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def _response(outcome: RunOutcome) -> CompileResponse:
    error = None
    if outcome.error is not None:
        error = RunError(
            kind=outcome.error.kind.value,
            message=outcome.error.message,
            problems=list(outcome.error.problems),
        )
    report = report_to_dict(outcome.report) if outcome.report is not None else None
    return CompileResponse(
        state=outcome.state.value,
        exit_code=outcome.exit_code,
        complete=outcome.complete,
        fingerprint=outcome.report.specification.fingerprint if outcome.report is not None else None,
        missing=list(outcome.missing),
        error=error,
        report=report,
    )


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
    *,
    cache: ReportCache | None = None,
) -> FastAPI:
    """Create the FastAPI application exposing polygen operations."""

    app = FastAPI(title="Polygen Service", version="0.1.0")
    reports = cache or ReportCache(None)
    # Target listings never change at runtime, so one orchestrator's registry serves every request.
    registry = orchestrator_factory().registry

    async def get_orchestrator() -> Orchestrator:
        # Lazy-instantiate per request to keep state predictable.
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", targets=len(registry))

    @app.get("/targets")
    async def list_targets() -> List[Dict[str, Any]]:
        return [describe_target(target) for target in registry.list_targets()]

    @app.get("/targets/{target_id}")
    async def get_target(target_id: str) -> Dict[str, Any]:
        return describe_target(registry.get(target_id))

    @app.post("/compile", response_model=CompileResponse)
    async def compile_specification(
        payload: CompileRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> Any:
        def _run_compile() -> RunOutcome:
            return orchestrator.compile_document(payload.specification, payload.targets or None)

        loop = asyncio.get_running_loop()
        outcome = await loop.run_in_executor(None, _run_compile)
        response = _response(outcome)
        if outcome.state == RunState.FAILED:
            return JSONResponse(status_code=422, content=response.model_dump())
        if response.fingerprint and response.report is not None:
            reports.store(
                response.fingerprint,
                targets=[result.target_id for result in outcome.results],
                report=response.report,
            )
            reports.persist()
        return response

    @app.get("/reports/{fingerprint}")
    async def get_report(fingerprint: str) -> Dict[str, Any]:
        report = reports.get(fingerprint)
        if report is None:
            raise HTTPException(status_code=404, detail=f"No report for specification {fingerprint}")
        return report

    @app.exception_handler(TargetNotFound)
    async def target_not_found_handler(_: Any, exc: TargetNotFound) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000, *, cache_path: Path | None = None
) -> None:  # pragma: no cover - integration path
    app = create_app(cache=ReportCache(cache_path))
    uvicorn.run(app, host=host, port=port)
