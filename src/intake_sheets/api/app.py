"""Minimal FastAPI application for the Intake Sheets system.

This module exposes a simple HTTP API around IntakeImportPipeline without
changing its internal logic.

Usage (from project root, after installing fastapi and uvicorn):

    uvicorn intake_sheets.api.app:app --reload

Then POST a JSON body ``{"json_content": "..."}`` to /api/intake/process.
The database comes from INTAKE_DATABASE_URL (or the POSTGRES_* variables),
the importer configuration from INTAKE_CONFIG_PATH.
"""

from __future__ import annotations

import os
import threading
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel

from .. import __version__
from ..generators.sheet_exporter import SUPPORTED_FORMATS
from ..parsers.exceptions import SheetNotFoundError
from ..pipeline import IntakeImportPipeline, PipelineConfig


@asynccontextmanager
async def lifespan(_: FastAPI):
    global _pipeline
    yield
    if _pipeline is not None:
        _pipeline.close()
        _pipeline = None


app = FastAPI(title="Intake Sheets API", version=__version__, lifespan=lifespan)

_MEDIA_TYPES = {
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "csv": "text/csv",
}

_pipeline: Optional[IntakeImportPipeline] = None

# Name resolution and sheet creation are separate steps; imports run one at a time.
_import_lock = threading.Lock()


class IntakeRequest(BaseModel):
    json_content: str
    force_new_version: bool = False


class PreviewRequest(BaseModel):
    json_content: str


def _get_bool_from_env(name: str, default: bool) -> bool:
    """Read a boolean flag; "1", "true", "yes", "y" count as true."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y"}


def get_pipeline() -> IntakeImportPipeline:
    """Return the process-wide pipeline, building it on first use."""
    global _pipeline
    if _pipeline is None:
        config = PipelineConfig(
            database_url=os.getenv("INTAKE_DATABASE_URL"),
            config_path=os.getenv("INTAKE_CONFIG_PATH"),
            export_dir=os.getenv("INTAKE_EXPORT_DIR", "data/exports"),
            enable_audit_logging=_get_bool_from_env("INTAKE_AUDIT_LOGGING", True),
        )
        _pipeline = IntakeImportPipeline(config=config)
    return _pipeline


@app.post("/api/intake/process")
def process_intake(
    request: IntakeRequest,
    pipeline: IntakeImportPipeline = Depends(get_pipeline),
) -> JSONResponse:
    """Import an intake template into a new locked schema sheet.

    Import failures are reported in the body with ``success: false`` and a
    200 status, so clients read one response shape.
    """
    with _import_lock:
        result = pipeline.process_intake_json(
            request.json_content,
            force_new_version=request.force_new_version,
        )
    return JSONResponse(status_code=200, content=result.to_dict())


@app.post("/api/intake/preview")
def preview_intake(
    request: PreviewRequest,
    pipeline: IntakeImportPipeline = Depends(get_pipeline),
) -> JSONResponse:
    """Report what an import would produce without writing anything."""
    result = pipeline.preview_json(request.json_content)
    return JSONResponse(status_code=200, content=result.to_dict())


@app.get("/api/schemas")
def list_schemas(pipeline: IntakeImportPipeline = Depends(get_pipeline)) -> JSONResponse:
    return JSONResponse(status_code=200, content={"schemas": pipeline.list_schemas()})


@app.get("/api/schemas/{sheet_name}")
def get_schema(
    sheet_name: str,
    pipeline: IntakeImportPipeline = Depends(get_pipeline),
) -> JSONResponse:
    """Return the grid values and lock state of a schema sheet."""
    try:
        payload = pipeline.get_schema(sheet_name)
    except SheetNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return JSONResponse(status_code=200, content=payload)


@app.post("/api/schemas/{sheet_name}/unlock")
def unlock_schema(
    sheet_name: str,
    pipeline: IntakeImportPipeline = Depends(get_pipeline),
) -> JSONResponse:
    """Remove the protections of a schema sheet for maintenance."""
    try:
        pipeline.unlock_schema(sheet_name)
    except SheetNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return JSONResponse(status_code=200, content={"sheet_name": sheet_name, "locked": False})


@app.get("/api/schemas/{sheet_name}/export")
def export_schema(
    sheet_name: str,
    format: str = "docx",
    pipeline: IntakeImportPipeline = Depends(get_pipeline),
) -> FileResponse:
    """Download a schema sheet as .docx or .csv."""
    if format not in SUPPORTED_FORMATS:
        raise HTTPException(
            status_code=400,
            detail=f"format must be one of {', '.join(SUPPORTED_FORMATS)}",
        )

    try:
        path = Path(pipeline.export_schema(sheet_name, format=format))
    except SheetNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return FileResponse(path=path, filename=path.name, media_type=_MEDIA_TYPES[format])


@app.get("/api/about")
def about(pipeline: IntakeImportPipeline = Depends(get_pipeline)) -> JSONResponse:
    return JSONResponse(status_code=200, content=pipeline.about())
