"""Fuel-card import endpoints: upload, poll, cancel, preview."""

from __future__ import annotations

import shutil
import uuid
from pathlib import Path

from fastapi import APIRouter, File, HTTPException, Request, UploadFile

from haulpay.core.exceptions import ImportReadError, UnsupportedFormatError
from haulpay.core.types import JsonDict
from haulpay.ingest.readers import detect_format, open_reader
from haulpay.ingest.record_parser import RecordParser
from haulpay.services.employee_correlator import EmployeeCorrelator
from haulpay.services.import_runner import ImportJob

router = APIRouter(prefix="/imports", tags=["imports"])


def _save_upload(request: Request, upload: UploadFile) -> Path:
    """Validate the extension, then spool the upload to the upload directory."""
    filename = Path(upload.filename or "").name
    try:
        detect_format(filename)
    except UnsupportedFormatError as exc:
        raise HTTPException(status_code=415, detail=str(exc)) from exc

    upload_dir = Path(request.app.state.settings.api.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    target = upload_dir / f"{uuid.uuid4().hex}_{filename}"
    with target.open("wb") as out:
        shutil.copyfileobj(upload.file, out)
    return target


def _max_errors(request: Request) -> int:
    return request.app.state.settings.imports.max_error_display


def _job_body(job: ImportJob, max_errors: int) -> JsonDict:
    body: JsonDict = {
        "job_id": job.job_id,
        "state": job.state,
        "progress": job.latest_progress.model_dump(mode="json"),
    }
    if job.done():
        exc = job.future.exception()
        if exc is not None:
            body["error"] = str(exc)
        else:
            result = job.result()
            body["result"] = result.model_dump(mode="json")
            body["summary"] = result.summary(max_errors)
    return body


@router.post("", status_code=202)
def start_import(request: Request, file: UploadFile = File(...)) -> dict:
    """Queue an uploaded CSV/XLSX file for background import."""
    path = _save_upload(request, file)
    runner = request.app.state.runner
    job = runner.submit(path, request.app.state.field_map_store.load())
    job.future.add_done_callback(lambda _: path.unlink(missing_ok=True))
    return {"job_id": job.job_id, "state": job.state}


@router.post("/preview")
def preview_import(request: Request, file: UploadFile = File(...), limit: int = 50) -> dict:
    """Parse an upload without storing it, correlating drivers inline."""
    state = request.app.state
    parser = RecordParser(EmployeeCorrelator.from_directory(state.directory))
    path = _save_upload(request, file)
    try:
        with open_reader(path, state.settings.imports) as reader:
            candidates = list(parser.parse(reader, state.field_map_store.load()))
    except ImportReadError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except Exception as exc:
        raise HTTPException(status_code=422, detail=f"Failed to read {file.filename}: {exc}") from exc
    finally:
        path.unlink(missing_ok=True)

    return {
        "total": len(candidates),
        "malformed_rows": parser.malformed_rows,
        "blank_rows": parser.blank_rows,
        "candidates": [c.model_dump(mode="json") for c in candidates[:max(limit, 0)]],
    }


@router.get("/{job_id}")
def get_import(request: Request, job_id: str) -> dict:
    return _job_body(request.app.state.runner.get(job_id), _max_errors(request))


@router.post("/{job_id}/cancel")
def cancel_import(request: Request, job_id: str) -> dict:
    job = request.app.state.runner.get(job_id)
    job.cancel()
    return _job_body(job, _max_errors(request))
