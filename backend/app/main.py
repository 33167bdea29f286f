# backend/app/main.py
from __future__ import annotations

"""
FastAPI-gateway för Figma → HTML/CSS-exporten.

Kör:
    uvicorn backend.app.main:app --reload
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

# backend.tasks laddar .env vid import
from backend.tasks.codegen import export_figma_file, render_document
from backend.tasks.figma_ir import StructuralError

# ── Logging ───────────────────────────────────────────────────────────────
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("figma-static-export/gateway")

# ── FastAPI + CORS ────────────────────────────────────────────────────────
app = FastAPI(title="Figma static export")
app.add_middleware(
  CORSMiddleware,
  allow_origins=["*"],      # begränsa i prod
  allow_methods=["*"],
  allow_headers=["*"],
)

# ── Typer ─────────────────────────────────────────────────────────────────
class ExportRequest(BaseModel):
  fileKey: str = Field(..., min_length=1, description="Figma-filens nyckel")
  outDir: Optional[str] = Field(None, description="Utkatalog på workern")
  useCache: bool = True

class ExportStart(BaseModel):
  task_id: str

class TaskStatus(BaseModel):
  status: str
  result: Optional[Dict[str, Any]] = None
  error: Optional[str] = None

class RenderResponse(BaseModel):
  html: str
  css: str

# ── Healthcheck ───────────────────────────────────────────────────────────
@app.get("/healthz")
async def healthz() -> Dict[str, str]:
  return {"status": "ok"}

# ── POST /export ──────────────────────────────────────────────────────────
@app.post("/export", response_model=ExportStart)
def start_export(req: ExportRequest) -> Dict[str, Any]:
  task = export_figma_file.delay(file_key=req.fileKey, out_dir=req.outDir, use_cache=req.useCache)
  logger.info("Export queued", extra={"file_key": req.fileKey, "task_id": task.id})
  return {"task_id": task.id}

# ── GET /task/{task_id} ───────────────────────────────────────────────────
@app.get("/task/{task_id}", response_model=TaskStatus)
def task_status(task_id: str) -> Dict[str, Any]:
  result = export_figma_file.AsyncResult(task_id)
  status: str = result.state
  response: Dict[str, Any] = {"status": status}
  if status == "SUCCESS":
    if isinstance(result.result, dict):
      response["result"] = result.result
  elif status == "FAILURE":
    response["error"] = str(result.result)
  return response

# ── POST /render (synkront, rå fil-JSON i body) ──────────────────────────
@app.post("/render", response_model=RenderResponse)
def render(file_json: Dict[str, Any]) -> Dict[str, str]:
  try:
    rendered = render_document(file_json)
  except StructuralError as e:
    raise HTTPException(422, str(e)) from e
  return {"html": rendered.html, "css": rendered.css}
