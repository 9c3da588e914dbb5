from __future__ import annotations

import os
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from . import __version__
from .assignment import auto_assign_all, set_project_panel, teams_for_panel
from .board_builder import ANY_STATUS, build_panel_board
from .config import ALL_REVIEWS
from .errors import (
    ConflictError,
    DuplicatePanel,
    FacultyAlreadyAssigned,
    InvalidSelection,
    NotFound,
    OperationInProgress,
    OperationTimeout,
    PanelServiceError,
)
from .models.records import Context
from .operations import bulk_guard
from .panel_formation import auto_create_panels, available_faculty, create_panel, remove_panel
from .report import generate_report, render_csv, render_text
from .schemas import (
    AssignRequest,
    AutoAssignRequest,
    AutoCreateRequest,
    CreatePanelRequest,
)
from .store import ContextStore, get_store

app = FastAPI(title="Capstone Panels API", version=__version__)

ERROR_STATUS = {
    InvalidSelection: 400,
    NotFound: 404,
    DuplicatePanel: 409,
    FacultyAlreadyAssigned: 409,
    ConflictError: 409,
    OperationInProgress: 409,
    OperationTimeout: 504,
}


def _unique(seq: list[str]) -> list[str]:
    seen = set()
    result = []
    for item in seq:
        if item in seen:
            continue
        seen.add(item)
        result.append(item)
    return result


def _parse_origins(value: str | None) -> list[str]:
    if not value:
        return []
    return [entry.strip() for entry in value.split(",") if entry.strip()]


def _resolve_allowed_origins() -> list[str]:
    explicit = _parse_origins(os.getenv("ALLOWED_ORIGINS"))
    if explicit:
        return _unique(explicit)
    default_origins = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]
    return _unique(default_origins + _parse_origins(os.getenv("FRONTEND_HOSTS")))


app.add_middleware(
    CORSMiddleware,
    allow_origins=_resolve_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PanelServiceError)
async def panel_service_error_handler(request: Request, exc: PanelServiceError) -> JSONResponse:
    status = next((code for kind, code in ERROR_STATUS.items() if isinstance(exc, kind)), 500)
    return JSONResponse(status_code=status, content={"detail": exc.message, "code": exc.code})


def store_dependency() -> ContextStore:
    return get_store()


def context_dependency(
    school: str = Query(..., min_length=1),
    department: str = Query(..., min_length=1),
) -> Context:
    return Context(school=school, department=department)


@app.get("/health")
def health_check():
    return {"status": "healthy", "service": "capstone-panels", "version": __version__}


@app.get("/api/contexts")
def list_contexts(store: ContextStore = Depends(store_dependency)):
    return [ctx.model_dump() for ctx in store.list_contexts()]


@app.get("/api/faculty")
def list_faculty(
    context: Context = Depends(context_dependency),
    store: ContextStore = Depends(store_dependency),
):
    return [f.model_dump(mode="json") for f in store.fetch_faculty(context)]


@app.get("/api/faculty/available")
def list_available_faculty(
    context: Context = Depends(context_dependency),
    store: ContextStore = Depends(store_dependency),
):
    return [f.model_dump(mode="json") for f in available_faculty(store, context)]


@app.get("/api/panels")
def read_panels(
    context: Context = Depends(context_dependency),
    review: str = ALL_REVIEWS,
    mark_filter: str = ANY_STATUS,
    store: ContextStore = Depends(store_dependency),
):
    board = build_panel_board(store, context, review_selection=review, mark_filter=mark_filter)
    return board.model_dump(mode="json")


@app.post("/api/panels", status_code=201)
def create_panel_manually(req: CreatePanelRequest, store: ContextStore = Depends(store_dependency)):
    panel = create_panel(store, req.context, req.faculty1_id, req.faculty2_id, venue=req.venue)
    return {"message": "Panel created successfully", "data": panel.model_dump(mode="json")}


@app.delete("/api/panels/{panel_id}")
def delete_panel(
    panel_id: str,
    context: Context = Depends(context_dependency),
    store: ContextStore = Depends(store_dependency),
):
    removed = remove_panel(store, context, panel_id)
    return {
        "message": "Panel deleted successfully and removed from associated projects",
        "data": removed.model_dump(mode="json"),
    }


@app.post("/api/panels/auto-create")
def auto_create(req: AutoCreateRequest, store: ContextStore = Depends(store_dependency)):
    context = req.context
    existing = store.fetch_panels(context)
    if existing and not req.force_additional:
        raise HTTPException(
            status_code=409,
            detail={
                "code": "confirmation_required",
                "message": f"{len(existing)} panel(s) already exist; resend with force_additional to pair the remaining faculty",
            },
        )
    result = bulk_guard.run(
        context, "auto-create", lambda: auto_create_panels(store, context, req.force_additional)
    )
    return result.model_dump(mode="json")


@app.get("/api/panels/{panel_id}/available-teams")
def available_teams(
    panel_id: str,
    context: Context = Depends(context_dependency),
    store: ContextStore = Depends(store_dependency),
):
    return teams_for_panel(store, context, panel_id).model_dump(mode="json")


@app.post("/api/projects/assign")
def assign(req: AssignRequest, store: ContextStore = Depends(store_dependency)):
    outcome = set_project_panel(store, req.context, req.panel_id, req.project_id)
    message = "Panel assigned successfully" if outcome.panel_id else "Panel removed from project successfully"
    return {"message": message, "data": outcome.model_dump(mode="json")}


@app.post("/api/projects/auto-assign")
def auto_assign(req: AutoAssignRequest, store: ContextStore = Depends(store_dependency)):
    context = req.context
    result = bulk_guard.run(
        context,
        "auto-assign",
        lambda: auto_assign_all(store, context, reserve=req.reserve, prefer_specialization=req.prefer_specialization),
    )
    return result.model_dump(mode="json")


@app.get("/api/reports/panel-filter")
def panel_filter_report(
    fmt: str = Query("text", alias="format"),
    school: Optional[str] = None,
    department: Optional[str] = None,
    store: ContextStore = Depends(store_dependency),
):
    fmt = fmt.lower()
    if fmt not in ("text", "csv"):
        raise HTTPException(status_code=400, detail="format must be 'text' or 'csv'")
    contexts = None
    if school and department:
        contexts = [Context(school=school, department=department)]
    report = generate_report(store, contexts)
    if fmt == "csv":
        return Response(content=render_csv(report), media_type="text/csv")
    return PlainTextResponse(render_text(report))


@app.get("/api/operations")
def read_operations():
    return {key: record.operation for key, record in bulk_guard.in_flight().items()}
