"""
File-backed store for faculty, panels, projects and marking schemas.

Each context lives in its own directory under ``CONTEXTS_DIR``::

    <slug>/context.json          {"school": ..., "department": ...}
    <slug>/faculty.json          [Faculty, ...]
    <slug>/panels.json           [Panel, ...]
    <slug>/projects.json         [Project, ...]
    <slug>/marking_schema.yaml   MarkingSchema (yaml, yml or json)

The store is the only collaborator the engines talk to. Mutations are
serialised with a re-entrant lock.
"""

from __future__ import annotations

import json
import logging
import threading
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import ValidationError

from .config import CONTEXTS_DIR
from .errors import NotFound
from .models.records import (
    Context,
    Faculty,
    GuideProjects,
    MarkingSchema,
    Panel,
    PanelProjects,
    Project,
)

logger = logging.getLogger("uvicorn.error")

CONTEXT_FILE = "context.json"
FACULTY_FILE = "faculty.json"
PANELS_FILE = "panels.json"
PROJECTS_FILE = "projects.json"
SCHEMA_CANDIDATES = ("marking_schema.yaml", "marking_schema.yml", "marking_schema.json")


def _read_json(path: Path, default: Any) -> Any:
    if not path.exists():
        return default
    return json.loads(path.read_text(encoding="utf-8"))


def _write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


class ContextStore:
    def __init__(self, root: Optional[Path] = None) -> None:
        self.root = Path(root) if root is not None else CONTEXTS_DIR
        self.root.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Contexts
    # ------------------------------------------------------------------

    def context_dir(self, context: Context) -> Path:
        return self.root / context.slug

    def ensure_context(self, context: Context) -> Path:
        path = self.context_dir(context)
        with self._lock:
            path.mkdir(parents=True, exist_ok=True)
            _write_json(path / CONTEXT_FILE, context.model_dump())
        return path

    def list_contexts(self) -> List[Context]:
        contexts = []
        for path in sorted(self.root.iterdir()):
            marker = path / CONTEXT_FILE
            if not path.is_dir() or not marker.exists():
                continue
            try:
                contexts.append(Context.model_validate(_read_json(marker, {})))
            except (ValueError, ValidationError) as exc:
                logger.warning(f"Ignoring unreadable context {path.name}: {exc}")
        contexts.sort(key=lambda ctx: (ctx.school, ctx.department))
        return contexts

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def fetch_faculty(self, context: Context) -> List[Faculty]:
        rows = _read_json(self.context_dir(context) / FACULTY_FILE, [])
        return [Faculty.model_validate(row) for row in rows]

    def fetch_panels(self, context: Context) -> List[Panel]:
        rows = _read_json(self.context_dir(context) / PANELS_FILE, [])
        return [Panel.model_validate(row) for row in rows]

    def fetch_projects(self, context: Context) -> List[Project]:
        rows = _read_json(self.context_dir(context) / PROJECTS_FILE, [])
        return [Project.model_validate(row) for row in rows]

    def fetch_panel_projects(self, context: Context) -> List[PanelProjects]:
        projects = self.fetch_projects(context)
        by_panel: Dict[str, List[Project]] = {}
        for project in projects:
            if project.panel_id:
                by_panel.setdefault(project.panel_id, []).append(project)
        return [
            PanelProjects(panel_id=panel.panel_id, projects=by_panel.get(panel.panel_id, []))
            for panel in self.fetch_panels(context)
        ]

    def fetch_guide_projects(self, context: Context) -> List[GuideProjects]:
        projects = self.fetch_projects(context)
        return [
            GuideProjects(
                faculty=faculty,
                guided_projects=[p for p in projects if p.guide_id == faculty.id],
            )
            for faculty in self.fetch_faculty(context)
        ]

    def fetch_marking_schema(self, school: str, department: str) -> Optional[MarkingSchema]:
        context_dir = self.context_dir(Context(school=school, department=department))
        for name in SCHEMA_CANDIDATES:
            path = context_dir / name
            if not path.exists():
                continue
            try:
                with path.open("r", encoding="utf-8") as handle:
                    if path.suffix == ".json":
                        data = json.load(handle)
                    else:
                        data = yaml.safe_load(handle) or {}
                data.setdefault("school", school)
                data.setdefault("department", department)
                return MarkingSchema.model_validate(data)
            except (OSError, ValueError, AttributeError, yaml.YAMLError, ValidationError) as exc:
                logger.warning(f"Failed to parse marking schema {path}: {exc}")
                return None
        return None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    @staticmethod
    def new_panel_id() -> str:
        return uuid.uuid4().hex[:12]

    def insert_panel(self, context: Context, panel: Panel) -> Panel:
        with self._lock:
            panels = self.fetch_panels(context)
            panels.append(panel)
            self._save_panels(context, panels)
        return panel

    def delete_panel(self, context: Context, panel_id: str) -> Tuple[Panel, List[str]]:
        """Delete a panel and release every project bound to it."""
        with self._lock:
            panels = self.fetch_panels(context)
            removed = next((p for p in panels if p.panel_id == panel_id), None)
            if removed is None:
                raise NotFound("panel", panel_id)
            self._save_panels(context, [p for p in panels if p.panel_id != panel_id])

            projects = self.fetch_projects(context)
            released = []
            for project in projects:
                if project.panel_id == panel_id:
                    project.panel_id = None
                    released.append(project.project_id)
            if released:
                self.save_projects(context, projects)
        return removed, released

    def update_project_panel(self, context: Context, project_id: str, panel_id: Optional[str]) -> Project:
        with self._lock:
            projects = self.fetch_projects(context)
            target = next((p for p in projects if p.project_id == project_id), None)
            if target is None:
                raise NotFound("project", project_id)
            target.panel_id = panel_id
            self.save_projects(context, projects)
        return target

    def update_project_panels(self, context: Context, bindings: Dict[str, str]) -> None:
        """Apply several project -> panel bindings in one write."""
        if not bindings:
            return
        with self._lock:
            projects = self.fetch_projects(context)
            for project in projects:
                if project.project_id in bindings:
                    project.panel_id = bindings[project.project_id]
            self.save_projects(context, projects)

    # ------------------------------------------------------------------
    # Bulk writers (seeding and imports)
    # ------------------------------------------------------------------

    def save_faculty(self, context: Context, faculty: List[Faculty]) -> None:
        with self._lock:
            self.ensure_context(context)
            _write_json(
                self.context_dir(context) / FACULTY_FILE,
                [row.model_dump(mode="json") for row in faculty],
            )

    def save_projects(self, context: Context, projects: List[Project]) -> None:
        with self._lock:
            self.ensure_context(context)
            _write_json(
                self.context_dir(context) / PROJECTS_FILE,
                [row.model_dump(mode="json") for row in projects],
            )

    def save_marking_schema(self, schema: MarkingSchema) -> Path:
        context = Context(school=schema.school, department=schema.department)
        with self._lock:
            context_dir = self.ensure_context(context)
            for name in SCHEMA_CANDIDATES:
                (context_dir / name).unlink(missing_ok=True)
            path = context_dir / SCHEMA_CANDIDATES[0]
            with path.open("w", encoding="utf-8") as handle:
                yaml.safe_dump(schema.model_dump(mode="json", by_alias=True), handle, sort_keys=False)
        return path

    def _save_panels(self, context: Context, panels: List[Panel]) -> None:
        self.ensure_context(context)
        _write_json(
            self.context_dir(context) / PANELS_FILE,
            [row.model_dump(mode="json") for row in panels],
        )


_store: Optional[ContextStore] = None


def get_store() -> ContextStore:
    """Get or create the store singleton."""
    global _store
    if _store is None:
        _store = ContextStore()
    return _store


__all__ = ["ContextStore", "get_store"]
