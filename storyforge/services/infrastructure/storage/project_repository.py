"""
Project store - file-based persistence for projects, scenes and logs.

Layout under the storage directory:

    <project_id>/project.json   project row plus its scene rows
    <project_id>/logs.jsonl     append-only log entries

Every mutation is a read-modify-write under one re-entrant lock followed by
an atomic file replace, so concurrent writers touching disjoint scene
columns (image branch vs. audio branch) never lose each other's updates.
Readers always receive deep copies.
"""

import copy
import json
import os
import uuid
from dataclasses import fields
from datetime import datetime
from pathlib import Path
from threading import RLock
from typing import Any, Dict, Iterable, List, Optional

from ....core import PipelineInvariantError, ProjectNotFoundError, get_logger
from ....models.entities import LogEntry, Project, Scene
from ....models.status import ACTIVE_STATUSES, ProjectStatus

logger = get_logger(__name__, component="project_store")

_SCENE_FIELDS = {f.name for f in fields(Scene)} - {"id", "project_id", "order"}
_PROJECT_FIELDS = {f.name for f in fields(Project)} - {"id", "scenes", "status", "created_at"}


class ProjectStore:
    """Disk-first store with an in-memory cache of loaded projects."""

    def __init__(self, storage_dir: Optional[Path] = None):
        if storage_dir is None:
            from ....config import PROJECT_DATA_DIR
            storage_dir = PROJECT_DATA_DIR
        self._storage_dir = Path(storage_dir)
        self._storage_dir.mkdir(parents=True, exist_ok=True)

        self._projects: Dict[str, Project] = {}
        self._lock = RLock()

    # ------------------------------------------------------------------ files

    def _project_dir(self, project_id: str) -> Path:
        return self._storage_dir / project_id

    def _project_file(self, project_id: str) -> Path:
        return self._project_dir(project_id) / "project.json"

    def _log_file(self, project_id: str) -> Path:
        return self._project_dir(project_id) / "logs.jsonl"

    def _load_from_disk(self, project_id: str) -> Optional[Project]:
        project_file = self._project_file(project_id)
        if not project_file.exists():
            return None
        try:
            with open(project_file, "r", encoding="utf-8") as f:
                return Project.from_dict(json.load(f))
        except (OSError, ValueError, KeyError) as exc:
            logger.error(
                "Failed to load project",
                extra={"project_id": project_id, "path": str(project_file), "error": str(exc)},
            )
            return None

    def _save(self, project: Project) -> None:
        project_dir = self._project_dir(project.id)
        project_dir.mkdir(parents=True, exist_ok=True)
        target = self._project_file(project.id)
        tmp = target.with_suffix(".json.tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(project.to_dict(), f, indent=2, ensure_ascii=False)
        os.replace(tmp, target)
        self._projects[project.id] = project

    def _require(self, project_id: str) -> Project:
        project = self._projects.get(project_id) or self._load_from_disk(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        self._projects[project_id] = project
        return project

    @staticmethod
    def _touch(project: Project) -> None:
        project.updated_at = datetime.now().isoformat()

    # --------------------------------------------------------------- projects

    def create(self, project: Project) -> Project:
        with self._lock:
            if self._project_file(project.id).exists():
                raise PipelineInvariantError(f"Project already exists: {project.id}")
            self._save(copy.deepcopy(project))
            logger.info("Project created", extra={"project_id": project.id, "slug": project.slug})
            return copy.deepcopy(project)

    def get(self, project_id: str) -> Optional[Project]:
        with self._lock:
            try:
                return copy.deepcopy(self._require(project_id))
            except ProjectNotFoundError:
                return None

    def exists(self, project_id: str) -> bool:
        with self._lock:
            return project_id in self._projects or self._project_file(project_id).exists()

    def slug_taken(self, slug: str) -> bool:
        return any(p.slug == slug for p in self.list_all())

    def list_all(self) -> List[Project]:
        with self._lock:
            ids = sorted(p.name for p in self._storage_dir.iterdir() if (p / "project.json").exists())
            projects = []
            for project_id in ids:
                project = self.get(project_id)
                if project:
                    projects.append(project)
            projects.sort(key=lambda p: p.created_at, reverse=True)
            return projects

    def update_project(self, project_id: str, **changes: Any) -> Project:
        """Set project columns in place. Status has its own guarded method."""
        unknown = set(changes) - _PROJECT_FIELDS
        if unknown:
            raise PipelineInvariantError(f"Unknown project fields: {sorted(unknown)}")
        with self._lock:
            project = self._require(project_id)
            for key, value in changes.items():
                setattr(project, key, value)
            self._touch(project)
            self._save(project)
            return copy.deepcopy(project)

    def set_status(self, project_id: str, status: ProjectStatus, error: Optional[str] = None) -> bool:
        """Move the project along the stage DAG.

        Returns True when the status changed, False when it already held.

        Raises:
            PipelineInvariantError: on a backward or otherwise illegal move
        """
        with self._lock:
            project = self._require(project_id)
            if project.status is status:
                return False
            if not project.status.can_transition_to(status):
                raise PipelineInvariantError(
                    f"Illegal status transition {project.status.value} -> {status.value}"
                )
            project.status = status
            project.error = error if status is ProjectStatus.FAILED else None
            self._touch(project)
            self._save(project)
            return True

    def find_stale(self, older_than: datetime) -> List[Project]:
        """Non-terminal projects whose last update is older than ``older_than``."""
        stale = []
        for project in self.list_all():
            if project.status not in ACTIVE_STATUSES:
                continue
            try:
                updated = datetime.fromisoformat(project.updated_at)
            except ValueError:
                continue
            if updated < older_than:
                stale.append(project)
        return stale

    # ----------------------------------------------------------------- scenes

    def add_scenes(self, project_id: str, narrations: Iterable[str]) -> List[Scene]:
        """Create scene rows ``1..N``. Only legal while the project has none."""
        with self._lock:
            project = self._require(project_id)
            if project.scenes:
                raise PipelineInvariantError(
                    f"Project {project_id} already has {len(project.scenes)} scenes"
                )
            project.scenes = [
                Scene(id=str(uuid.uuid4()), project_id=project_id, order=index, narration=text)
                for index, text in enumerate(narrations, start=1)
            ]
            self._touch(project)
            self._save(project)
            return copy.deepcopy(project.ordered_scenes())

    def update_scene(self, project_id: str, order: int, **changes: Any) -> Scene:
        """Set scene columns in place. Identity and order never change."""
        unknown = set(changes) - _SCENE_FIELDS
        if unknown:
            raise PipelineInvariantError(f"Unknown scene fields: {sorted(unknown)}")
        with self._lock:
            project = self._require(project_id)
            scene = project.scene_by_order(order)
            if scene is None:
                raise PipelineInvariantError(f"Project {project_id} has no scene {order}")
            for key, value in changes.items():
                setattr(scene, key, value)
            self._touch(project)
            self._save(project)
            return copy.deepcopy(scene)

    # ------------------------------------------------------------------- logs

    def append_log(self, entry: LogEntry) -> None:
        with self._lock:
            project_dir = self._project_dir(entry.project_id)
            project_dir.mkdir(parents=True, exist_ok=True)
            with open(self._log_file(entry.project_id), "a", encoding="utf-8") as f:
                f.write(json.dumps(entry.to_dict(), ensure_ascii=False) + "\n")

    def list_logs(self, project_id: str) -> List[LogEntry]:
        with self._lock:
            log_file = self._log_file(project_id)
            if not log_file.exists():
                return []
            entries = []
            with open(log_file, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        entries.append(LogEntry.from_dict(json.loads(line)))
                    except (ValueError, KeyError):
                        logger.warning("Skipping malformed log line", extra={"project_id": project_id})
            return entries


_store_instance: Optional[ProjectStore] = None


def get_project_store() -> ProjectStore:
    """Get the shared ProjectStore instance (singleton pattern)."""
    global _store_instance
    if _store_instance is None:
        _store_instance = ProjectStore()
    return _store_instance
