"""
Relationship resolver for project associations.

Projects store their strategic issues and strategies as plain id lists (weak
references). The resolver turns those ids into detail objects with at most
one query per association type, for a single project or a whole page.

For every stored id the result is explicit: ``Resolved(id, detail)`` or
``Missing(id)``. ``hydrate`` keeps only the resolved details and leaves the
raw id lists untouched, so callers can spot dangling references by comparing
``len(strategic_issues)`` with ``len(strategic_issues_details)``.

A failing batch fetch never fails the read: it is logged and the project is
returned with empty detail lists.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Sequence, Tuple, Union

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db.models import StrategicIssueModel, StrategyModel
from ..errors import ResolutionError

logger = structlog.get_logger()


@dataclass(frozen=True)
class Resolved:
    id: str
    detail: Dict[str, Any]


@dataclass(frozen=True)
class Missing:
    id: str


Resolution = Union[Resolved, Missing]


@dataclass
class ProjectResolution:
    """Per-id outcome for one project's associations."""

    project_id: str
    strategic_issues: List[Resolution] = field(default_factory=list)
    strategies: List[Resolution] = field(default_factory=list)
    failed: bool = False

    @property
    def strategic_issues_details(self) -> List[Dict[str, Any]]:
        return [r.detail for r in self.strategic_issues if isinstance(r, Resolved)]

    @property
    def strategies_details(self) -> List[Dict[str, Any]]:
        return [r.detail for r in self.strategies if isinstance(r, Resolved)]

    @property
    def missing(self) -> List[str]:
        return [
            r.id
            for r in (*self.strategic_issues, *self.strategies)
            if isinstance(r, Missing)
        ]


def normalize_ids(value: Any) -> List[str]:
    """
    Read a stored association value as a list of ids.

    JSON strings are parsed; strings that are not JSON are split on commas
    (legacy rows). Anything that is not a list of non-empty strings is
    treated as empty.
    """
    if value is None:
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            value = [part.strip() for part in value.split(",") if part.strip()]
    if not isinstance(value, list):
        return []
    if not all(isinstance(item, str) and item.strip() for item in value):
        return []
    return list(value)


def _field(project: Any, name: str) -> Any:
    if isinstance(project, dict):
        return project.get(name)
    return getattr(project, name, None)


def _as_dict(project: Any) -> Dict[str, Any]:
    if isinstance(project, dict):
        return dict(project)
    return project.to_dict()


class RelationshipResolver:
    """Hydrates project association ids from storage."""

    def __init__(self, db: Session):
        self.db = db

    def _fetch_strategic_issues(self, ids: Sequence[str]) -> Dict[str, Dict[str, Any]]:
        if not ids:
            return {}
        rows = (
            self.db.query(
                StrategicIssueModel.id,
                StrategicIssueModel.title,
                StrategicIssueModel.description,
            )
            .filter(StrategicIssueModel.id.in_(ids))
            .all()
        )
        return {
            row.id: {"id": row.id, "title": row.title, "description": row.description}
            for row in rows
        }

    def _fetch_strategies(self, ids: Sequence[str]) -> Dict[str, Dict[str, Any]]:
        if not ids:
            return {}
        rows = (
            self.db.query(
                StrategyModel.id,
                StrategyModel.name,
                StrategyModel.description,
                StrategyModel.strategic_issue_id,
                StrategicIssueModel.title.label("strategic_issue_title"),
            )
            .outerjoin(
                StrategicIssueModel,
                StrategyModel.strategic_issue_id == StrategicIssueModel.id,
            )
            .filter(StrategyModel.id.in_(ids))
            .all()
        )
        return {
            row.id: {
                "id": row.id,
                "name": row.name,
                "description": row.description,
                "strategic_issue_id": row.strategic_issue_id,
                "strategic_issue_title": row.strategic_issue_title,
            }
            for row in rows
        }

    def _fetch(
        self, issue_ids: Iterable[str], strategy_ids: Iterable[str]
    ) -> Tuple[Dict[str, Dict[str, Any]], Dict[str, Dict[str, Any]]]:
        try:
            issues = self._fetch_strategic_issues(sorted(set(issue_ids)))
            strategies = self._fetch_strategies(sorted(set(strategy_ids)))
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise ResolutionError(f"Association lookup failed: {exc}") from exc
        return issues, strategies

    def resolve_many(self, projects: Sequence[Any]) -> List[ProjectResolution]:
        """Resolve a page of projects with one query per association type."""
        stored = [
            (
                _field(project, "id"),
                normalize_ids(_field(project, "strategic_issues")),
                normalize_ids(_field(project, "strategies")),
            )
            for project in projects
        ]

        try:
            issues, strategies = self._fetch(
                (i for _, ids, _ in stored for i in ids),
                (s for _, _, ids in stored for s in ids),
            )
        except ResolutionError as exc:
            logger.warning(
                "Project associations unresolved",
                project_ids=[project_id for project_id, _, _ in stored],
                error=exc.message,
            )
            return [ProjectResolution(project_id, failed=True) for project_id, _, _ in stored]

        def _resolve(ids: List[str], found: Dict[str, Dict[str, Any]]) -> List[Resolution]:
            return [
                Resolved(i, dict(found[i])) if i in found else Missing(i) for i in ids
            ]

        return [
            ProjectResolution(
                project_id=project_id,
                strategic_issues=_resolve(issue_ids, issues),
                strategies=_resolve(strategy_ids, strategies),
            )
            for project_id, issue_ids, strategy_ids in stored
        ]

    def resolve(self, project: Any) -> ProjectResolution:
        """Per-id ``Resolved``/``Missing`` results for one project, in stored order."""
        return self.resolve_many([project])[0]

    def hydrate_many(self, projects: Sequence[Any]) -> List[Dict[str, Any]]:
        """Project dicts with ``strategic_issues_details`` and ``strategies_details``."""
        # Rows are serialized before lookup; a failed lookup expires them
        hydrated = [_as_dict(project) for project in projects]
        for data, resolution in zip(hydrated, self.resolve_many(hydrated)):
            data["strategic_issues_details"] = resolution.strategic_issues_details
            data["strategies_details"] = resolution.strategies_details
        return hydrated

    def hydrate(self, project: Any) -> Dict[str, Any]:
        return self.hydrate_many([project])[0]

