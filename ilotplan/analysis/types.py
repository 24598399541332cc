"""Records exchanged with the project / analysis store."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..layout.types import LayoutConfiguration


PENDING = "pending"
RUNNING = "running"
COMPLETED = "completed"
FAILED = "failed"
TERMINAL_STATUSES = (COMPLETED, FAILED)


def _new_id() -> str:
    return str(uuid.uuid4())[:8]


def _parse_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    return value


@dataclass
class Project:
    """A drawing and its raw entities."""

    id: str = field(default_factory=_new_id)
    name: str = ""
    description: str = ""
    entities: List[Dict[str, Any]] = field(default_factory=list)
    source_file: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "entities": self.entities,
            "source_file": self.source_file,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Project":
        return cls(
            id=data.get("id", _new_id()),
            name=data.get("name", ""),
            description=data.get("description", ""),
            entities=list(data.get("entities", [])),
            source_file=data.get("source_file"),
            created_at=_parse_datetime(data.get("created_at")) or datetime.now(),
        )


@dataclass
class ConfigurationRecord:
    """A named layout configuration stored for a project."""

    id: str = field(default_factory=_new_id)
    project_id: str = ""
    name: str = ""
    layout: LayoutConfiguration = field(default_factory=LayoutConfiguration)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "name": self.name,
            **self.layout.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ConfigurationRecord":
        return cls(
            id=data.get("id", _new_id()),
            project_id=data.get("project_id", ""),
            name=data.get("name", ""),
            layout=LayoutConfiguration.from_dict(data),
        )


@dataclass
class Analysis:
    """Status and result of one analysis run."""

    id: str = field(default_factory=_new_id)
    project_id: str = ""
    configuration_id: str = ""
    status: str = PENDING  # "pending", "running", "completed", "failed"
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    @property
    def is_complete(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def total_ilots(self) -> int:
        return (self.result or {}).get("totalIlots", 0)

    @property
    def coverage(self) -> float:
        return (self.result or {}).get("coverage", 0.0)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "configuration_id": self.configuration_id,
            "status": self.status,
            "result": self.result,
            "error": self.error,
            "total_ilots": self.total_ilots,
            "coverage": self.coverage,
            "created_at": self.created_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Analysis":
        return cls(
            id=data.get("id", _new_id()),
            project_id=data.get("project_id", ""),
            configuration_id=data.get("configuration_id", ""),
            status=data.get("status", PENDING),
            result=data.get("result"),
            error=data.get("error"),
            created_at=_parse_datetime(data.get("created_at")) or datetime.now(),
            completed_at=_parse_datetime(data.get("completed_at")),
        )
