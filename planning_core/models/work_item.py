"""Work item and dependency data models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class RelationshipKind(str, Enum):
    """Kind of a declared relationship between two work items."""
    
    BLOCKS = "blocks"
    DEPENDS_ON = "depends_on"
    RELATED_TO = "related_to"


class EdgeSource(str, Enum):
    """Where a dependency edge came from."""
    
    EXPLICIT = "explicit"
    IMPLICIT = "implicit"


@dataclass(frozen=True)
class DependencyDeclaration:
    """A relationship declared directly on a work item."""
    
    target_id: str
    kind: RelationshipKind = RelationshipKind.DEPENDS_ON
    description: Optional[str] = None
    
    @classmethod
    def from_value(cls, value: Any) -> "DependencyDeclaration":
        """Build from a bare target id or a mapping."""
        if isinstance(value, DependencyDeclaration):
            return value
        if isinstance(value, str):
            return cls(target_id=value)
        target_id = value.get('target_id', value.get('id'))
        if not target_id:
            raise ValueError(f"Dependency declaration has no target id: {value!r}")
        return cls(
            target_id=str(target_id),
            kind=RelationshipKind(value.get('kind', value.get('type', 'depends_on'))),
            description=value.get('description'),
        )


@dataclass
class WorkItem:
    """Represents a unit of planning (task or backlog entry)."""
    
    item_id: str
    title: str
    description: str = ""
    complexity: int = 5
    dependencies: List[DependencyDeclaration] = field(default_factory=list)
    status: str = "todo"
    tags: List[str] = field(default_factory=list)
    
    @property
    def text(self) -> str:
        """Combined title and description used for keyword matching."""
        return f"{self.title} {self.description or ''}".strip()
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'id': self.item_id,
            'title': self.title,
            'description': self.description,
            'complexity': self.complexity,
            'dependencies': [
                {
                    'target_id': dep.target_id,
                    'kind': dep.kind.value,
                    'description': dep.description,
                }
                for dep in self.dependencies
            ],
            'status': self.status,
            'tags': list(self.tags),
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkItem":
        """Create from dictionary representation (``id`` or ``item_id``)."""
        item_id = data.get('item_id', data.get('id'))
        if item_id is None:
            raise ValueError(f"Work item has no id: {data!r}")
        return cls(
            item_id=str(item_id),
            title=data.get('title', ''),
            description=data.get('description') or '',
            complexity=int(data.get('complexity', 5)),
            dependencies=[
                DependencyDeclaration.from_value(dep)
                for dep in data.get('dependencies', data.get('depends_on', [])) or []
            ],
            status=data.get('status', 'todo'),
            tags=list(data.get('tags', [])),
        )


@dataclass(frozen=True)
class DependencyEdge:
    """Directed relation: ``to_id`` must complete before (or informs) ``from_id``."""
    
    from_id: str
    to_id: str
    kind: RelationshipKind = RelationshipKind.DEPENDS_ON
    source: EdgeSource = EdgeSource.EXPLICIT
    strength: float = 1.0
    pattern: Optional[str] = None
    reason: str = ""
    
    @property
    def is_implicit(self) -> bool:
        """True when the edge was inferred from text."""
        return self.source == EdgeSource.IMPLICIT
    
    @property
    def is_ordering(self) -> bool:
        """True when the edge constrains execution order."""
        return self.kind != RelationshipKind.RELATED_TO
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'from': self.from_id,
            'to': self.to_id,
            'kind': self.kind.value,
            'source': self.source.value,
            'strength': self.strength,
            'pattern': self.pattern,
            'reason': self.reason,
        }
