"""Graph analysis result model."""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class GraphAnalysisResult:
    """Derived, read-only snapshot of a dependency graph analysis.
    
    ``execution_order`` lists dependencies before dependents. When cycles
    exist, the nodes in ``cyclic_items`` are appended at the end in input
    order and their relative placement carries no ordering guarantee.
    """
    
    execution_order: List[str]
    critical_path: List[str]
    cycles: List[List[str]]
    parallel_groups: List[List[str]]
    orphan_items: List[str]
    leaf_items: List[str]
    cyclic_items: List[str] = field(default_factory=list)
    
    @property
    def has_cycles(self) -> bool:
        return bool(self.cycles)
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary for JSON export."""
        data = asdict(self)
        data['has_cycles'] = self.has_cycles
        return data
    
    def to_human_readable(self) -> str:
        """Generate human-readable report."""
        lines = [
            "=== Dependency Analysis ===",
            f"Execution order: {' -> '.join(self.execution_order) or '(empty)'}",
            f"Critical path ({max(len(self.critical_path) - 1, 0)} steps): "
            f"{' -> '.join(self.critical_path) or '(none)'}",
            "",
            "Parallel groups:",
        ]
        
        for depth, group in enumerate(self.parallel_groups):
            lines.append(f"  [{depth}] {', '.join(group)}")
        
        lines.extend([
            "",
            f"Orphan items: {', '.join(self.orphan_items) or '(none)'}",
            f"Leaf items: {', '.join(self.leaf_items) or '(none)'}",
        ])
        
        if self.cycles:
            lines.extend(["", "Cycles detected:"])
            for cycle in self.cycles:
                lines.append(f"  {' -> '.join(cycle)}")
            lines.append(f"  Unordered (cyclic) items: {', '.join(self.cyclic_items)}")
        
        lines.append("=" * 50)
        
        return "\n".join(lines)
