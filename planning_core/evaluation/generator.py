"""Synthetic backlog and estimation history generator for evaluation."""

import random
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from ..estimation.calibrator import complexity_band, complexity_to_points
from ..models.estimation import EstimationRecord
from ..models.work_item import DependencyDeclaration, RelationshipKind, WorkItem

# Title templates per stage, earliest stage first
TITLE_TEMPLATES = [
    ('Setup {area} environment', 'Configure infrastructure for {area}.'),
    ('Create {area} database schema', 'Model the {area} tables and migration.'),
    ('Build {area} API endpoint', 'Expose {area} operations over the backend service.'),
    ('Implement {area} UI page', 'Frontend component to manage {area}.'),
    ('Write {area} tests', 'Testing and QA coverage for {area}.'),
    ('Document {area}', 'Update the docs and readme for {area}.'),
    ('Deploy {area}', 'Release {area} to production.'),
]

AREAS = ['billing', 'accounts', 'search', 'reporting', 'notifications', 'onboarding']


class WorkItemGenerator:
    """Generates deterministic work items and estimation histories."""
    
    def __init__(self, seed: int = 42, config: Optional[dict] = None):
        """Initialize generator with seed for reproducibility."""
        self.seed = seed
        self.random = random.Random(seed)
        self.config = config or {}
        self.eval_config = self.config.get('evaluation', {})
    
    def generate_items(self, count: int) -> List[WorkItem]:
        """Generate a backlog whose titles follow typical delivery stages."""
        items = []
        
        for i in range(count):
            item_id = f"item_{i:03d}"
            title, description = self.random.choice(TITLE_TEMPLATES)
            area = self.random.choice(AREAS)
            
            # Some items declare a dependency on an earlier one (create chains)
            dependencies = []
            if i > 0 and self.random.random() < 0.2:
                dep_idx = self.random.randint(0, i - 1)
                dependencies = [
                    DependencyDeclaration(
                        target_id=f"item_{dep_idx:03d}",
                        kind=RelationshipKind.DEPENDS_ON,
                    )
                ]
            
            items.append(WorkItem(
                item_id=item_id,
                title=title.format(area=area),
                description=description.format(area=area),
                complexity=self.random.randint(1, 10),
                dependencies=dependencies,
            ))
        
        return items
    
    def generate_history(
        self,
        count: int,
        start_date: datetime,
        overrun_mean: Optional[Dict[str, float]] = None,
        overrun_std: float = 0.25,
    ) -> List[EstimationRecord]:
        """Generate completed estimation records with per-band overrun."""
        overrun_mean = overrun_mean or {'low': 1.1, 'medium': 1.3, 'high': 1.6}
        records = []
        
        for i in range(count):
            complexity = self.random.randint(1, 10)
            band = complexity_band(complexity)
            estimated = complexity_to_points(complexity)
            
            # Overrun factor from a normal distribution, never below 0.3
            overrun = max(0.3, self.random.gauss(overrun_mean.get(band.value, 1.0), overrun_std))
            estimated_at = start_date + timedelta(days=i)
            
            records.append(EstimationRecord(
                item_id=f"hist_{i:03d}",
                band=band,
                estimated_points=estimated,
                actual_points=round(estimated * overrun, 1),
                completed_at=estimated_at + timedelta(days=self.random.randint(1, 10)),
                title=f"Historical item {i}",
                estimated_at=estimated_at,
            ))
        
        return records
    
    def generate_stream(
        self,
        start_date: datetime,
        item_count: Optional[int] = None,
        history_size: Optional[int] = None,
    ) -> Tuple[List[WorkItem], List[EstimationRecord]]:
        """Generate a backlog together with a completed history."""
        item_count = item_count or self.eval_config.get('item_count', 40)
        history_size = history_size or self.eval_config.get('history_size', 60)
        overrun_mean = self.eval_config.get('overrun_mean')
        overrun_std = self.eval_config.get('overrun_std', 0.25)
        
        items = self.generate_items(item_count)
        history = self.generate_history(history_size, start_date, overrun_mean, overrun_std)
        
        return items, history
