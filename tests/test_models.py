"""Tests for the data models."""

from datetime import datetime

import pytest

from planning_core.models.analysis import GraphAnalysisResult
from planning_core.models.estimation import ComplexityBand, EstimationRecord
from planning_core.models.work_item import (
    DependencyDeclaration,
    DependencyEdge,
    EdgeSource,
    RelationshipKind,
    WorkItem,
)


class TestWorkItem:
    """Test cases for WorkItem parsing."""

    def test_from_dict_accepts_bare_ids(self):
        """``id`` and bare-string dependencies are accepted."""
        item = WorkItem.from_dict({
            'id': 7,
            'title': 'Build API',
            'depends_on': ['3', {'id': '4', 'type': 'blocks'}],
        })

        assert item.item_id == '7'
        assert item.dependencies == [
            DependencyDeclaration(target_id='3'),
            DependencyDeclaration(target_id='4', kind=RelationshipKind.BLOCKS),
        ]
        assert item.complexity == 5

    def test_to_dict_round_trip(self):
        """to_dict output parses back to an equal item."""
        item = WorkItem(
            item_id='a',
            title='Deploy',
            description='Ship it',
            complexity=3,
            dependencies=[DependencyDeclaration('b', RelationshipKind.RELATED_TO, 'see also')],
            tags=['ops'],
        )

        assert WorkItem.from_dict(item.to_dict()) == item

    def test_missing_id_rejected(self):
        """An item without an id is an error."""
        with pytest.raises(ValueError):
            WorkItem.from_dict({'title': 'Nameless'})

    def test_declaration_without_target_rejected(self):
        """A dependency mapping needs a target."""
        with pytest.raises(ValueError):
            DependencyDeclaration.from_value({'kind': 'depends_on'})

    def test_text_joins_title_and_description(self):
        """Keyword text covers title and description."""
        assert WorkItem(item_id='a', title='Setup', description='database').text == 'Setup database'


class TestDependencyEdge:
    """Test cases for edges."""

    def test_flags(self):
        """Implicit and ordering flags follow source and kind."""
        edge = DependencyEdge('a', 'b', source=EdgeSource.IMPLICIT)
        related = DependencyEdge('a', 'b', kind=RelationshipKind.RELATED_TO)

        assert edge.is_implicit and edge.is_ordering
        assert not related.is_implicit and not related.is_ordering
        assert edge.to_dict()['from'] == 'a'


class TestEstimationRecord:
    """Test cases for estimation records."""

    def test_round_trip(self):
        """Records survive to_dict/from_dict with timestamps intact."""
        record = EstimationRecord(
            item_id='a',
            band=ComplexityBand.HIGH,
            estimated_points=8,
            actual_points=10.5,
            completed_at=datetime(2024, 2, 1, 17, 30),
            title='Search',
            estimated_at=datetime(2024, 1, 20, 9, 0),
        )

        assert EstimationRecord.from_dict(record.to_dict()) == record

    def test_ratio(self):
        """Pending records have a neutral ratio."""
        pending = EstimationRecord(item_id='a', band=ComplexityBand.LOW, estimated_points=2)

        assert pending.get_ratio() == 1.0
        assert not pending.is_completed


class TestGraphAnalysisResult:
    """Test cases for the analysis report."""

    def test_human_readable_lists_cycles(self):
        """Cycles and cyclic items appear in the report."""
        result = GraphAnalysisResult(
            execution_order=['D', 'A', 'B'],
            critical_path=['D'],
            cycles=[['A', 'B', 'A']],
            parallel_groups=[['D']],
            orphan_items=['D'],
            leaf_items=[],
            cyclic_items=['A', 'B'],
        )

        report = result.to_human_readable()

        assert "Cycles detected:" in report
        assert "A -> B -> A" in report
        assert result.to_dict()['has_cycles'] is True

    def test_human_readable_without_cycles(self):
        """Acyclic reports omit the cycle section."""
        result = GraphAnalysisResult(
            execution_order=['A'],
            critical_path=['A'],
            cycles=[],
            parallel_groups=[['A']],
            orphan_items=['A'],
            leaf_items=[],
        )

        assert "Cycles detected" not in result.to_human_readable()
