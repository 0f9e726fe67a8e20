"""Shared fixtures for planning core tests."""

import pytest

from planning_core.estimation.calibrator import EstimationCalibrator
from planning_core.estimation.store import InMemoryEstimationStore
from planning_core.models.work_item import DependencyDeclaration, RelationshipKind, WorkItem
from planning_core.utils.config import get_default_config


def build_item(item_id, title=None, depends_on=(), kind=RelationshipKind.DEPENDS_ON, **kwargs):
    """Work item declaring the same relationship kind to every target."""
    return WorkItem(
        item_id=item_id,
        title=title if title is not None else f"Item {item_id}",
        dependencies=[DependencyDeclaration(target_id=t, kind=kind) for t in depends_on],
        **kwargs,
    )


@pytest.fixture
def make_item():
    return build_item


@pytest.fixture
def config():
    return get_default_config()


@pytest.fixture
def store():
    return InMemoryEstimationStore()


@pytest.fixture
def calibrator(store, config):
    return EstimationCalibrator(store=store, config=config)
