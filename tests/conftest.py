import numpy as np
import pytest

from splinemesh.model.mesh_primitives import circle_profile, extrude_profile
from splinemesh.model.node import Node
from splinemesh.model.path import Path
from splinemesh.model.source_mesh import SourceMesh


def uniform_line_nodes(length: float) -> tuple[Node, Node]:
    """Two nodes on the x axis with handles at thirds: constant-speed straight curve."""
    return (
        Node(position=(0.0, 0.0, 0.0), direction=(length / 3.0, 0.0, 0.0)),
        Node(position=(length, 0.0, 0.0), direction=(4.0 * length / 3.0, 0.0, 0.0)),
    )


@pytest.fixture
def straight_nodes() -> tuple[Node, Node]:
    """Node A at the origin, node B at (20, 0, 0), both handles 10 ahead on x."""
    return (
        Node(position=(0.0, 0.0, 0.0), direction=(10.0, 0.0, 0.0)),
        Node(position=(20.0, 0.0, 0.0), direction=(30.0, 0.0, 0.0)),
    )


@pytest.fixture
def curved_nodes() -> tuple[Node, Node]:
    return (
        Node(position=(0.0, 0.0, 0.0), direction=(0.0, 0.0, 5.0)),
        Node(position=(10.0, 2.0, 0.0), direction=(10.0, 2.0, -5.0)),
    )


@pytest.fixture
def uniform_path() -> Path:
    return Path(nodes=uniform_line_nodes(12.0))


@pytest.fixture
def three_node_path() -> Path:
    return Path(nodes=[
        Node(position=(0.0, 0.0, 0.0), direction=(10.0, 0.0, 0.0)),
        Node(position=(20.0, 0.0, 0.0), direction=(30.0, 0.0, 0.0)),
        Node(position=(40.0, 0.0, 0.0), direction=(50.0, 0.0, 0.0)),
    ])


@pytest.fixture
def tube():
    return extrude_profile(circle_profile(radius=1.0, n_segments=8), length=12.0, rings=7)


@pytest.fixture
def tube_source(tube) -> SourceMesh:
    return SourceMesh.build(tube)


def assert_unit_rows(vectors, tol=1e-9):
    np.testing.assert_allclose(np.linalg.norm(vectors, axis=1), 1.0, atol=tol)
