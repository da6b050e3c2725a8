import pytest

from splinemesh.model.io import IOManager
from splinemesh.model.node import Node
from splinemesh.model.path import Path


@pytest.fixture
def authored_path() -> Path:
    return Path(
        nodes=[
            Node(position=(0, 0, 0), direction=(1, 2, 0), up=(0, 0, 1), scale=(2.0, 0.5), roll=10.0),
            Node(position=(5, 1, 0), direction=(6, 1, 1)),
            Node(position=(9, 0, 3), direction=(9, 0, 5), roll=-45.0),
        ],
        is_loop=True,
    )


def test_hdf5_round_trip(tmp_path, authored_path):
    filepath = str(tmp_path / "path.h5")
    IOManager.save_path(authored_path, filepath)

    loaded = IOManager.load_path(filepath)

    assert loaded.nodes == authored_path.nodes
    assert loaded.is_loop is True
    assert loaded.length == pytest.approx(authored_path.length)


def test_loading_a_non_hdf5_file_fails(tmp_path):
    filepath = tmp_path / "not_a_path.h5"
    filepath.write_text("hello")
    with pytest.raises(ValueError):
        IOManager.load_path(str(filepath))


def test_json_round_trip(authored_path):
    restored = IOManager.path_from_json(IOManager.path_to_json(authored_path))
    assert restored.nodes == authored_path.nodes
    assert restored.is_loop
