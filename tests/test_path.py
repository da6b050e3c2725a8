import numpy as np
import pytest

from splinemesh.model.errors import InvariantViolation
from splinemesh.model.node import Node
from splinemesh.model.path import Path


def test_default_path_has_two_nodes():
    path = Path()
    assert len(path) == 2
    assert len(path.curves) == 1


def test_path_needs_two_nodes(straight_nodes):
    with pytest.raises(InvariantViolation):
        Path(nodes=[straight_nodes[0]])


def test_removing_below_two_nodes_fails_and_leaves_path_unchanged(straight_nodes):
    path = Path(nodes=straight_nodes)
    calls = []
    path.subscribe(calls.append)

    with pytest.raises(InvariantViolation):
        path.remove_node(0)

    assert path.nodes == straight_nodes
    assert path.version == 0
    assert calls == []


def test_remove_node(three_node_path):
    removed = three_node_path.remove_node(1)
    assert removed.position.x == 20.0
    assert len(three_node_path) == 2
    assert three_node_path.length == pytest.approx(40.0)


def test_curves_per_node_pair_and_loop(three_node_path):
    assert len(three_node_path.curves) == 2
    three_node_path.is_loop = True
    curves = three_node_path.curves
    assert len(curves) == 3
    assert curves[-1].node1 == three_node_path[2]
    assert curves[-1].node2 == three_node_path[0]


def test_length_is_sum_of_curves(three_node_path):
    assert three_node_path.length == pytest.approx(sum(c.length for c in three_node_path.curves))
    assert three_node_path.length == pytest.approx(40.0)


def test_curves_are_rebuilt_only_after_a_change(three_node_path):
    first = three_node_path.curves
    assert three_node_path.curves[0] is first[0]

    three_node_path.update_node(2, Node(position=(40.0, 5.0, 0.0), direction=(50.0, 5.0, 0.0)))
    second = three_node_path.curves
    assert second[0] is not first[0]
    np.testing.assert_array_equal(second[1].control_points[3], [40.0, 5.0, 0.0])


def test_listeners_are_called_in_order_after_each_mutation(three_node_path):
    calls = []
    three_node_path.subscribe(lambda p: calls.append(("a", p)))
    three_node_path.subscribe(lambda p: calls.append(("b", p)))

    three_node_path.add_node(Node(position=(60, 0, 0), direction=(70, 0, 0)))
    assert calls == [("a", three_node_path), ("b", three_node_path)]

    three_node_path.insert_node(0, Node(position=(-20, 0, 0), direction=(-10, 0, 0)))
    three_node_path.remove_node(0)
    three_node_path.update_node(0, three_node_path[0].with_changes(roll=10.0))
    assert len(calls) == 8


def test_listener_sees_the_new_geometry(three_node_path):
    seen = []
    three_node_path.subscribe(lambda p: seen.append(p.length))
    three_node_path.add_node(Node(position=(60, 0, 0), direction=(70, 0, 0)))
    assert seen == [pytest.approx(60.0)]


def test_unsubscribe(three_node_path):
    calls = []
    three_node_path.subscribe(calls.append)
    three_node_path.unsubscribe(calls.append)
    three_node_path.add_node(Node(position=(60, 0, 0), direction=(70, 0, 0)))
    assert calls == []


def test_setting_same_loop_flag_does_not_notify(three_node_path):
    calls = []
    three_node_path.subscribe(calls.append)
    three_node_path.is_loop = False
    assert calls == []


def test_locate_scans_curves_and_clamps(three_node_path):
    assert three_node_path.locate(25.0) == (1, pytest.approx(5.0))
    assert three_node_path.locate(-3.0) == (0, 0.0)
    assert three_node_path.locate(500.0) == (1, pytest.approx(20.0))


def test_sample_at_distance_crosses_curves(three_node_path):
    sample = three_node_path.sample_at_distance(30.0)
    np.testing.assert_allclose(sample.location, [30.0, 0.0, 0.0], atol=1e-6)
    assert sample.distance_in_curve == pytest.approx(10.0)


def test_sample_at_time_picks_curve(three_node_path):
    sample = three_node_path.sample_at_time(1.5)
    assert sample == three_node_path.curves[1].sample_at_time(0.5)
    assert three_node_path.sample_at_time(9.0) == three_node_path.curves[1].sample_at_time(1.0)


def test_projection_sample(three_node_path):
    sample = three_node_path.get_projection_sample([33.0, -4.0, 0.0])
    np.testing.assert_allclose(sample.location, [33.0, 0.0, 0.0], atol=1e-9)


def test_duplicate_node_inserts_a_copy_after(three_node_path):
    original = three_node_path[0].with_changes(roll=30.0)
    three_node_path.update_node(0, original)

    clone = three_node_path.duplicate_node(0)

    assert len(three_node_path) == 4
    assert three_node_path[1] is clone
    assert clone.position == original.position
    assert clone.direction == original.direction
    assert clone.roll == 0.0

    last = three_node_path.duplicate_node(3)
    assert three_node_path[4] is last


def test_scale_roll_ramp(three_node_path):
    calls = []
    three_node_path.subscribe(calls.append)

    three_node_path.apply_scale_roll_ramp(start_scale=1.0, end_scale=0.0, start_roll=0.0, end_roll=90.0)

    scales = [node.scale.x for node in three_node_path]
    rolls = [node.roll for node in three_node_path]
    assert scales == pytest.approx([1.0, 0.5, 0.0])
    assert rolls == pytest.approx([0.0, 45.0, 90.0])
    assert len(calls) == 1


def test_node_is_copied_on_change(straight_nodes):
    node = straight_nodes[0]
    changed = node.with_changes(position=(1.0, 2.0, 3.0))
    assert node.position.x == 0.0
    assert changed.position.to_list() == [1.0, 2.0, 3.0]
    assert changed.direction == node.direction


def test_dict_round_trip(three_node_path):
    three_node_path.is_loop = True
    restored = Path.from_dict(three_node_path.to_dict())
    assert restored.nodes == three_node_path.nodes
    assert restored.is_loop


def test_node_handle_on_position_is_degenerate():
    assert Node(position=(1, 2, 3), direction=(1, 2, 3)).has_degenerate_handle
    assert not Node(position=(1, 2, 3), direction=(1, 2, 4)).has_degenerate_handle


def test_locate_nan_reads_as_the_start(three_node_path):
    assert three_node_path.locate(float("nan")) == (0, 0.0)
    assert three_node_path.sample_at_distance(float("nan")) == three_node_path.curves[0].samples[0]


def test_node_distance_between_positions():
    a = Node(position=(1, 2, 3), direction=(0, 0, 0))
    b = Node(position=(4, 6, 3), direction=(0, 0, 0))
    assert a.position.distance_to(b.position) == pytest.approx(5.0)
