import numpy as np
import pytest

from splinemesh.model.curve_sample import CurveSample, MeshVertex

from conftest import assert_unit_rows


def make_sample(**overrides) -> CurveSample:
    fields = dict(
        location=np.array([5.0, 0.0, 0.0]),
        tangent=np.array([1.0, 0.0, 0.0]),
        up=np.array([0.0, 1.0, 0.0]),
        scale=np.array([1.0, 1.0]),
        roll=0.0,
        distance_in_curve=5.0,
        time_in_curve=0.25,
    )
    fields.update(overrides)
    return CurveSample(**fields)


def test_lerp_of_a_sample_with_itself_is_the_sample():
    a = make_sample(roll=12.0, scale=np.array([2.0, 0.5]))
    for t in (0.0, 0.3, 1.0):
        assert CurveSample.lerp(a, a, t) == a


def test_lerp_endpoints():
    a = make_sample()
    b = make_sample(
        location=np.array([9.0, 1.0, -2.0]),
        tangent=np.array([0.0, 1.0, 0.0]),
        up=np.array([0.0, 0.0, 1.0]),
        scale=np.array([3.0, 4.0]),
        roll=45.0,
        distance_in_curve=10.0,
        time_in_curve=0.75,
    )
    assert CurveSample.lerp(a, b, 0.0) == a
    assert CurveSample.lerp(a, b, 1.0) == b


def test_lerp_renormalizes_tangent():
    a = make_sample()
    b = make_sample(tangent=np.array([0.0, 1.0, 0.0]))
    mid = CurveSample.lerp(a, b, 0.5)
    assert np.linalg.norm(mid.tangent) == pytest.approx(1.0)
    np.testing.assert_allclose(mid.tangent, np.array([1.0, 1.0, 0.0]) / np.sqrt(2.0))


def test_equality_is_tolerant():
    a = make_sample()
    b = make_sample(location=a.location + 1e-9, roll=1e-9)
    c = make_sample(roll=0.1)
    assert a == b
    assert a != c


def test_rotation_looks_along_tangent():
    sample = make_sample(tangent=np.array([0.0, 0.0, 1.0]))
    rotation = sample.rotation()
    np.testing.assert_allclose(rotation.apply([0.0, 0.0, 1.0]), [0.0, 0.0, 1.0], atol=1e-12)
    np.testing.assert_allclose(rotation.apply([0.0, 1.0, 0.0]), [0.0, 1.0, 0.0], atol=1e-12)


def test_rotation_reorthogonalizes_a_slanted_up():
    sample = make_sample(up=np.array([1.0, 1.0, 0.0]))
    up = sample.rotation().apply([0.0, 1.0, 0.0])
    np.testing.assert_allclose(up, [0.0, 1.0, 0.0], atol=1e-12)


def test_rotation_survives_up_parallel_to_tangent():
    sample = make_sample(up=np.array([1.0, 0.0, 0.0]))
    forward = sample.rotation().apply([0.0, 0.0, 1.0])
    np.testing.assert_allclose(forward, [1.0, 0.0, 0.0], atol=1e-12)


def test_bend_on_straight_x_keeps_cross_section():
    sample = make_sample()
    positions = np.array([[3.0, 1.0, 0.0], [-2.0, 0.0, 1.0], [0.0, 0.5, -0.5]])
    normals = np.array([[0.0, 1.0, 0.0], [0.0, 0.0, 1.0], [1.0, 0.0, 0.0]])

    bent_positions, bent_normals = sample.bend(positions, normals)

    # x is replaced by the sample location
    np.testing.assert_allclose(bent_positions[:, 0], 5.0, atol=1e-12)
    np.testing.assert_allclose(bent_positions[:, 1:], positions[:, 1:], atol=1e-12)
    np.testing.assert_allclose(bent_normals, normals, atol=1e-12)


def test_bend_scales_cross_section_but_not_normals():
    sample = make_sample(scale=np.array([2.0, 3.0]))
    positions = np.array([[0.0, 1.0, 1.0]])
    normals = np.array([[0.0, 0.6, 0.8]])

    bent_positions, bent_normals = sample.bend(positions, normals)

    # y takes scale[1], z takes scale[0]
    np.testing.assert_allclose(bent_positions[0], [5.0, 3.0, 2.0], atol=1e-12)
    assert_unit_rows(bent_normals)


def test_bend_with_roll_keeps_distance_to_curve():
    sample = make_sample(roll=37.0, tangent=np.array([0.0, 0.6, 0.8]))
    positions = np.array([[0.0, 0.0, 0.0], [0.0, 1.0, 0.0], [1.0, 0.3, -0.4]])
    normals = np.array([[0.0, 1.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]])

    bent_positions, bent_normals = sample.bend(positions, normals)

    np.testing.assert_allclose(bent_positions[0], sample.location, atol=1e-12)
    radii = np.linalg.norm(bent_positions - sample.location, axis=1)
    np.testing.assert_allclose(radii, [0.0, 1.0, 0.5], atol=1e-12)
    assert_unit_rows(bent_normals)
    # bent cross-section lies in the plane normal to the tangent
    np.testing.assert_allclose((bent_positions - sample.location) @ sample.tangent, 0.0, atol=1e-12)


def test_get_bent_matches_batch_bend():
    sample = make_sample(roll=20.0, scale=np.array([1.5, 0.5]))
    vertex = MeshVertex(position=np.array([1.0, 2.0, 3.0]), normal=np.array([0.0, 0.0, 1.0]), uv=np.array([0.1, 0.2]))

    bent = sample.get_bent(vertex)
    positions, normals = sample.bend(vertex.position[None, :], vertex.normal[None, :])

    np.testing.assert_allclose(bent.position, positions[0])
    np.testing.assert_allclose(bent.normal, normals[0])
    assert bent.uv is vertex.uv
