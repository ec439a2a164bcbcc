import numpy as np
import pytest

from gpmotion.gputils import GaussianNoiseModel
from gpmotion.interpolator import (
    GaussianProcessInterpolatorLie,
    GaussianProcessInterpolatorLinear,
)
from gpmotion.lie import Pose2, Pose3, Rot3


def _model(dim, scale=0.01):
    return GaussianNoiseModel.covariance(scale * np.eye(dim))


def _dim(x):
    return x.size if isinstance(x, np.ndarray) else type(x).dimension


def _perturb(x, d):
    return x + d if isinstance(x, np.ndarray) else x.retract(d)


def _local(y0, y):
    return y - y0 if isinstance(y0, np.ndarray) else y0.local_coordinates(y)


def numerical_jacobian(f, x, h):
    y0 = f(x)
    columns = [
        (_local(y0, f(_perturb(x, d))) - _local(y0, f(_perturb(x, -d)))) / (2.0 * h)
        for d in np.eye(_dim(x)) * h
    ]
    return np.column_stack(columns)


def check_jacobians(fn, args, jacobians, h, tol):
    for position, jac in enumerate(jacobians):

        def f(x, position=position):
            replaced = list(args)
            replaced[position] = x
            return fn(*replaced)

        expected = numerical_jacobian(f, args[position], h)
        np.testing.assert_allclose(jac, expected, rtol=0.0, atol=tol)


def _v(*values):
    return np.array(values, dtype=float)


def test_linear_equals():
    dt, tau = 0.1, 0.03
    base1 = GaussianProcessInterpolatorLinear(_model(3), dt, tau)
    base2 = GaussianProcessInterpolatorLinear(_model(3), dt, tau)
    assert base1.equals(base2, 1e-9)
    assert not base1.equals(GaussianProcessInterpolatorLinear(_model(3, 0.02), dt, tau), 1e-9)
    assert not base1.equals(GaussianProcessInterpolatorLinear(_model(3), 0.2, 0.03), 1e-9)
    assert not base1.equals(GaussianProcessInterpolatorLinear(_model(3), 0.1, 0.06), 1e-9)


def test_linear_and_lie_are_not_equal():
    linear = GaussianProcessInterpolatorLinear(_model(3), 0.1, 0.03)
    lie = GaussianProcessInterpolatorLie(_model(3), 0.1, 0.03)
    assert not linear.equals(lie)


LINEAR_CASES = [
    (_v(0, 0, 0), _v(0, 0, 0), _v(0, 0, 0), _v(0, 0, 0), _v(0, 0, 0)),
    (_v(0, 0, 0), _v(10, 0, 0), _v(1, 0, 0), _v(10, 0, 0), _v(0.3, 0, 0)),
    (_v(0, 0, 0), _v(0, 0, 3), _v(0, 0, 0.3), _v(0, 0, 3), _v(0, 0, 0.09)),
    (_v(2, -5, 7), _v(-1, 2, -9), _v(-8, 4, -8), _v(3, -4, 7), None),
]


@pytest.mark.parametrize("p1, v1, p2, v2, expected", LINEAR_CASES)
def test_linear_interpolate_pose(p1, v1, p2, v2, expected):
    base = GaussianProcessInterpolatorLinear(_model(3), 0.1, 0.03)
    actual, jacobians = base.interpolate_pose_with_jacobians(p1, v1, p2, v2)
    np.testing.assert_allclose(actual, base.interpolate_pose(p1, v1, p2, v2), atol=1e-12)
    if expected is not None:
        np.testing.assert_allclose(actual, expected, atol=1e-6)
    check_jacobians(base.interpolate_pose, (p1, v1, p2, v2), jacobians, 1e-6, 1e-6)


@pytest.mark.parametrize("p1, v1, p2, v2, expected", LINEAR_CASES)
def test_linear_interpolate_velocity(p1, v1, p2, v2, expected):
    base = GaussianProcessInterpolatorLinear(_model(3), 0.1, 0.03)
    actual, jacobians = base.interpolate_velocity_with_jacobians(p1, v1, p2, v2)
    if expected is not None:
        np.testing.assert_allclose(actual, v1, atol=1e-6)
    check_jacobians(base.interpolate_velocity, (p1, v1, p2, v2), jacobians, 1e-6, 1e-6)


def test_linear_dim_and_shape_errors():
    base = GaussianProcessInterpolatorLinear(_model(3), 0.1, 0.03)
    assert base.dim() == 3
    with pytest.raises(ValueError):
        base.interpolate_pose(_v(0, 0), _v(0, 0, 0), _v(0, 0, 0), _v(0, 0, 0))


def test_non_positive_delta_t_rejected():
    with pytest.raises(ValueError):
        GaussianProcessInterpolatorLinear(_model(3), 0.0, 0.0)


def test_update_pose_jacobians():
    hpose = np.array([[1.0, 2.0], [0.0, 1.0]])
    hints = [np.eye(2) * k for k in (1.0, 2.0, 3.0, 4.0)]
    result = GaussianProcessInterpolatorLinear.update_pose_jacobians(hpose, *hints)
    assert len(result) == 4
    np.testing.assert_allclose(result[0], hpose)
    np.testing.assert_allclose(result[3], np.array([[4.0, 8.0], [0.0, 4.0]]))


POSE2_CASES = [
    (Pose2(0, 0, 0), _v(0, 0, 0), Pose2(0, 0, 0), _v(0, 0, 0),
     Pose2(0, 0, 0), _v(0, 0, 0), 1e-6, 1e-6),
    (Pose2(0, 0, 0), _v(1, 0, 0), Pose2(0.1, 0, 0), _v(1, 0, 0),
     Pose2(0.03, 0, 0), _v(1, 0, 0), 1e-4, 1e-6),
    (Pose2(0, 0, 0), _v(0, 0, 1), Pose2(0, 0, 0.1), _v(0, 0, 1),
     Pose2(0, 0, 0.03), _v(0, 0, 1), 1e-6, 1e-6),
    (Pose2(3, -8, 2), _v(0.5, 0.9, 0.7), Pose2(-9, 3, 4), _v(0.6, -0.2, 0.8),
     None, None, 1e-6, 1e-6),
]


@pytest.mark.parametrize("p1, v1, p2, v2, expected, _vel, h, tol", POSE2_CASES)
def test_pose2_interpolate_pose(p1, v1, p2, v2, expected, _vel, h, tol):
    base = GaussianProcessInterpolatorLie(_model(3), 0.1, 0.03)
    actual, jacobians = base.interpolate_pose_with_jacobians(p1, v1, p2, v2)
    assert actual.equals(base.interpolate_pose(p1, v1, p2, v2), 1e-12)
    if expected is not None:
        assert actual.equals(expected, 1e-6)
    check_jacobians(base.interpolate_pose, (p1, v1, p2, v2), jacobians, h, tol)


@pytest.mark.parametrize("p1, v1, p2, v2, _pose, expected, h, tol", POSE2_CASES)
def test_pose2_interpolate_velocity(p1, v1, p2, v2, _pose, expected, h, tol):
    base = GaussianProcessInterpolatorLie(_model(3), 0.1, 0.03)
    actual, jacobians = base.interpolate_velocity_with_jacobians(p1, v1, p2, v2)
    np.testing.assert_allclose(actual, base.interpolate_velocity(p1, v1, p2, v2), atol=1e-12)
    if expected is not None:
        np.testing.assert_allclose(actual, expected, atol=1e-6)
    check_jacobians(base.interpolate_velocity, (p1, v1, p2, v2), jacobians, h, tol)


def _pose3(yaw, pitch, roll, x, y, z):
    return Pose3(Rot3.ypr(yaw, pitch, roll), np.array([x, y, z], dtype=float))


POSE3_CASES = [
    (_pose3(0, 0, 0, 0, 0, 0), _v(0, 0, 0, 0, 0, 0), _pose3(0, 0, 0, 0, 0, 0),
     _v(0, 0, 0, 0, 0, 0), _pose3(0, 0, 0, 0, 0, 0), 1e-6, 1e-6),
    (_pose3(0, 0, 0, 0, 0, 0), _v(0, 0, 0, 1, 0, 0), _pose3(0, 0, 0, 0.1, 0, 0),
     _v(0, 0, 0, 1, 0, 0), _pose3(0, 0, 0, 0.03, 0, 0), 1e-4, 1e-6),
    (_pose3(0, 0, 0, 0, 0, 0), _v(0, 0, 1, 0, 0, 0), _pose3(0.1, 0, 0, 0, 0, 0),
     _v(0, 0, 1, 0, 0, 0), _pose3(0.03, 0, 0, 0, 0, 0), 1e-6, 1e-6),
    (_pose3(0.4, -0.8, 0.2, 3, -8, 2), _v(0.1, -0.2, -1.4, 0.5, 0.9, 0.7),
     _pose3(0.1, 0.3, -0.5, -9, 3, 4), _v(0.6, 0.3, -0.9, 0.4, -0.2, 0.8),
     None, 1e-6, 1e-5),
]


@pytest.mark.parametrize("p1, v1, p2, v2, expected, h, tol", POSE3_CASES)
def test_pose3_interpolate_pose(p1, v1, p2, v2, expected, h, tol):
    base = GaussianProcessInterpolatorLie(_model(6), 0.1, 0.03)
    actual, jacobians = base.interpolate_pose_with_jacobians(p1, v1, p2, v2)
    if expected is not None:
        assert actual.equals(expected, 1e-6)
    check_jacobians(base.interpolate_pose, (p1, v1, p2, v2), jacobians, h, tol)


def test_lie_rejects_mismatched_groups():
    base = GaussianProcessInterpolatorLie(_model(3), 0.1, 0.03)
    with pytest.raises(TypeError):
        base.interpolate_pose(Pose2(), _v(0, 0, 0), Pose3(), _v(0, 0, 0))
    with pytest.raises(ValueError):
        base.interpolate_pose(Pose3(), _v(0, 0, 0), Pose3(), _v(0, 0, 0))


def test_lie_equals():
    base1 = GaussianProcessInterpolatorLie(_model(6), 0.1, 0.03)
    assert base1.equals(GaussianProcessInterpolatorLie(_model(6), 0.1, 0.03))
    assert not base1.equals(GaussianProcessInterpolatorLie(_model(3), 0.1, 0.03))
    assert not base1.equals(GaussianProcessInterpolatorLie(_model(6), 0.1, 0.05))