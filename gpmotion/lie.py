"""Rotation and rigid-body pose groups SO(3), SE(2) and SE(3) with their Jacobians."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import ClassVar

import numpy as np

_NEAR_ZERO = 1e-5


def _skew(w) -> np.ndarray:
    x, y, z = w
    return np.array([[0.0, -z, y], [z, 0.0, -x], [-y, x, 0.0]])


def _vee(m: np.ndarray) -> np.ndarray:
    return np.array([m[2, 1], m[0, 2], m[1, 0]])


def _vector(v, size: int, name: str) -> np.ndarray:
    arr = np.asarray(v, dtype=float).reshape(-1)
    if arr.shape != (size,):
        raise ValueError(f"{name} must have {size} elements, got {arr.size}")
    return arr


def _rot_y(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]])


def _so3_coefficients(theta: float) -> tuple[float, float, float]:
    """Return sin(t)/t, (1-cos t)/t^2 and (t-sin t)/t^3, with series near zero."""
    if theta < _NEAR_ZERO:
        t2 = theta * theta
        return 1.0 - t2 / 6.0, 0.5 - t2 / 24.0, 1.0 / 6.0 - t2 / 120.0
    s, c = math.sin(theta), math.cos(theta)
    return s / theta, (1.0 - c) / theta**2, (theta - s) / theta**3


def _so3_right_jacobian(w: np.ndarray) -> np.ndarray:
    _, a, b = _so3_coefficients(float(np.linalg.norm(w)))
    big_w = _skew(w)
    return np.eye(3) - a * big_w + b * big_w @ big_w


def _se3_q(w: np.ndarray, v: np.ndarray) -> np.ndarray:
    big_v, big_w = _skew(v), _skew(w)
    wv, vw, wvw = big_w @ big_v, big_v @ big_w, big_w @ big_v @ big_w
    ww = big_w @ big_w
    phi = float(np.linalg.norm(w))
    if phi > _NEAR_ZERO:
        s, c = math.sin(phi), math.cos(phi)
        phi2, phi3 = phi * phi, phi**3
        phi4, phi5 = phi**4, phi**5
        c2 = (phi - s) / phi3
        c3 = (1.0 - phi2 / 2.0 - c) / phi4
        c4 = -0.5 * (c3 - 3.0 * (phi - s - phi3 / 6.0) / phi5)
    else:
        c2, c3, c4 = 1.0 / 6.0, -1.0 / 24.0, 1.0 / 120.0
    return (
        -0.5 * big_v
        + c2 * (wv + vw - wvw)
        + c3 * (ww @ big_v + big_v @ ww - 3.0 * wvw)
        + c4 * (wvw @ big_w + big_w @ wvw)
    )


def _se3_right_jacobian(xi: np.ndarray) -> np.ndarray:
    w, v = xi[:3], xi[3:]
    j = _so3_right_jacobian(w)
    return np.block([[j, np.zeros((3, 3))], [_se3_q(w, v), j]])


def _se3_v(w: np.ndarray) -> np.ndarray:
    _, a, b = _so3_coefficients(float(np.linalg.norm(w)))
    big_w = _skew(w)
    return np.eye(3) + a * big_w + b * big_w @ big_w


def _se2_v(w: float) -> np.ndarray:
    if abs(w) < _NEAR_ZERO:
        sw, cw = 1.0 - w * w / 6.0, w / 2.0 - w**3 / 24.0
    else:
        sw, cw = math.sin(w) / w, (1.0 - math.cos(w)) / w
    return np.array([[sw, -cw], [cw, sw]])


def _se2_right_jacobian(xi: np.ndarray) -> np.ndarray:
    v1, v2, w = xi
    if abs(w) < _NEAR_ZERO:
        w2 = w * w
        sw, cw = 1.0 - w2 / 6.0, w / 2.0 - w**3 / 24.0
        a, b = w / 6.0 - w**3 / 120.0, 0.5 - w2 / 24.0
    else:
        s, c = math.sin(w), math.cos(w)
        sw, cw = s / w, (1.0 - c) / w
        a, b = (w - s) / w**2, (1.0 - c) / w**2
    return np.array(
        [
            [sw, cw, a * v1 - b * v2],
            [-cw, sw, b * v1 + a * v2],
            [0.0, 0.0, 1.0],
        ]
    )


@dataclass(frozen=True, eq=False)
class Rot3:
    """A 3D rotation held as an orthonormal 3x3 matrix."""

    matrix: np.ndarray = field(default_factory=lambda: np.eye(3))

    def __post_init__(self) -> None:
        m = np.asarray(self.matrix, dtype=float)
        if m.shape != (3, 3):
            raise ValueError(f"rotation matrix must be 3x3, got shape {m.shape}")
        object.__setattr__(self, "matrix", m.copy())

    @classmethod
    def identity(cls) -> "Rot3":
        return cls(np.eye(3))

    @classmethod
    def rx(cls, angle: float) -> "Rot3":
        c, s = math.cos(angle), math.sin(angle)
        return cls(np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]]))

    @classmethod
    def rz(cls, angle: float) -> "Rot3":
        c, s = math.cos(angle), math.sin(angle)
        return cls(np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]]))

    @classmethod
    def ypr(cls, yaw: float, pitch: float, roll: float) -> "Rot3":
        """Rotation Rz(yaw) * Ry(pitch) * Rx(roll)."""
        return cls(cls.rz(yaw).matrix @ _rot_y(pitch) @ cls.rx(roll).matrix)

    @classmethod
    def expmap(cls, omega) -> "Rot3":
        omega = _vector(omega, 3, "omega")
        a, b, _ = _so3_coefficients(float(np.linalg.norm(omega)))
        big_w = _skew(omega)
        return cls(np.eye(3) + a * big_w + b * big_w @ big_w)

    @classmethod
    def logmap(cls, rot: "Rot3") -> np.ndarray:
        r = rot.matrix
        diagonal_sum = float(np.diag(r).sum())
        cos_t = float(np.clip((diagonal_sum - 1.0) / 2.0, -1.0, 1.0))
        theta = math.acos(cos_t)
        skew_part = _vee(r - r.T)
        if theta < 1e-8:
            return skew_part / 2.0
        if theta < 3.0:
            return theta / (2.0 * math.sin(theta)) * skew_part
        outer = ((r + r.T) / 2.0 - cos_t * np.eye(3)) / (1.0 - cos_t)
        k = int(np.argmax(np.diag(outer)))
        axis = outer[:, k] / math.sqrt(outer[k, k])
        axis /= np.linalg.norm(axis)
        if axis @ skew_part < 0.0:
            axis = -axis
        return theta * axis

    def compose(self, other: "Rot3") -> "Rot3":
        return Rot3(self.matrix @ other.matrix)

    def inverse(self) -> "Rot3":
        return Rot3(self.matrix.T)

    def equals(self, other: "Rot3", tol: float = 1e-9) -> bool:
        return isinstance(other, Rot3) and bool(
            np.allclose(self.matrix, other.matrix, rtol=0.0, atol=tol)
        )


@dataclass(frozen=True)
class Pose2:
    """A planar pose (x, y, theta); tangent vectors are ordered [vx, vy, omega]."""

    x: float = 0.0
    y: float = 0.0
    theta: float = 0.0

    dimension: ClassVar[int] = 3

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))
        angle = float(self.theta)
        object.__setattr__(self, "theta", math.atan2(math.sin(angle), math.cos(angle)))

    @classmethod
    def identity(cls) -> "Pose2":
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def expmap(cls, xi) -> "Pose2":
        xi = _vector(xi, 3, "xi")
        t = _se2_v(xi[2]) @ xi[:2]
        return cls(t[0], t[1], xi[2])

    @classmethod
    def expmap_with_jacobian(cls, xi) -> tuple["Pose2", np.ndarray]:
        xi = _vector(xi, 3, "xi")
        return cls.expmap(xi), _se2_right_jacobian(xi)

    @classmethod
    def logmap(cls, pose: "Pose2") -> np.ndarray:
        w = pose.theta
        v = np.linalg.solve(_se2_v(w), np.array([pose.x, pose.y]))
        return np.array([v[0], v[1], w])

    @classmethod
    def logmap_with_jacobian(cls, pose: "Pose2") -> tuple[np.ndarray, np.ndarray]:
        xi = cls.logmap(pose)
        return xi, np.linalg.inv(_se2_right_jacobian(xi))

    def compose(self, other: "Pose2") -> "Pose2":
        c, s = math.cos(self.theta), math.sin(self.theta)
        return Pose2(
            self.x + c * other.x - s * other.y,
            self.y + s * other.x + c * other.y,
            self.theta + other.theta,
        )

    def compose_with_jacobians(self, other: "Pose2") -> tuple["Pose2", np.ndarray, np.ndarray]:
        return self.compose(other), other.inverse().adjoint_map(), np.eye(3)

    def inverse(self) -> "Pose2":
        c, s = math.cos(self.theta), math.sin(self.theta)
        return Pose2(-(c * self.x + s * self.y), -(-s * self.x + c * self.y), -self.theta)

    def inverse_with_jacobian(self) -> tuple["Pose2", np.ndarray]:
        return self.inverse(), -self.adjoint_map()

    def adjoint_map(self) -> np.ndarray:
        c, s = math.cos(self.theta), math.sin(self.theta)
        return np.array([[c, -s, self.y], [s, c, -self.x], [0.0, 0.0, 1.0]])

    def retract(self, v) -> "Pose2":
        return self.compose(Pose2.expmap(v))

    def local_coordinates(self, other: "Pose2") -> np.ndarray:
        return Pose2.logmap(self.inverse().compose(other))

    def matrix(self) -> np.ndarray:
        c, s = math.cos(self.theta), math.sin(self.theta)
        return np.array([[c, -s, self.x], [s, c, self.y], [0.0, 0.0, 1.0]])

    def equals(self, other: "Pose2", tol: float = 1e-9) -> bool:
        return (
            isinstance(other, Pose2)
            and abs(self.x - other.x) <= tol
            and abs(self.y - other.y) <= tol
            and abs(math.cos(self.theta) - math.cos(other.theta)) <= tol
            and abs(math.sin(self.theta) - math.sin(other.theta)) <= tol
        )


@dataclass(frozen=True, eq=False)
class Pose3:
    """A 3D rigid pose; tangent vectors are ordered [omega, v]."""

    rotation: Rot3 = field(default_factory=Rot3)
    translation: np.ndarray = field(default_factory=lambda: np.zeros(3))

    dimension: ClassVar[int] = 6

    def __post_init__(self) -> None:
        if not isinstance(self.rotation, Rot3):
            raise TypeError("rotation must be a Rot3")
        object.__setattr__(self, "translation", _vector(self.translation, 3, "translation").copy())

    @classmethod
    def identity(cls) -> "Pose3":
        return cls(Rot3.identity(), np.zeros(3))

    @classmethod
    def from_matrix(cls, m) -> "Pose3":
        m = np.asarray(m, dtype=float)
        if m.shape != (4, 4):
            raise ValueError(f"homogeneous matrix must be 4x4, got shape {m.shape}")
        return cls(Rot3(m[:3, :3]), m[:3, 3])

    @classmethod
    def expmap(cls, xi) -> "Pose3":
        xi = _vector(xi, 6, "xi")
        w, v = xi[:3], xi[3:]
        return cls(Rot3.expmap(w), _se3_v(w) @ v)

    @classmethod
    def expmap_with_jacobian(cls, xi) -> tuple["Pose3", np.ndarray]:
        xi = _vector(xi, 6, "xi")
        return cls.expmap(xi), _se3_right_jacobian(xi)

    @classmethod
    def logmap(cls, pose: "Pose3") -> np.ndarray:
        w = Rot3.logmap(pose.rotation)
        v = np.linalg.solve(_se3_v(w), pose.translation)
        return np.concatenate([w, v])

    @classmethod
    def logmap_with_jacobian(cls, pose: "Pose3") -> tuple[np.ndarray, np.ndarray]:
        xi = cls.logmap(pose)
        return xi, np.linalg.inv(_se3_right_jacobian(xi))

    def compose(self, other: "Pose3") -> "Pose3":
        return Pose3(
            self.rotation.compose(other.rotation),
            self.rotation.matrix @ other.translation + self.translation,
        )

    def compose_with_jacobians(self, other: "Pose3") -> tuple["Pose3", np.ndarray, np.ndarray]:
        return self.compose(other), other.inverse().adjoint_map(), np.eye(6)

    def inverse(self) -> "Pose3":
        rt = self.rotation.inverse()
        return Pose3(rt, -(rt.matrix @ self.translation))

    def inverse_with_jacobian(self) -> tuple["Pose3", np.ndarray]:
        return self.inverse(), -self.adjoint_map()

    def adjoint_map(self) -> np.ndarray:
        r = self.rotation.matrix
        return np.block([[r, np.zeros((3, 3))], [_skew(self.translation) @ r, r]])

    def retract(self, v) -> "Pose3":
        return self.compose(Pose3.expmap(v))

    def local_coordinates(self, other: "Pose3") -> np.ndarray:
        return Pose3.logmap(self.inverse().compose(other))

    def matrix(self) -> np.ndarray:
        m = np.eye(4)
        m[:3, :3] = self.rotation.matrix
        m[:3, 3] = self.translation
        return m

    def equals(self, other: "Pose3", tol: float = 1e-9) -> bool:
        return (
            isinstance(other, Pose3)
            and self.rotation.equals(other.rotation, tol)
            and bool(np.allclose(self.translation, other.translation, rtol=0.0, atol=tol))
        )