"""Serial manipulator described by Denavit-Hartenberg parameters, with forward kinematics."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .lie import Pose3


def _vector(v, size: int, name: str) -> np.ndarray:
    arr = np.asarray(v, dtype=float).reshape(-1)
    if arr.shape != (size,):
        raise ValueError(f"{name} must have {size} elements, got {arr.size}")
    return arr


def _skew(w) -> np.ndarray:
    x, y, z = w
    return np.array([[0.0, -z, y], [z, 0.0, -x], [-y, x, 0.0]])


def _translation(x: float, y: float, z: float) -> np.ndarray:
    m = np.eye(4)
    m[:3, 3] = (x, y, z)
    return m


def _rot_x(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    m = np.eye(4)
    m[1:3, 1:3] = [[c, -s], [s, c]]
    return m


def _rot_z(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    m = np.eye(4)
    m[:2, :2] = [[c, -s], [s, c]]
    return m


def _jv_column(hoi: np.ndarray, hoj: np.ndarray) -> np.ndarray:
    """Linear-velocity Jacobian column of link i for a revolute joint about frame j's z axis."""
    return _skew(hoj[:3, 2]) @ (hoi[:3, 3] - hoj[:3, 3])


def _djv_column(hoi, hoj, dhoi, dhoj) -> np.ndarray:
    """Derivative of _jv_column given the derivatives of both frames."""
    return _skew(hoj[:3, 2]) @ (dhoi[:3, 3] - dhoj[:3, 3]) + _skew(dhoj[:3, 2]) @ (
        hoi[:3, 3] - hoj[:3, 3]
    )


@dataclass(frozen=True)
class KinematicsResult:
    """Workspace poses and linear velocities of each link, with optional Jacobians.

    ``pose_jacobians[i]`` is 6 x dof, ``velocity_pose_jacobians[i]`` and
    ``velocity_jacobians[i]`` are 3 x dof; entries absent from a call are None.
    """

    poses: list
    velocities: list | None = None
    pose_jacobians: list | None = None
    velocity_pose_jacobians: list | None = None
    velocity_jacobians: list | None = None


class Arm:
    """Arm of revolute joints given by DH parameters, without any physical body model."""

    def __init__(self, dof: int, a, alpha, d, base_pose: Pose3 | None = None, theta_bias=None):
        if dof < 1:
            raise ValueError(f"dof must be at least 1, got {dof}")
        self._dof = int(dof)
        self.a = _vector(a, self._dof, "a")
        self.alpha = _vector(alpha, self._dof, "alpha")
        self.d = _vector(d, self._dof, "d")
        self.base_pose = Pose3.identity() if base_pose is None else base_pose
        self.theta_bias = (
            np.zeros(self._dof)
            if theta_bias is None
            else _vector(theta_bias, self._dof, "theta_bias")
        )
        self._link_notheta = [
            _translation(0.0, 0.0, di) @ _translation(ai, 0.0, 0.0) @ _rot_x(al)
            for ai, al, di in zip(self.a, self.alpha, self.d)
        ]

    def dof(self) -> int:
        return self._dof

    def nr_links(self) -> int:
        return self._dof

    def update_base_pose(self, pose: Pose3) -> None:
        """Replace the pose of the arm base in the workspace."""
        self.base_pose = pose

    def _h(self, i: int, theta: float) -> np.ndarray:
        return _rot_z(theta + self.theta_bias[i]) @ self._link_notheta[i]

    def _dh(self, i: int, theta: float) -> np.ndarray:
        angle = theta + self.theta_bias[i]
        c, s = math.cos(angle), math.sin(angle)
        d_rot = np.zeros((4, 4))
        d_rot[:2, :2] = [[-s, -c], [c, -s]]
        return d_rot @ self._link_notheta[i]

    def forward_kinematics(self, jp, jv=None, jacobians: bool = False) -> KinematicsResult:
        """Map joint positions (and optional velocities) to link poses and velocities.

        Velocity outputs and velocity Jacobians are given only when ``jv`` is passed.
        """
        n = self._dof
        jp = _vector(jp, n, "jp")
        if jv is not None:
            jv = _vector(jv, n, "jv")

        ho = [self.base_pose.matrix()]
        for i, q in enumerate(jp):
            ho.append(ho[-1] @ self._h(i, q))
        poses = [Pose3.from_matrix(m) for m in ho[1:]]

        jvel = None
        velocities = None
        if jv is not None:
            jvel = []
            for i in range(1, n + 1):
                jac = np.zeros((3, n))
                for j in range(i):
                    jac[:, j] = _jv_column(ho[i], ho[j])
                jvel.append(jac)
            velocities = [jac @ jv for jac in jvel]

        if not jacobians:
            return KinematicsResult(poses=poses, velocities=velocities)

        dh = [self._dh(i, q) for i, q in enumerate(jp)]
        ho_inv = [np.linalg.inv(m) for m in ho]
        # dho[i][j]: derivative of frame i+1 with respect to joint j, zero for j > i
        dho = [
            [
                ho[j] @ dh[j] @ ho_inv[j + 1] @ ho[i + 1] if i > j else ho[j] @ dh[j]
                for j in range(i + 1)
            ]
            for i in range(n)
        ]
        zero4 = np.zeros((4, 4))

        pose_jacobians = []
        for i, pose in enumerate(poses):
            jac = np.zeros((6, n))
            inv_pose = pose.inverse().matrix()
            for j in range(i + 1):
                sym = inv_pose @ dho[i][j]
                jac[:3, j] = (sym[2, 1], sym[0, 2], sym[1, 0])
                jac[3:, j] = sym[:3, 3]
            pose_jacobians.append(jac)

        velocity_pose_jacobians = None
        velocity_jacobians = None
        if jv is not None:
            velocity_pose_jacobians = []
            for i in range(n):
                jac = np.zeros((3, n))
                for j in range(i + 1):
                    d_ji = np.zeros((3, n))
                    d_ji[:, 0] = _djv_column(ho[i + 1], ho[0], dho[i][j], zero4)
                    for k in range(1, i + 1):
                        dhoj = dho[k - 1][j] if k - 1 >= j else zero4
                        d_ji[:, k] = _djv_column(ho[i + 1], ho[k], dho[i][j], dhoj)
                    jac[:, j] = d_ji @ jv
                velocity_pose_jacobians.append(jac)
            velocity_jacobians = [jac.copy() for jac in jvel]

        return KinematicsResult(
            poses=poses,
            velocities=velocities,
            pose_jacobians=pose_jacobians,
            velocity_pose_jacobians=velocity_pose_jacobians,
            velocity_jacobians=velocity_jacobians,
        )

    def __repr__(self) -> str:
        return f"Arm(dof={self._dof})"