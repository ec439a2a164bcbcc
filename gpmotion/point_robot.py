"""Point robot moving in the plane, represented by one or more coincident links."""

from __future__ import annotations

import numpy as np

from .arm import KinematicsResult
from .lie import Pose3, Rot3


def _vector(v, size: int, name: str) -> np.ndarray:
    arr = np.asarray(v, dtype=float).reshape(-1)
    if arr.shape != (size,):
        raise ValueError(f"{name} must have {size} elements, got {arr.size}")
    return arr


class PointRobot:
    """Robot whose first two configuration coordinates are its x, y position."""

    def __init__(self, dof: int, nr_links: int) -> None:
        if dof < 2:
            raise ValueError(f"dof must be at least 2, got {dof}")
        if nr_links < 1:
            raise ValueError(f"nr_links must be at least 1, got {nr_links}")
        self._dof = int(dof)
        self._nr_links = int(nr_links)

    def dof(self) -> int:
        return self._dof

    def nr_links(self) -> int:
        return self._nr_links

    def forward_kinematics(self, jp, jv=None, jacobians: bool = False) -> KinematicsResult:
        """Map the configuration to a pose (and velocity, given ``jv``) for every link."""
        n = self._dof
        jp = _vector(jp, n, "jp")
        if jv is not None:
            jv = _vector(jv, n, "jv")

        poses = [
            Pose3(Rot3.identity(), np.array([jp[0], jp[1], 0.0])) for _ in range(self._nr_links)
        ]
        velocities = None
        if jv is not None:
            velocities = [np.array([jv[0], jv[1], 0.0]) for _ in range(self._nr_links)]

        if not jacobians:
            return KinematicsResult(poses=poses, velocities=velocities)

        pose_jac = np.zeros((6, n))
        pose_jac[3, 0] = 1.0
        pose_jac[4, 1] = 1.0
        vel_jac = np.zeros((3, n))
        vel_jac[:2, :2] = np.eye(2)
        links = range(self._nr_links)
        return KinematicsResult(
            poses=poses,
            velocities=velocities,
            pose_jacobians=[pose_jac.copy() for _ in links],
            velocity_pose_jacobians=[np.zeros((3, n)) for _ in links],
            velocity_jacobians=[vel_jac.copy() for _ in links],
        )

    def __repr__(self) -> str:
        return f"PointRobot(dof={self._dof}, nr_links={self._nr_links})"