"""Gaussian-process interpolation of poses and velocities between two support states."""

from __future__ import annotations

import numpy as np

from .gputils import GaussianNoiseModel, calc_lambda, calc_psi, get_qc


def _vector(v, size: int, name: str) -> np.ndarray:
    arr = np.asarray(v, dtype=float).reshape(-1)
    if arr.shape != (size,):
        raise ValueError(f"{name} must have {size} elements, got {arr.size}")
    return arr


def _close(a: np.ndarray, b: np.ndarray, tol: float) -> bool:
    return a.shape == b.shape and bool(np.all(np.abs(a - b) <= tol))


def _chain_jacobians(hpose, hints) -> tuple[np.ndarray, ...]:
    hpose = np.asarray(hpose, dtype=float)
    return tuple(hpose @ np.asarray(h, dtype=float) for h in hints)


def _same_interpolator(a, b, tol: float) -> bool:
    return (
        type(b) is type(a)
        and abs(a.delta_t - b.delta_t) < tol
        and abs(a.tau - b.tau) < tol
        and _close(a.qc, b.qc, tol)
        and _close(a.lam, b.lam, tol)
        and _close(a.psi, b.psi, tol)
    )


class _GaussianProcessInterpolator:
    """Lambda and Psi weights of a constant-velocity GP at time tau inside [0, delta_t]."""

    def __init__(self, qc_model: GaussianNoiseModel, delta_t: float, tau: float) -> None:
        if delta_t <= 0.0:
            raise ValueError(f"delta_t must be positive, got {delta_t}")
        self._dof = qc_model.dim
        self.delta_t = float(delta_t)
        self.tau = float(tau)
        self.qc = get_qc(qc_model)
        self.lam = calc_lambda(self.qc, self.delta_t, self.tau)
        self.psi = calc_psi(self.qc, self.delta_t, self.tau)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(dof={self._dof}, "
            f"delta_t={self.delta_t}, tau={self.tau})"
        )


class GaussianProcessInterpolatorLinear(_GaussianProcessInterpolator):
    """Interpolator for states living in a vector space."""

    @staticmethod
    def update_pose_jacobians(hpose, hint1, hint2, hint3, hint4):
        """Chain a Jacobian taken at the interpolated pose through the interpolation Jacobians."""
        return _chain_jacobians(hpose, (hint1, hint2, hint3, hint4))

    def equals(self, other, tol: float = 1e-9) -> bool:
        return _same_interpolator(self, other, tol)

    def dim(self) -> int:
        return self._dof

    def _states(self, pose1, vel1, pose2, vel2) -> tuple[np.ndarray, np.ndarray]:
        n = self._dof
        x1 = np.concatenate([_vector(pose1, n, "pose1"), _vector(vel1, n, "vel1")])
        x2 = np.concatenate([_vector(pose2, n, "pose2"), _vector(vel2, n, "vel2")])
        return x1, x2

    def interpolate_pose(self, pose1, vel1, pose2, vel2) -> np.ndarray:
        x1, x2 = self._states(pose1, vel1, pose2, vel2)
        n = self._dof
        return self.lam[:n] @ x1 + self.psi[:n] @ x2

    def interpolate_pose_with_jacobians(self, pose1, vel1, pose2, vel2):
        """Return the interpolated pose and its Jacobians on (pose1, vel1, pose2, vel2)."""
        n = self._dof
        pose = self.interpolate_pose(pose1, vel1, pose2, vel2)
        jacobians = (
            self.lam[:n, :n].copy(),
            self.lam[:n, n:].copy(),
            self.psi[:n, :n].copy(),
            self.psi[:n, n:].copy(),
        )
        return pose, jacobians

    def interpolate_velocity(self, pose1, vel1, pose2, vel2) -> np.ndarray:
        x1, x2 = self._states(pose1, vel1, pose2, vel2)
        n = self._dof
        return self.lam[n:] @ x1 + self.psi[n:] @ x2

    def interpolate_velocity_with_jacobians(self, pose1, vel1, pose2, vel2):
        """Return the interpolated velocity and its Jacobians on (pose1, vel1, pose2, vel2)."""
        n = self._dof
        vel = self.interpolate_velocity(pose1, vel1, pose2, vel2)
        jacobians = (
            self.lam[n:, :n].copy(),
            self.lam[n:, n:].copy(),
            self.psi[n:, :n].copy(),
            self.psi[n:, n:].copy(),
        )
        return vel, jacobians


class GaussianProcessInterpolatorLie(_GaussianProcessInterpolator):
    """Interpolator for poses on a Lie group such as Pose2 or Pose3."""

    @staticmethod
    def update_pose_jacobians(hpose, hint1, hint2, hint3, hint4):
        """Chain a Jacobian taken at the interpolated pose through the interpolation Jacobians."""
        return _chain_jacobians(hpose, (hint1, hint2, hint3, hint4))

    def equals(self, other, tol: float = 1e-9) -> bool:
        return _same_interpolator(self, other, tol)

    def _check(self, pose1, vel1, pose2, vel2):
        group = type(pose1)
        if type(pose2) is not group:
            raise TypeError("pose1 and pose2 must be of the same group")
        dimension = getattr(group, "dimension", None)
        if dimension != self._dof:
            raise ValueError(f"pose dimension {dimension} does not match dof {self._dof}")
        return group, _vector(vel1, self._dof, "vel1"), _vector(vel2, self._dof, "vel2")

    def _tangent(self, vel1, r, vel2) -> tuple[np.ndarray, np.ndarray]:
        n = self._dof
        r1 = np.concatenate([np.zeros(n), vel1])
        r2 = np.concatenate([r, vel2])
        return r1, r2

    def interpolate_pose(self, pose1, vel1, pose2, vel2):
        group, vel1, vel2 = self._check(pose1, vel1, pose2, vel2)
        n = self._dof
        r = group.logmap(pose1.inverse().compose(pose2))
        r1, r2 = self._tangent(vel1, r, vel2)
        return pose1.compose(group.expmap(self.lam[:n] @ r1 + self.psi[:n] @ r2))

    def interpolate_pose_with_jacobians(self, pose1, vel1, pose2, vel2):
        """Return the interpolated pose and its Jacobians on (pose1, vel1, pose2, vel2)."""
        group, vel1, vel2 = self._check(pose1, vel1, pose2, vel2)
        n = self._dof
        inv1, h_inv = pose1.inverse_with_jacobian()
        rel, h_comp11, h_comp12 = inv1.compose_with_jacobians(pose2)
        r, h_log = group.logmap_with_jacobian(rel)
        r1, r2 = self._tangent(vel1, r, vel2)
        delta, h_exp = group.expmap_with_jacobian(self.lam[:n] @ r1 + self.psi[:n] @ r2)
        pose, h_comp21, h_comp22 = pose1.compose_with_jacobians(delta)
        h_expr = h_comp22 @ h_exp
        psi_pp = self.psi[:n, :n]
        jacobians = (
            h_comp21 + h_expr @ psi_pp @ h_log @ h_comp11 @ h_inv,
            h_expr @ self.lam[:n, n:],
            h_expr @ psi_pp @ h_log @ h_comp12,
            h_expr @ self.psi[:n, n:],
        )
        return pose, jacobians

    def interpolate_velocity(self, pose1, vel1, pose2, vel2) -> np.ndarray:
        group, vel1, vel2 = self._check(pose1, vel1, pose2, vel2)
        n = self._dof
        r = group.logmap(pose1.inverse().compose(pose2))
        r1, r2 = self._tangent(vel1, r, vel2)
        return self.lam[n:] @ r1 + self.psi[n:] @ r2

    def interpolate_velocity_with_jacobians(self, pose1, vel1, pose2, vel2):
        """Return the interpolated velocity and its Jacobians on (pose1, vel1, pose2, vel2)."""
        group, vel1, vel2 = self._check(pose1, vel1, pose2, vel2)
        n = self._dof
        inv1, h_inv = pose1.inverse_with_jacobian()
        rel, h_comp11, h_comp12 = inv1.compose_with_jacobians(pose2)
        r, h_log = group.logmap_with_jacobian(rel)
        r1, r2 = self._tangent(vel1, r, vel2)
        vel = self.lam[n:] @ r1 + self.psi[n:] @ r2
        psi_vp = self.psi[n:, :n]
        jacobians = (
            psi_vp @ h_log @ h_comp11 @ h_inv,
            self.lam[n:, n:].copy(),
            psi_vp @ h_log @ h_comp12,
            self.psi[n:, n:].copy(),
        )
        return vel, jacobians