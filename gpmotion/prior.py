"""Four-way constant-velocity Gaussian-process prior factors."""

from __future__ import annotations

from typing import Hashable

import numpy as np

from .gputils import GaussianNoiseModel, calc_phi, calc_q, get_qc


def _vector(v, size: int, name: str) -> np.ndarray:
    arr = np.asarray(v, dtype=float).reshape(-1)
    if arr.shape != (size,):
        raise ValueError(f"{name} must have {size} elements, got {arr.size}")
    return arr


def _whitened_error(noise_model: GaussianNoiseModel, err: np.ndarray) -> float:
    whitened = noise_model.whiten(err)
    return 0.5 * float(whitened @ whitened)


def _same_prior(a, b, tol: float) -> bool:
    return (
        type(b) is type(a)
        and a.keys == b.keys
        and a.noise_model.equals(b.noise_model, tol)
        and abs(a.delta_t - b.delta_t) < tol
    )


class _GaussianProcessPrior:
    """Factor between (pose1, vel1, pose2, vel2) weighted by the GP covariance Q(delta_t)."""

    def __init__(
        self,
        pose_key1: Hashable,
        vel_key1: Hashable,
        pose_key2: Hashable,
        vel_key2: Hashable,
        delta_t: float,
        qc_model: GaussianNoiseModel,
    ) -> None:
        if delta_t <= 0.0:
            raise ValueError(f"delta_t must be positive, got {delta_t}")
        self.keys = (pose_key1, vel_key1, pose_key2, vel_key2)
        self.delta_t = float(delta_t)
        self._dof = qc_model.dim
        self.noise_model = GaussianNoiseModel.covariance(calc_q(get_qc(qc_model), self.delta_t))

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(keys={self.keys}, dof={self._dof}, delta_t={self.delta_t})"
        )


class GaussianProcessPriorLinear(_GaussianProcessPrior):
    """GP prior on states in a vector space."""

    def dim(self) -> int:
        return self._dof

    def size(self) -> int:
        """Number of variables the factor connects."""
        return len(self.keys)

    def equals(self, other, tol: float = 1e-9) -> bool:
        return _same_prior(self, other, tol)

    def error(self, pose1, vel1, pose2, vel2) -> float:
        """Half the squared Mahalanobis norm of the error vector."""
        return _whitened_error(self.noise_model, self.evaluate_error(pose1, vel1, pose2, vel2))

    def evaluate_error(self, pose1, vel1, pose2, vel2) -> np.ndarray:
        n = self._dof
        x1 = np.concatenate([_vector(pose1, n, "pose1"), _vector(vel1, n, "vel1")])
        x2 = np.concatenate([_vector(pose2, n, "pose2"), _vector(vel2, n, "vel2")])
        return calc_phi(n, self.delta_t) @ x1 - x2

    def evaluate_error_with_jacobians(self, pose1, vel1, pose2, vel2):
        """Return the error and its Jacobians on (pose1, vel1, pose2, vel2)."""
        n = self._dof
        eye, zero = np.eye(n), np.zeros((n, n))
        err = self.evaluate_error(pose1, vel1, pose2, vel2)
        jacobians = (
            np.vstack([eye, zero]),
            np.vstack([self.delta_t * eye, eye]),
            np.vstack([-eye, zero]),
            np.vstack([zero, -eye]),
        )
        return err, jacobians


class GaussianProcessPriorLie(_GaussianProcessPrior):
    """GP prior on poses of a Lie group such as Pose2 or Pose3."""

    def size(self) -> int:
        """Number of variables the factor connects."""
        return len(self.keys)

    def equals(self, other, tol: float = 1e-9) -> bool:
        return _same_prior(self, other, tol)

    def error(self, pose1, vel1, pose2, vel2) -> float:
        """Half the squared Mahalanobis norm of the error vector."""
        return _whitened_error(self.noise_model, self.evaluate_error(pose1, vel1, pose2, vel2))

    def _check(self, pose1, vel1, pose2, vel2):
        group = type(pose1)
        if type(pose2) is not group:
            raise TypeError("pose1 and pose2 must be of the same group")
        dimension = getattr(group, "dimension", None)
        if dimension != self._dof:
            raise ValueError(f"pose dimension {dimension} does not match dof {self._dof}")
        return group, _vector(vel1, self._dof, "vel1"), _vector(vel2, self._dof, "vel2")

    def _stack(self, r, vel1, vel2) -> np.ndarray:
        return np.concatenate([r - vel1 * self.delta_t, vel2 - vel1])

    def evaluate_error(self, pose1, vel1, pose2, vel2) -> np.ndarray:
        group, vel1, vel2 = self._check(pose1, vel1, pose2, vel2)
        r = group.logmap(pose1.inverse().compose(pose2))
        return self._stack(r, vel1, vel2)

    def evaluate_error_with_jacobians(self, pose1, vel1, pose2, vel2):
        """Return the error and its Jacobians on (pose1, vel1, pose2, vel2)."""
        group, vel1, vel2 = self._check(pose1, vel1, pose2, vel2)
        n = self._dof
        inv1, h_inv = pose1.inverse_with_jacobian()
        rel, h_comp1, h_comp2 = inv1.compose_with_jacobians(pose2)
        r, h_log = group.logmap_with_jacobian(rel)
        eye, zero = np.eye(n), np.zeros((n, n))
        jacobians = (
            np.vstack([h_log @ h_comp1 @ h_inv, zero]),
            np.vstack([-self.delta_t * eye, -eye]),
            np.vstack([h_log @ h_comp2, zero]),
            np.vstack([zero, eye]),
        )
        return self._stack(r, vel1, vel2), jacobians