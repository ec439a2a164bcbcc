"""Gaussian-process prior helpers: noise models and the Q, Phi, Lambda and Psi matrices."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


def _square(matrix, name: str) -> np.ndarray:
    m = np.asarray(matrix, dtype=float)
    if m.ndim != 2 or m.shape[0] != m.shape[1]:
        raise ValueError(f"{name} must be a square matrix, got shape {m.shape}")
    return m


@dataclass(frozen=True, eq=False)
class GaussianNoiseModel:
    """Gaussian noise model held as an upper-triangular square-root information matrix R."""

    r: np.ndarray

    def __post_init__(self) -> None:
        object.__setattr__(self, "r", _square(self.r, "r").copy())

    @classmethod
    def covariance(cls, cov) -> "GaussianNoiseModel":
        """Build a model from a symmetric positive-definite covariance matrix."""
        cov = _square(cov, "covariance")
        if not np.allclose(cov, cov.T):
            raise ValueError("covariance must be symmetric")
        try:
            information = np.linalg.inv(cov)
            lower = np.linalg.cholesky(information)
        except np.linalg.LinAlgError as exc:
            raise ValueError("covariance must be positive definite") from exc
        return cls(lower.T)

    @property
    def dim(self) -> int:
        """Dimension of the error vector the model applies to."""
        return self.r.shape[0]

    def whiten(self, v) -> np.ndarray:
        """Return R @ v, so that its squared norm is the Mahalanobis distance of v."""
        v = np.asarray(v, dtype=float)
        if v.shape[0] != self.dim:
            raise ValueError(f"expected leading dimension {self.dim}, got {v.shape[0]}")
        return self.r @ v

    def equals(self, other: "GaussianNoiseModel", tol: float = 1e-9) -> bool:
        return (
            isinstance(other, GaussianNoiseModel)
            and self.r.shape == other.r.shape
            and bool(np.allclose(self.r, other.r, rtol=0.0, atol=tol))
        )


def get_qc(qc_model: GaussianNoiseModel) -> np.ndarray:
    """Recover the Qc covariance matrix from a noise model."""
    return np.linalg.inv(qc_model.r.T @ qc_model.r)


def calc_q(qc, tau: float) -> np.ndarray:
    """Covariance Q of the constant-velocity prior over an interval tau."""
    qc = _square(qc, "qc")
    return np.block(
        [
            [tau**3 / 3.0 * qc, tau**2 / 2.0 * qc],
            [tau**2 / 2.0 * qc, tau * qc],
        ]
    )


def calc_q_inv(qc, tau: float) -> np.ndarray:
    """Closed-form inverse of calc_q."""
    qc_inv = np.linalg.inv(_square(qc, "qc"))
    return np.block(
        [
            [12.0 * tau**-3 * qc_inv, -6.0 * tau**-2 * qc_inv],
            [-6.0 * tau**-2 * qc_inv, 4.0 * tau**-1 * qc_inv],
        ]
    )


def calc_phi(dof: int, tau: float) -> np.ndarray:
    """State transition matrix of the constant-velocity model."""
    eye = np.eye(dof)
    return np.block([[eye, tau * eye], [np.zeros((dof, dof)), eye]])


def calc_lambda(qc, delta_t: float, tau: float) -> np.ndarray:
    """Interpolation weight on the first state at time tau inside [0, delta_t]."""
    qc = _square(qc, "qc")
    dof = qc.shape[0]
    return calc_phi(dof, tau) - calc_q(qc, tau) @ calc_phi(dof, delta_t - tau).T @ calc_q_inv(
        qc, delta_t
    ) @ calc_phi(dof, delta_t)


def calc_psi(qc, delta_t: float, tau: float) -> np.ndarray:
    """Interpolation weight on the second state at time tau inside [0, delta_t]."""
    qc = _square(qc, "qc")
    dof = qc.shape[0]
    return calc_q(qc, tau) @ calc_phi(dof, delta_t - tau).T @ calc_q_inv(qc, delta_t)