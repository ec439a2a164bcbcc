# gpmotion

Building blocks for trajectory optimisation with Gaussian process (GP)
motion priors under a constant-velocity model, written with numpy.

## Modules

- `gpmotion.gputils`: `GaussianNoiseModel` (built with
  `GaussianNoiseModel.covariance`, with `whiten` and `equals`), `get_qc`,
  and the GP matrices `calc_q`, `calc_q_inv`, `calc_phi`, `calc_lambda` and
  `calc_psi`.
- `gpmotion.lie`: `Rot3`, `Pose2` and `Pose3`. The poses have `expmap`,
  `logmap`, `compose`, `inverse`, `adjoint_map`, `retract`,
  `local_coordinates`, `matrix` and `equals`, and `*_with_jacobian(s)`
  variants of the maps, composition and inversion. `Pose2` tangent vectors
  are ordered `[vx, vy, omega]`, `Pose3` tangent vectors `[omega, v]`.
- `gpmotion.prior`: the four-variable GP prior factors
  `GaussianProcessPriorLinear` (states in a vector space) and
  `GaussianProcessPriorLie` (poses of `Pose2` or `Pose3`). Each gives the
  error vector with `evaluate_error`, its Jacobians with
  `evaluate_error_with_jacobians`, and the weighted scalar cost with `error`.
- `gpmotion.interpolator`: `GaussianProcessInterpolatorLinear` and
  `GaussianProcessInterpolatorLie`, which give the pose and velocity at a
  time `tau` between two states (`interpolate_pose`,
  `interpolate_velocity` and their `*_with_jacobians` variants), and
  `update_pose_jacobians` to chain a Jacobian through the interpolation.
- `gpmotion.arm`: `Arm`, an arm of revolute joints described by
  Denavit–Hartenberg parameters, with `forward_kinematics` and
  `update_base_pose`.
- `gpmotion.point_robot`: `PointRobot`, a planar point robot made of one or
  more coincident links.

`Arm.forward_kinematics` and `PointRobot.forward_kinematics` take joint
positions, optional joint velocities and a `jacobians` flag, and return a
`KinematicsResult` holding `poses`, `velocities` and, when asked for, the
Jacobians `pose_jacobians`, `velocity_pose_jacobians` and
`velocity_jacobians`. Velocity outputs are given only when joint velocities
are passed.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Example

```python
import numpy as np

from gpmotion.gputils import GaussianNoiseModel
from gpmotion.interpolator import GaussianProcessInterpolatorLie
from gpmotion.lie import Pose2

qc_model = GaussianNoiseModel.covariance(0.01 * np.eye(3))
interp = GaussianProcessInterpolatorLie(qc_model, 0.1, 0.03)

pose = interp.interpolate_pose(
    Pose2(0.0, 0.0, 0.0), np.array([1.0, 0.0, 0.0]),
    Pose2(0.1, 0.0, 0.0), np.array([1.0, 0.0, 0.0]),
)
print(pose.equals(Pose2(0.03, 0.0, 0.0), 1e-6))  # True
```

For a GP prior factor between two states:

```python
from gpmotion.prior import GaussianProcessPriorLinear

factor = GaussianProcessPriorLinear("x1", "v1", "x2", "v2", 0.1, qc_model)
err = factor.evaluate_error(
    np.zeros(3), np.array([1.0, 0.0, 0.0]),
    np.array([0.1, 0.0, 0.0]), np.array([1.0, 0.0, 0.0]),
)
# err is a zero vector of length 6
```

Forward kinematics of a two-link planar arm:

```python
from gpmotion.arm import Arm

arm = Arm(2, a=[1.0, 1.0], alpha=[0.0, 0.0], d=[0.0, 0.0])
result = arm.forward_kinematics([0.0, 0.0], jacobians=True)
print(result.poses[-1].translation)  # [2. 0. 0.]
```

The `*_with_jacobians` variants return the value and a tuple of four
Jacobians with respect to `pose1`, `vel1`, `pose2` and `vel2`.

## What it does not do

The package provides factors, interpolators and kinematics only. It has no
factor graph, no optimiser and no collision or obstacle cost; the
`error` and Jacobian methods are meant to be fed to a solver of your own.
Kinematics cover the DH arm and the point robot only; there is no mobile
base or mobile manipulator model. Objects are not serialised.