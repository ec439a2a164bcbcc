[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gpmotion"
version = "0.1.0"
description = "Gaussian process motion priors, interpolators and robot kinematics on Lie groups"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "gaussian-process",
    "motion-planning",
    "lie-groups",
    "kinematics",
    "robotics",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["gpmotion"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
