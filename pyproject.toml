[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mopmc"
version = "1.0.0"
description = "Multi-objective model checking of Markov decision processes with achievability and convex queries"
requires-python = ">=3.10"
keywords = [
    "model checking",
    "markov decision process",
    "multi-objective",
    "convex optimization",
    "value iteration",
    "frank-wolfe",
    "projected gradient",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
]
dependencies = [
    "numpy",
    "scipy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["mopmc"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
