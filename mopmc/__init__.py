"""Multi-objective model checking of MDPs: value iteration, achievability and convex queries."""

__version__ = "1.0.0"