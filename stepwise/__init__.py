"""
stepwise: publish and verify a step-by-step git history.

Every commit of a tutorial-style history becomes a ``part-*`` branch,
and every step can be checked out and build-verified in order.
"""

__version__ = "0.1.0"
