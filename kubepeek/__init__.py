"""kubectl-peek: page through large Kubernetes collections a few items at a time."""

__version__ = "0.1.0"
