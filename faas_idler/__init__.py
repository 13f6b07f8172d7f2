"""Scale idle OpenFaaS functions to zero replicas."""

__version__ = "0.1.0"
