"""GitOps backend — pipelines manifest and cluster resource correlation."""

__version__ = "0.1.0"
