"""KRM object helpers, a mock API client, and the gen-configmap and gen-kustomize-res functions."""

__version__ = "0.1.0"