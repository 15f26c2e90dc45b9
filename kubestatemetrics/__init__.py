"""Prometheus exposition of Kubernetes object state: metric families, a metrics store, filtering, sharding and a metrics handler."""

__version__ = "1.9.0"