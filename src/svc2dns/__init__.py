"""svc2dns: derive DNS records from Kubernetes Services."""

__version__ = "0.1.0"
