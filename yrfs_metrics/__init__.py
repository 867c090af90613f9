"""yrfs_metrics: volume usage metrics for YRFS project-quota mounts."""

__version__ = "0.1.0"
