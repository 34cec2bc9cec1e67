"""Provisioning definitions for blockchain ingestion nodes and their broker cluster."""

__version__ = "0.1.0"
