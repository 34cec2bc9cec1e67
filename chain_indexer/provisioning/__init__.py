"""Composition of node, cluster and stack provisioning definitions."""
