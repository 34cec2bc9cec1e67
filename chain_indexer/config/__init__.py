"""Configuration loading for provisioning runs."""
