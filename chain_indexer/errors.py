"""Errors raised while composing provisioning definitions."""


class ProvisioningError(Exception):
    """Base class for provisioning composition errors."""
    pass


class InvalidSizeError(ProvisioningError):
    """Raised when a volume size is not a positive number of GiB."""

    def __init__(self, size_gib):
        super().__init__(f"Volume size must be a positive number of GiB, got {size_gib!r}")
        self.size_gib = size_gib


class MissingClusterIdentityError(ProvisioningError):
    """Raised when the broker cluster has no resolved identity yet."""
    pass


class UnresolvedPlaceholderError(ProvisioningError):
    """Raised when a bootstrap template cannot be resolved to a single script."""
    pass


class MissingTemplateError(ProvisioningError):
    """Raised when the bootstrap script template is empty."""
    pass


class InvalidNetworkPlacementError(ProvisioningError):
    """Raised when the network cannot host the cluster."""
    pass


class ConfigurationError(ProvisioningError):
    """Raised when configuration values are missing or malformed."""
    pass
