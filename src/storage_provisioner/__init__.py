"""Storage and account provisioning for a remote storage appliance."""

__version__ = "0.1.0"
