"""lindy - bind-mount manager for dual-boot machines."""

__version__ = "0.3.0"
