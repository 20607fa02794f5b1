"""Privileged helpers that change system mount state.

This module exports the helper interface and its pkexec implementation.
"""

from lindy.helpers.base import ElevationUnavailableError, HelperError, PrivilegedHelper
from lindy.helpers.pkexec import PkexecHelper

__all__ = ["ElevationUnavailableError", "HelperError", "PkexecHelper", "PrivilegedHelper"]
