"""Pure Python utilities for Zen Planner.

This module contains pure Python functions with ZERO Home Assistant dependencies.
All functions here can be unit tested without Home Assistant mocking.

Submodules:
    - dt_utils: Date/time parsing and local-day arithmetic
    - math_utils: Half-up rounding, clamping and percentage calculations

Usage:
    from . import dt_utils
    from .math_utils import round_half_up
"""

from . import dt_utils, math_utils

__all__ = ["dt_utils", "math_utils"]
