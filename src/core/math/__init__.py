"""
Core math modules для vault

Денежная арифметика: fixed point (18 знаков) и Uint128 base units.
"""

from src.core.math.fixed_point import (
    # Constants
    FP_CONTEXT,
    FP_DECIMALS,
    FP_QUANTUM,
    UINT128_MAX,
    # Constructors
    fp,
    fp_display,
    fp_from_str,
    # Arithmetic
    fp_add,
    fp_div,
    fp_mul,
    scaled,
    # Base units
    check_uint128,
    checked_sub,
    multiply_ratio,
    to_uint,
)

__all__ = [
    "FP_CONTEXT",
    "FP_DECIMALS",
    "FP_QUANTUM",
    "UINT128_MAX",
    "fp",
    "fp_display",
    "fp_from_str",
    "fp_add",
    "fp_div",
    "fp_mul",
    "scaled",
    "check_uint128",
    "checked_sub",
    "multiply_ratio",
    "to_uint",
]
