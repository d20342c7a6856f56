"""Activation utilities for glyphnet."""

from __future__ import annotations

import numpy as np

from .types import Array


def sigmoid(x: Array) -> Array:
    """Return the logistic activation ``1 / (1 + e^-x)``."""

    # exp overflows to inf for very negative inputs, which still yields 0.0
    with np.errstate(over="ignore"):
        return 1.0 / (1.0 + np.exp(-x))


def sigmoid_deriv(y: Array) -> Array:
    """Derivative of the sigmoid expressed through its output ``y``."""

    return y * (1.0 - y)
