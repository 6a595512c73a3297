# boundary.py
"""
Conversion between host-side numeric containers and the evaluator's
parameter/result vectors.

Accepted inputs: Python real scalars, sequences of reals, numpy arrays that
squeeze to at most one dimension, and pandas Series. Anything else (strings,
complex values, ragged or multi-dimensional data) raises ConversionError.
Finite real values pass through unchanged.
"""

import numbers
from typing import Optional, Tuple

import numpy as np
import pandas as pd

from .errors import ConversionError


def as_parameter_vector(obj, n: Optional[int] = None) -> np.ndarray:
    """
    Map a host value to a 1-D float64 parameter vector.

    Args:
        obj: scalar, sequence, np.ndarray or pd.Series of real numbers
        n: required length (None = any non-zero length)

    Returns:
        np.ndarray of shape (n,), dtype float64 (a copy)
    """
    if isinstance(obj, (str, bytes)):
        raise ConversionError(f"cannot convert {type(obj).__name__} to a parameter vector")
    if isinstance(obj, pd.DataFrame):
        raise ConversionError("cannot convert a DataFrame to a parameter vector; pass a column")
    if isinstance(obj, pd.Series):
        obj = obj.to_numpy()

    if isinstance(obj, (bool, np.bool_)):
        raise ConversionError("boolean is not a real parameter")
    if isinstance(obj, numbers.Real):
        arr = np.array([obj], dtype=np.float64)
    else:
        try:
            raw = np.asarray(obj)
        except (ValueError, TypeError) as exc:
            raise ConversionError(f"cannot convert {type(obj).__name__}: {exc}") from exc

        if raw.dtype == object or raw.dtype.kind not in "iuf":
            raise ConversionError(
                f"parameter vector must hold real numbers, got dtype {raw.dtype}"
            )
        if raw.ndim > 1:
            raw = np.squeeze(raw)
            if raw.ndim > 1:
                raise ConversionError(
                    f"parameter vector must be 1-D, got shape {np.shape(obj)}"
                )
        arr = np.array(raw, dtype=np.float64).reshape(-1)

    if arr.size == 0:
        raise ConversionError("parameter vector is empty")
    if n is not None and arr.size != n:
        raise ConversionError(f"expected {n} parameters, got {arr.size}")
    return arr


def as_host_array(values, shape: Optional[Tuple[int, ...]] = None) -> np.ndarray:
    """
    Map an evaluator result (vector or matrix) back to a host ndarray.

    Args:
        values: sequence or array of real numbers
        shape: target shape; must hold exactly the same number of elements

    Returns:
        np.ndarray (float64)
    """
    try:
        arr = np.asarray(values, dtype=np.float64)
    except (ValueError, TypeError) as exc:
        raise ConversionError(f"cannot convert result to a float array: {exc}") from exc
    if shape is None:
        return arr
    shape = tuple(shape)
    if int(np.prod(shape)) != arr.size:
        raise ConversionError(f"cannot reshape {arr.size} values into shape {shape}")
    return arr.reshape(shape)
