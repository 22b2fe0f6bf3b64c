"""Conversions between ragged per-joint arrays and flat vectors.

Flat vectors are ordered by ascending joint index, then by local index.
"""

from typing import List, Sequence

import numpy as np

from ..errors import PreconditionViolation
from .multibody import MultiBody


def _flatten(values: Sequence, size: int) -> np.ndarray:
    parts = [np.ravel(np.asarray(v, dtype=np.float64)) for v in values]
    if not parts:
        return np.zeros(size)
    return np.concatenate(parts)


def _split(vector, sizes: Sequence[int]) -> List[np.ndarray]:
    vector = np.asarray(vector, dtype=np.float64)
    out, pos = [], 0
    for size in sizes:
        out.append(vector[pos:pos + size].copy())
        pos += size
    return out


def _check_sizes(name: str, values: Sequence, sizes: Sequence[int]) -> None:
    if len(values) != len(sizes):
        raise PreconditionViolation(f"{name} has {len(values)} entries, expected {len(sizes)}")
    for i, (value, size) in enumerate(zip(values, sizes)):
        if np.size(value) != size:
            raise PreconditionViolation(f"{name}[{i}] has size {np.size(value)}, expected {size}")


def _check_vector(name: str, vector, size: int) -> None:
    if np.shape(vector) != (size,):
        raise PreconditionViolation(f"{name} has shape {np.shape(vector)}, expected ({size},)")


def dof_to_vector(mb: MultiBody, alpha: Sequence) -> np.ndarray:
    """Flatten a ragged velocity (or acceleration) array into a (nr_dof,) vector."""
    return _flatten(alpha, mb.nr_dof)


def vector_to_dof(mb: MultiBody, vector) -> List[np.ndarray]:
    """Split a (nr_dof,) vector into a ragged per-joint velocity array."""
    return _split(vector, [joint.dof for joint in mb.joints])


def param_to_vector(mb: MultiBody, q: Sequence) -> np.ndarray:
    """Flatten a ragged configuration array into a (nr_params,) vector."""
    return _flatten(q, mb.nr_params)


def vector_to_param(mb: MultiBody, vector) -> List[np.ndarray]:
    """Split a (nr_params,) vector into a ragged per-joint configuration array."""
    return _split(vector, [joint.config_size for joint in mb.joints])


def s_dof_to_vector(mb: MultiBody, alpha: Sequence) -> np.ndarray:
    _check_sizes("alpha", alpha, [joint.dof for joint in mb.joints])
    return dof_to_vector(mb, alpha)


def s_vector_to_dof(mb: MultiBody, vector) -> List[np.ndarray]:
    _check_vector("vector", vector, mb.nr_dof)
    return vector_to_dof(mb, vector)


def s_param_to_vector(mb: MultiBody, q: Sequence) -> np.ndarray:
    _check_sizes("q", q, [joint.config_size for joint in mb.joints])
    return param_to_vector(mb, q)


def s_vector_to_param(mb: MultiBody, vector) -> List[np.ndarray]:
    _check_vector("vector", vector, mb.nr_params)
    return vector_to_param(mb, vector)
