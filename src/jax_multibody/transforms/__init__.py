"""
JAX spatial algebra used by the multibody algorithms.

- SO(3) rotations and unit quaternions (so3 module)
- SE(3) rigid body transforms and angular-first twists (se3 module)

All functions are pure, stateless and JIT-able.
"""

from . import so3
from . import se3

__all__ = [
    "so3",
    "se3",
]
