"""Explicit Euler integration of a MultiBodyConfig."""

import numpy as np

from .core.config import (
    MultiBodyConfig,
    check_match_alpha,
    check_match_alpha_d,
    check_match_q,
    write_into,
)
from .core.multibody import MultiBody


def euler_integration(mb: MultiBody, mbc: MultiBodyConfig, dt: float) -> None:
    """Advance `mbc.q` by `dt` at the velocity `mbc.alpha`.

    Each joint applies its own rule: additive for scalar joints, quaternion
    composition with renormalization for orientation joints, no-op for fixed
    joints.
    """
    for i, joint in enumerate(mb.joints):
        if joint.config_size == 0:
            continue
        write_into(mbc.q, i, joint.integrate(mbc.q[i], mbc.alpha[i], dt))


def euler_velocity_integration(mb: MultiBody, mbc: MultiBodyConfig, dt: float) -> None:
    """Advance `mbc.alpha` by `dt` at the acceleration `mbc.alpha_d`."""
    for i, joint in enumerate(mb.joints):
        if joint.dof == 0:
            continue
        alpha = np.asarray(mbc.alpha[i], dtype=np.float64)
        write_into(mbc.alpha, i, alpha + np.asarray(mbc.alpha_d[i], dtype=np.float64) * dt)


def s_euler_integration(mb: MultiBody, mbc: MultiBodyConfig, dt: float) -> None:
    check_match_q(mb, mbc)
    check_match_alpha(mb, mbc)
    euler_integration(mb, mbc, dt)


def s_euler_velocity_integration(mb: MultiBody, mbc: MultiBodyConfig, dt: float) -> None:
    check_match_alpha(mb, mbc)
    check_match_alpha_d(mb, mbc)
    euler_velocity_integration(mb, mbc, dt)
