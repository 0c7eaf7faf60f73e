"""Control just-in-time compilation of the HMM kernels."""

import os

import numba

# Set IBDPAIR_ENABLE_NUMBA=0 to run the kernels as plain Python, e.g. for debugging.
ENABLE_NUMBA = os.environ.get("IBDPAIR_ENABLE_NUMBA", "1").lower() not in (
    "0",
    "false",
    "no",
)


def numba_njit(func, **kwargs):
    """Compile a function in nopython mode if Numba is enabled."""
    if ENABLE_NUMBA:
        return numba.jit(func, nopython=True, **kwargs)
    return func
