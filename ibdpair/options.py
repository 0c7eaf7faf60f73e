"""Option records passed from bootstrap orchestration to the simulation and estimation layers."""

from dataclasses import dataclass
from typing import Optional

import numpy as np

from . import core


def _check_nuisance_parameters(epsilon, rho):
    if not np.isfinite(epsilon) or epsilon < 0:
        err_msg = "Genotyping error rate must be a non-negative finite number."
        raise ValueError(err_msg)
    if not np.isfinite(rho) or rho <= 0:
        err_msg = "Recombination rate must be a positive finite number."
        raise ValueError(err_msg)


@dataclass(frozen=True)
class SimulationOptions:
    """Nuisance constants of the generative model."""

    epsilon: float = core.DEFAULT_EPSILON
    rho: float = core.DEFAULT_RHO

    def __post_init__(self):
        _check_nuisance_parameters(self.epsilon, self.rho)


@dataclass(frozen=True)
class EstimationOptions:
    """
    Nuisance constants of the likelihood plus optimiser settings.

    ``max_iter`` caps the number of Nelder-Mead iterations; None uses the
    optimiser's default.
    """

    epsilon: float = core.DEFAULT_EPSILON
    rho: float = core.DEFAULT_RHO
    k_init: float = core.DEFAULT_K_INIT
    r_init: float = core.DEFAULT_R_INIT
    max_iter: Optional[int] = None

    def __post_init__(self):
        _check_nuisance_parameters(self.epsilon, self.rho)
        if not np.isfinite(self.k_init) or not np.isfinite(self.r_init):
            err_msg = "Initial values of k and r must be finite."
            raise ValueError(err_msg)
        if self.max_iter is not None and self.max_iter < 1:
            err_msg = "Maximum number of iterations must be positive."
            raise ValueError(err_msg)

    @classmethod
    def from_simulation_options(cls, simulation_options, **overrides):
        """Build estimation options that share the nuisance constants of a simulation."""
        kwargs = {
            "epsilon": simulation_options.epsilon,
            "rho": simulation_options.rho,
        }
        kwargs.update(overrides)
        return cls(**kwargs)
