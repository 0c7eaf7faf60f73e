"""Functions to estimate, simulate, and bootstrap relatedness between pairs of haploid genotypes under an IBD HMM."""

from .bootstrap import BootstrapIntervals, bootstrap_ci
from .checks import check_frequencies
from .estimation import RelatednessEstimate, estimate
from .likelihood import forwards, log_likelihood
from .markers import compute_distances
from .options import EstimationOptions, SimulationOptions
from .simulation import simulate
from .summaries import (
    compute_cardinalities,
    compute_diversities,
    compute_eff_cardinalities,
    compute_marker_summaries,
)
