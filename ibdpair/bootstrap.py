"""Parametric bootstrap confidence intervals for relatedness and switch rate."""

import logging
import os
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from . import checks
from .estimation import maximise_likelihood
from .exceptions import BootstrapDegenerateError, OptimizationStalledWarning
from .options import EstimationOptions, SimulationOptions
from .simulation import simulate_pair

logger = logging.getLogger(__name__)

# Number of cores left free when the worker count is not given.
NUM_RESERVED_CORES = 2


@dataclass
class BootstrapIntervals:
    """Lower and upper confidence bounds of k and r."""

    k: Tuple[float, float]
    r: Tuple[float, float]
    confidence: float
    nboot: int
    seed: int
    warnings: List[Warning] = field(default_factory=list)

    def to_array(self):
        """Return the bounds as an array of size (2, 2); rows are k and r, columns lower and upper."""
        return np.array([self.k, self.r], dtype=np.float64)


def get_replicate_rng(seed, replicate):
    """Return the random generator of a replicate, a pure function of the master seed and replicate index."""
    seed_seq = np.random.SeedSequence(entropy=seed, spawn_key=(replicate,))
    return np.random.default_rng(seed_seq)


def get_default_num_workers():
    return max(1, (os.cpu_count() or 1) - NUM_RESERVED_CORES)


def run_replicate(replicate, seed, fs, ds, khat, rhat, simulation_options, estimation_options):
    """Simulate one genotype pair at (khat, rhat) and re-estimate (k, r) from it."""
    rng = get_replicate_rng(seed, replicate)
    Ys = simulate_pair(
        fs,
        ds,
        khat,
        rhat,
        simulation_options.epsilon,
        simulation_options.rho,
        rng,
    )
    result = maximise_likelihood(fs, ds, Ys, estimation_options)
    is_stalled = any(isinstance(w, OptimizationStalledWarning) for w in result.warnings)
    return result.khat, result.rhat, is_stalled


# Inputs shared by all replicates of a worker process, set once by _init_worker.
_shared_inputs = None


def _init_worker(*shared_inputs):
    global _shared_inputs
    _shared_inputs = shared_inputs


def _run_shared_replicate(replicate):
    seed, fs, ds, khat, rhat, simulation_options, estimation_options = _shared_inputs
    return run_replicate(
        replicate, seed, fs, ds, khat, rhat, simulation_options, estimation_options
    )


def bootstrap_ci(
    fs,
    ds,
    khat,
    rhat,
    confidence=95,
    nboot=100,
    workers=None,
    seed=None,
    simulation_options: Optional[SimulationOptions] = None,
    estimation_options: Optional[EstimationOptions] = None,
):
    """
    Compute parametric bootstrap confidence intervals for k and r.

    Each of the ``nboot`` replicates simulates a genotype pair with
    parameters (khat, rhat) and re-estimates (k, r) from it. Bounds are the
    empirical quantiles at alpha / 2 and 1 - alpha / 2 of the replicate
    estimates, where alpha = 1 - confidence / 100.

    Replicate i draws from a random stream derived from (seed, i) only, so
    results for a given seed do not depend on the number of workers. When
    ``seed`` is None, a fresh seed is drawn and reported in the result.

    :param numpy.ndarray fs: Frequency matrix of size (m, Kmax).
    :param numpy.ndarray ds: Inter-marker distances of length m.
    :param float khat: Estimated switch rate used to simulate replicates.
    :param float rhat: Estimated relatedness used to simulate replicates.
    :param float confidence: Confidence level in percent.
    :param int nboot: Number of bootstrap replicates.
    :param int workers: Number of worker processes; 1 runs sequentially in this process.
    :param int seed: Master seed.
    :param SimulationOptions simulation_options: Constants used to simulate replicates.
    :param EstimationOptions estimation_options: Constants and optimiser settings used
        to re-estimate; by default they share epsilon and rho with the simulation.
    :return: Confidence bounds.
    :rtype: BootstrapIntervals
    """
    if not 0 < confidence < 100:
        err_msg = "Confidence must be in (0, 100)."
        raise ValueError(err_msg)
    if nboot < 1:
        err_msg = "Number of bootstrap replicates must be positive."
        raise ValueError(err_msg)
    if not khat >= 0 or not 0 <= rhat <= 1:
        err_msg = "Switch rate must be non-negative and relatedness must be in [0, 1]."
        raise ValueError(err_msg)

    if simulation_options is None:
        simulation_options = SimulationOptions()
    if estimation_options is None:
        estimation_options = EstimationOptions.from_simulation_options(simulation_options)
    if workers is None:
        workers = get_default_num_workers()
    if workers < 1:
        err_msg = "Number of workers must be positive."
        raise ValueError(err_msg)
    if seed is None:
        seed = int(np.random.SeedSequence().generate_state(1)[0])

    fs = np.asarray(fs, dtype=np.float64)
    non_zero_mask, warning_list = checks.check_frequencies(fs)
    ds = checks.check_distances(ds, fs.shape[0])
    checks.check_error_rate(simulation_options.epsilon, non_zero_mask)
    checks.check_error_rate(estimation_options.epsilon, non_zero_mask)

    shared_inputs = (
        seed,
        fs,
        ds,
        float(khat),
        float(rhat),
        simulation_options,
        estimation_options,
    )
    logger.info("Running %d bootstrap replicates with %d workers (seed=%d)", nboot, workers, seed)
    if workers == 1:
        outcomes = [run_replicate(i, *shared_inputs) for i in range(nboot)]
    else:
        with ProcessPoolExecutor(
            max_workers=workers, initializer=_init_worker, initargs=shared_inputs
        ) as executor:
            try:
                outcomes = list(
                    executor.map(
                        _run_shared_replicate,
                        range(nboot),
                        chunksize=max(1, nboot // (workers * 4)),
                    )
                )
            except BaseException:
                executor.shutdown(wait=True, cancel_futures=True)
                raise

    estimates = np.array([outcome[:2] for outcome in outcomes], dtype=np.float64)
    num_stalled = sum(outcome[2] for outcome in outcomes)

    alpha = 1 - confidence / 100
    bounds = np.quantile(estimates, [alpha / 2, 1 - alpha / 2], axis=0).T
    if np.any(np.isnan(bounds)):
        err_msg = "Bootstrap confidence bound is NaN."
        raise BootstrapDegenerateError(err_msg)

    if num_stalled > 0:
        warn_msg = f"Optimisation returned the initial values in {num_stalled} of {nboot} replicates."
        warning_list.append(OptimizationStalledWarning(warn_msg))

    return BootstrapIntervals(
        k=(float(bounds[0, 0]), float(bounds[0, 1])),
        r=(float(bounds[1, 0]), float(bounds[1, 1])),
        confidence=confidence,
        nboot=nboot,
        seed=seed,
        warnings=warning_list,
    )
