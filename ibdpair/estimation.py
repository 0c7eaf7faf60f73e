"""Maximum likelihood estimation of relatedness and switch rate."""

import logging
from dataclasses import dataclass, field
from typing import List

import numpy as np
from scipy.optimize import minimize

from . import checks
from . import core
from .exceptions import OptimizationStalledWarning
from .likelihood import forwards_ibd
from .options import EstimationOptions

logger = logging.getLogger(__name__)


@dataclass
class RelatednessEstimate:
    """Maximum likelihood estimates of k and r, with the warnings raised on the way."""

    khat: float
    rhat: float
    log_lik: float
    warnings: List[Warning] = field(default_factory=list)

    def as_dict(self):
        return {"khat": self.khat, "rhat": self.rhat}


def maximise_likelihood(fs, ds, Ys, options):
    """
    Minimise the negative log-likelihood over (k, r) with Nelder-Mead, and
    return the estimate.

    Inputs are expected to be checked already. No bounds are imposed on the
    optimiser; infeasible points have a log-likelihood of -inf.
    """
    x0 = np.array([options.k_init, options.r_init], dtype=np.float64)

    def objective(x):
        _, _, ll = forwards_ibd(x[0], x[1], Ys, fs, ds, options.epsilon, options.rho)
        return -ll

    optimiser_options = {}
    if options.max_iter is not None:
        optimiser_options["maxiter"] = options.max_iter
    opt_res = minimize(objective, x0=x0, method="Nelder-Mead", options=optimiser_options)

    khat, rhat = opt_res.x
    logger.debug(
        "Nelder-Mead finished after %d iterations (success=%s): khat=%g, rhat=%g",
        opt_res.nit,
        opt_res.success,
        khat,
        rhat,
    )

    warning_list = []
    if np.array_equal(opt_res.x, x0):
        warn_msg = "Optimisation returned the initial values; "
        warn_msg += "the data may be uninformative or the optimiser failed to move."
        warning_list.append(OptimizationStalledWarning(warn_msg))

    return RelatednessEstimate(
        khat=float(khat),
        rhat=float(rhat),
        log_lik=float(-opt_res.fun),
        warnings=warning_list,
    )


def estimate(
    fs,
    ds,
    Ys,
    epsilon=core.DEFAULT_EPSILON,
    rho=core.DEFAULT_RHO,
    k_init=core.DEFAULT_K_INIT,
    r_init=core.DEFAULT_R_INIT,
    max_iter=None,
):
    """
    Estimate the relatedness, r, and switch rate, k, of a pair of haploid
    genotypes by maximum likelihood under the IBD HMM.

    Frequencies, distances and genotype calls are checked first. Fatal
    problems raise; recoverable ones are returned in the ``warnings`` list of
    the result, e.g. an observed allele with zero frequency when epsilon is
    positive, or an optimum equal to the initial point.

    :param numpy.ndarray fs: Frequency matrix of size (m, Kmax).
    :param numpy.ndarray ds: Inter-marker distances of length m.
    :param numpy.ndarray Ys: Genotype calls of size (m, 2).
    :param float epsilon: Genotyping error rate.
    :param float rho: Recombination rate per distance unit.
    :param float k_init: Initial switch rate.
    :param float r_init: Initial relatedness.
    :param int max_iter: Cap on optimiser iterations.
    :return: Estimates of k and r.
    :rtype: RelatednessEstimate
    """
    options = EstimationOptions(
        epsilon=epsilon, rho=rho, k_init=k_init, r_init=r_init, max_iter=max_iter
    )
    return estimate_with_options(fs, ds, Ys, options)


def estimate_with_options(fs, ds, Ys, options):
    """Run :func:`estimate` with an :class:`EstimationOptions` record."""
    fs = np.asarray(fs, dtype=np.float64)
    non_zero_mask, warning_list = checks.check_frequencies(fs)
    checks.check_error_rate(options.epsilon, non_zero_mask)
    ds = checks.check_distances(ds, fs.shape[0])
    Ys = checks.check_genotype_pair(Ys, fs.shape[0])
    warning_list += checks.check_allele_compatibility(Ys, non_zero_mask, options.epsilon)

    result = maximise_likelihood(fs, ds, Ys, options)
    result.warnings = warning_list + result.warnings
    return result
