"""Implementation of the forwards algorithm for the two-state IBD HMM on a pair of haploid genotypes."""

import numpy as np

from ibdpair import core
from ibdpair import jit


@jit.numba_njit
def is_feasible(k, r):
    """Return True if (k, r) lies in the parameter space, i.e. k >= 0 and 0 <= r <= 1."""
    if np.isnan(k) or np.isnan(r):
        return False
    return k >= 0 and r >= 0 and r <= 1


@jit.numba_njit
def forwards_ibd(k, r, Ys, fs, ds, epsilon, rho):
    """
    Run the forwards algorithm over the latent IBD chain.

    The latent state at each marker is 0 (not IBD) or 1 (IBD). The chain
    starts from (1 - r, r) and the true alleles are integrated out of the
    emission probabilities at each marker.

    F[t] is the filtering distribution of the latent state given calls at
    markers 0, ..., t, and c[t] is the probability of the calls at marker t
    given calls at earlier markers. The log-likelihood is the sum of log(c).

    Infeasible parameters, and a zero probability at any marker, give a
    log-likelihood of -inf; the arrays are then only filled up to that point.
    """
    m = Ys.shape[0]
    F = np.zeros((m, 2))
    c = np.zeros(m)

    if not is_feasible(k, r):
        return F, c, -np.inf

    predictive = np.zeros(2)
    predictive[0] = 1 - r
    predictive[1] = r
    ll = 0.0

    for t in range(m):
        num_alleles = core.get_num_alleles(fs[t, :])
        lk_not_ibd, lk_ibd = core.get_emission_probabilities(
            Ys[t, 0], Ys[t, 1], fs[t, :], num_alleles, epsilon
        )
        F[t, 0] = predictive[0] * lk_not_ibd
        F[t, 1] = predictive[1] * lk_ibd
        c[t] = F[t, 0] + F[t, 1]
        if c[t] == 0:
            return F, c, -np.inf
        ll += np.log(c[t])

        F[t, 0] *= 1 / c[t]
        F[t, 1] *= 1 / c[t]

        if t < m - 1:
            prob_enter_ibd, prob_stay_ibd = core.get_transition_probabilities(
                k, r, ds[t], rho
            )
            predictive[1] = F[t, 0] * prob_enter_ibd + F[t, 1] * prob_stay_ibd
            predictive[0] = 1 - predictive[1]

    return F, c, ll


def forwards(k, r, Ys, fs, ds, epsilon=core.DEFAULT_EPSILON, rho=core.DEFAULT_RHO):
    """
    Run the forwards algorithm on a genotype pair, and return the filtering
    distributions, the per-marker normalisation factors and the log-likelihood.

    No checks are run on the inputs.

    :param float k: Switch rate.
    :param float r: Relatedness.
    :param numpy.ndarray Ys: Genotype calls of size (m, 2).
    :param numpy.ndarray fs: Frequency matrix of size (m, Kmax).
    :param numpy.ndarray ds: Inter-marker distances of length m.
    :param float epsilon: Genotyping error rate.
    :param float rho: Recombination rate per distance unit.
    :return: Filtering distributions, normalisation factors, log-likelihood.
    :rtype: tuple
    """
    return forwards_ibd(
        float(k),
        float(r),
        np.asarray(Ys, dtype=np.int64),
        np.asarray(fs, dtype=np.float64),
        np.asarray(ds, dtype=np.float64),
        float(epsilon),
        float(rho),
    )


def log_likelihood(k, r, Ys, fs, ds, epsilon=core.DEFAULT_EPSILON, rho=core.DEFAULT_RHO):
    """
    Evaluate the natural log-likelihood of a genotype pair under the IBD HMM.

    Returns -inf for k < 0 or r outside [0, 1] without running the recursion,
    so that an optimiser can step into infeasible points.
    """
    if not is_feasible(float(k), float(r)):
        return -np.inf
    _, _, ll = forwards(k, r, Ys, fs, ds, epsilon=epsilon, rho=rho)
    return ll
