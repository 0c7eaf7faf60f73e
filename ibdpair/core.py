import math

import numpy as np

from ibdpair import jit


MISSING = -1

# Frequencies at or below this value are treated as structurally zero.
NON_ZERO_THRESHOLD = 1e-20
# Largest tolerated deviation of a per-marker frequency sum from one.
MAX_DEVIATION = 1e-5

DEFAULT_EPSILON = 0.001
# Probability of a crossover per base pair, estimated for Plasmodium falciparum.
DEFAULT_RHO = 7.4e-7
DEFAULT_K_INIT = 50.0
DEFAULT_R_INIT = 0.5


# Functions shared by the likelihood and the simulator.
@jit.numba_njit
def get_num_alleles(freqs):
    """
    Return the cardinality of a marker, i.e. the number of leading
    non-zero entries in its row of the frequency matrix.

    Counting stops at the first entry at or below ``NON_ZERO_THRESHOLD``,
    so the result is only meaningful for rows that are right-padded with zeros.

    :param numpy.ndarray freqs: Allele frequencies of one marker.
    :return: Number of alleles.
    :rtype: int
    """
    num_alleles = 0
    max_num_alleles = freqs.shape[0]
    while num_alleles < max_num_alleles and freqs[num_alleles] > NON_ZERO_THRESHOLD:
        num_alleles += 1
    return num_alleles


@jit.numba_njit
def get_num_alleles_per_marker(fs):
    num_markers = fs.shape[0]
    num_alleles = np.zeros(num_markers, dtype=np.int64)
    for t in range(num_markers):
        num_alleles[t] = get_num_alleles(fs[t, :])
    return num_alleles


@jit.numba_njit
def get_transition_probabilities(k, r, distance, rho):
    """
    Compute the probabilities of being IBD at the next marker, and return them.

    The first value is the probability of moving from not IBD into IBD, and
    the second the probability of staying IBD. An infinite distance
    (the last marker, or a chromosome boundary) resets the chain to its
    stationary distribution (1 - r, r), whatever the value of k.

    :param float k: Switch rate.
    :param float r: Relatedness.
    :param float distance: Distance to the next marker.
    :param float rho: Recombination rate per distance unit.
    :return: Probability of entering IBD, probability of staying IBD.
    :rtype: tuple
    """
    if math.isinf(distance):
        prob_no_switch = 0.0
    else:
        prob_no_switch = math.exp(-k * rho * distance)
    prob_enter_ibd = r * (1.0 - prob_no_switch)
    prob_stay_ibd = r + (1.0 - r) * prob_no_switch
    return prob_enter_ibd, prob_stay_ibd


@jit.numba_njit
def get_prob_correct_call(num_alleles, epsilon):
    """Probability that a call reports the true allele; each other allele has probability epsilon."""
    return 1.0 - (num_alleles - 1) * epsilon


@jit.numba_njit
def get_emission_probabilities(call_i, call_j, freqs, num_alleles, epsilon):
    """
    Compute the probabilities of a pair of calls at one marker given
    each latent state, and return them.

    Under state 0 (not IBD) the true alleles are drawn independently,
    so the sum over all ordered pairs of true alleles factorises into
    a product of two sums. Under state 1 (IBD) only pairs of matching
    true alleles contribute.

    :param int call_i: Observed allele of the first sample.
    :param int call_j: Observed allele of the second sample.
    :param numpy.ndarray freqs: Allele frequencies of the marker.
    :param int num_alleles: Cardinality of the marker.
    :param float epsilon: Genotyping error rate.
    :return: Likelihood given not IBD, likelihood given IBD.
    :rtype: tuple
    """
    prob_correct = get_prob_correct_call(num_alleles, epsilon)
    marginal_i = 0.0
    marginal_j = 0.0
    lk_ibd = 0.0
    for g in range(num_alleles):
        obs_i = prob_correct if call_i == g else epsilon
        obs_j = prob_correct if call_j == g else epsilon
        marginal_i += freqs[g] * obs_i
        marginal_j += freqs[g] * obs_j
        lk_ibd += freqs[g] * obs_i * obs_j
    lk_not_ibd = marginal_i * marginal_j
    return lk_not_ibd, lk_ibd
