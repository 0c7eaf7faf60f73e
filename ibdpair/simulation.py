"""Simulation of genotype calls for a pair of haploid samples under the IBD HMM."""

import logging

import numpy as np

from . import checks
from . import core

logger = logging.getLogger(__name__)


def get_rng(rng=None):
    """
    Return a numpy Generator from a random source.

    :param rng: None, an integer seed, a SeedSequence, or a Generator (returned as is).
    :rtype: numpy.random.Generator
    """
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def simulate_call(true_allele, num_alleles, epsilon, rng):
    """Apply the genotyping error model to a true allele, and return the observed call."""
    if rng.random() < core.get_prob_correct_call(num_alleles, epsilon):
        return true_allele
    # Choose uniformly among the other alleles.
    other_allele = rng.integers(num_alleles - 1)
    if other_allele >= true_allele:
        other_allele += 1
    return other_allele


def simulate_pair(fs, ds, k, r, epsilon, rho, rng):
    """
    Draw genotype calls of size (m, 2) for a pair of haploid samples.

    No checks are run on the inputs. The latent chain uses the same transition
    and cardinality functions as the forwards algorithm.
    """
    num_markers = fs.shape[0]
    num_alleles_per_marker = core.get_num_alleles_per_marker(fs)
    Ys = np.zeros((num_markers, 2), dtype=np.int64)

    is_ibd = rng.random() < r
    for t in range(num_markers):
        if t > 0:
            prob_enter_ibd, prob_stay_ibd = core.get_transition_probabilities(
                k, r, ds[t - 1], rho
            )
            prob_ibd = prob_stay_ibd if is_ibd else prob_enter_ibd
            is_ibd = rng.random() < prob_ibd

        num_alleles = num_alleles_per_marker[t]
        freqs = fs[t, :num_alleles] / np.sum(fs[t, :num_alleles])

        true_allele_i = rng.choice(num_alleles, p=freqs)
        if is_ibd:
            true_allele_j = true_allele_i
        else:
            true_allele_j = rng.choice(num_alleles, p=freqs)

        Ys[t, 0] = simulate_call(true_allele_i, num_alleles, epsilon, rng)
        Ys[t, 1] = simulate_call(true_allele_j, num_alleles, epsilon, rng)

    return Ys


def simulate(
    fs,
    ds,
    k,
    r,
    epsilon=core.DEFAULT_EPSILON,
    rho=core.DEFAULT_RHO,
    rng=None,
    return_warnings=False,
):
    """
    Simulate genotype calls for a pair of haploid samples under the IBD HMM.

    At the first marker the pair is IBD with probability r. At later markers
    the IBD state evolves as a Markov chain whose switch probability grows
    with k, rho and the distance from the previous marker. True alleles are
    drawn from the marker frequencies (shared when IBD), then each call is
    wrong with probability (Kt - 1) * epsilon, uniformly among the other alleles.

    Validation warnings on the frequencies are logged, and also returned
    when ``return_warnings`` is True.

    :param numpy.ndarray fs: Frequency matrix of size (m, Kmax).
    :param numpy.ndarray ds: Inter-marker distances of length m.
    :param float k: Data-generating switch rate.
    :param float r: Data-generating relatedness.
    :param float epsilon: Genotyping error rate.
    :param float rho: Recombination rate per distance unit.
    :param rng: Random source; see :func:`get_rng`.
    :param bool return_warnings: If True, also return the list of validation warnings.
    :return: Genotype calls of size (m, 2), alleles enumerated from 0 to Kt - 1,
        or a tuple of the calls and the warnings.
    :rtype: numpy.ndarray or tuple
    """
    fs = np.asarray(fs, dtype=np.float64)
    non_zero_mask, warning_list = checks.check_frequencies(fs)
    for warning in warning_list:
        logger.warning(str(warning))
    ds = checks.check_distances(ds, fs.shape[0])

    if not k >= 0 or not 0 <= r <= 1:
        err_msg = "Switch rate must be non-negative and relatedness must be in [0, 1]."
        raise ValueError(err_msg)
    if not 0 <= epsilon < np.inf or not 0 < rho < np.inf:
        err_msg = "Genotyping error rate must be non-negative and recombination rate positive."
        raise ValueError(err_msg)
    checks.check_error_rate(epsilon, non_zero_mask)

    Ys = simulate_pair(fs, ds, float(k), float(r), float(epsilon), float(rho), get_rng(rng))
    if return_warnings:
        return Ys, warning_list
    return Ys
