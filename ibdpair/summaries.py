"""Per-marker summaries of a frequency matrix."""

import numpy as np

from . import checks


def compute_cardinalities(fs):
    """
    Return the cardinality (number of alleles with non-zero frequency) of each marker.

    :param numpy.ndarray fs: Frequency matrix of size (m, Kmax).
    :rtype: numpy.ndarray
    """
    non_zero_mask, _ = checks.check_frequencies(fs)
    return np.sum(non_zero_mask, axis=1)


def compute_eff_cardinalities(fs):
    """
    Return the effective cardinality, 1 / sum(f^2), of each marker.

    This is the number of equifrequent alleles that would give the same
    diversity; it equals the cardinality only when alleles are equifrequent.
    See Taylor et al. (2019), Genetics 212(4), 1337-1351.
    """
    checks.check_frequencies(fs)
    fs = np.asarray(fs, dtype=np.float64)
    return 1 / np.sum(fs**2, axis=1)


def compute_diversities(fs):
    """Return the diversity, 1 - sum(f^2), i.e. the probability that two random alleles differ, of each marker."""
    checks.check_frequencies(fs)
    fs = np.asarray(fs, dtype=np.float64)
    return 1 - np.sum(fs**2, axis=1)


def compute_marker_summaries(fs):
    """Return a dictionary of cardinalities, effective cardinalities and diversities."""
    return {
        "cardinalities": compute_cardinalities(fs),
        "eff_cardinalities": compute_eff_cardinalities(fs),
        "diversities": compute_diversities(fs),
    }
