"""Checks run on frequencies, distances and genotype calls before any HMM computation."""

import numpy as np

from . import core
from .exceptions import (
    DataError,
    ModelInfeasibleError,
    ModelInfeasibleWarning,
    ValidationError,
    ValidationWarning,
)


def check_frequencies(
    fs,
    max_deviation=core.MAX_DEVIATION,
    non_zero_threshold=core.NON_ZERO_THRESHOLD,
):
    """
    Check that a frequency matrix is valid, and return a mask of its non-zero
    entries together with any warnings.

    The frequency matrix is an array of size (m, Kmax), where:
        m = number of markers.
        Kmax = maximum cardinality over all markers.

    Each row holds the Kt allele frequencies of a marker followed by
    Kmax - Kt zeros, e.g. [0.3, 0.7, 0, 0].

    The checks are staged. Frequencies outside [0, 1] are rejected before
    the ordering of zero and non-zero entries is examined, because negative
    values would otherwise be mistaken for disordered rows.

    :param numpy.ndarray fs: Frequency matrix.
    :param float max_deviation: Largest tolerated deviation of a row sum from one.
    :param float non_zero_threshold: Frequencies at or below this value count as zero.
    :return: Boolean non-zero mask of size (m, Kmax), list of warnings.
    :rtype: tuple
    """
    fs = np.asarray(fs, dtype=np.float64)
    warning_list = []

    if fs.ndim != 2 or fs.shape[0] == 0 or fs.shape[1] == 0:
        err_msg = "Frequency matrix must be a non-empty two-dimensional array."
        raise ValidationError(err_msg)

    if np.any(np.isnan(fs)):
        err_msg = "Frequency matrix cannot contain NaN values."
        raise ValidationError(err_msg)

    # Check frequencies are in [0, 1].
    if np.any(fs < 0) or np.any(fs > 1):
        err_msg = "Some frequencies are not in [0, 1]."
        raise ValidationError(err_msg)

    # Check that, per marker, all non-zero frequencies precede all zero frequencies.
    non_zero_mask = fs > non_zero_threshold
    if np.any(non_zero_mask[:, 1:] & ~non_zero_mask[:, :-1]):
        err_msg = "Disordered frequencies. "
        err_msg += "Per marker, all non-zero frequencies should precede all zero frequencies."
        raise ValidationError(err_msg)

    # Check that per-marker frequencies sum to one.
    max_dev = np.max(np.abs(np.sum(fs, axis=1) - 1))
    if max_dev > max_deviation:
        err_msg = f"Some markers have frequencies whose sum deviates from one by up to {max_dev}."
        raise ValidationError(err_msg)
    elif max_dev > non_zero_threshold:
        warn_msg = f"Some markers have frequencies whose sum deviates from one by up to {max_dev}."
        warning_list.append(ValidationWarning(warn_msg))

    # Uninformative markers do not break the likelihood, but carry no information.
    if np.any(fs == 1):
        warn_msg = "Some markers are uninformative (have allele frequencies equal to one)."
        warning_list.append(ValidationWarning(warn_msg))

    return non_zero_mask, warning_list


def check_distances(ds, num_markers):
    """
    Check an inter-marker distance vector, and return it as a float array.

    Entry t is the distance from marker t to marker t + 1. Infinite entries
    mark chromosome boundaries; the last entry is never used.
    """
    ds = np.asarray(ds, dtype=np.float64)

    if ds.ndim != 1 or len(ds) != num_markers:
        err_msg = "Number of distances and number of markers don't match."
        raise ValidationError(err_msg)

    if np.any(np.isnan(ds)):
        err_msg = "Distances cannot contain NaN values."
        raise ValidationError(err_msg)

    if np.any(ds < 0):
        err_msg = "Distances cannot be negative."
        raise ValidationError(err_msg)

    return ds


def check_genotype_pair(Ys, num_markers):
    """
    Check the genotype calls of a pair of haploid samples, and return them
    as an integer array of size (m, 2).

    Missing calls may be encoded as NaN or as MISSING; either is fatal,
    since missing data is not imputed.

    :param numpy.ndarray Ys: Genotype calls.
    :param int num_markers: Number of markers in the frequency matrix.
    :return: Checked genotype calls.
    :rtype: numpy.ndarray
    """
    Ys = np.asarray(Ys)

    if Ys.ndim != 2 or Ys.shape[1] != 2:
        err_msg = "Genotype pair array has incorrect dimensions."
        raise ValidationError(err_msg)

    if Ys.shape[0] != num_markers:
        err_msg = "Number of markers in the genotype pair and frequency matrix don't match."
        raise ValidationError(err_msg)

    if np.issubdtype(Ys.dtype, np.floating):
        if np.any(np.isnan(Ys)):
            err_msg = "Genotype pair cannot have any missing values."
            raise DataError(err_msg)
        if np.any(np.isinf(Ys)):
            err_msg = "Genotype calls must be finite allele indices."
            raise DataError(err_msg)
        if np.any(Ys != np.round(Ys)):
            err_msg = "Genotype calls must be integer allele indices."
            raise DataError(err_msg)
    elif not np.issubdtype(Ys.dtype, np.integer):
        err_msg = "Genotype calls must be integer allele indices."
        raise DataError(err_msg)

    if np.any(Ys == core.MISSING):
        err_msg = "Genotype pair cannot have any missing values."
        raise DataError(err_msg)

    if np.any(Ys < 0):
        err_msg = "Genotype pair has illegal (negative) alleles."
        raise DataError(err_msg)

    return Ys.astype(np.int64)


def check_allele_compatibility(Ys, non_zero_mask, epsilon):
    """
    Check that observed alleles are compatible with marker cardinalities,
    and return a list of warnings.

    An allele index at or beyond the cardinality of its marker has zero
    frequency. It can only have been observed through genotyping error,
    which is impossible when epsilon is zero.
    """
    num_alleles = np.sum(non_zero_mask, axis=1)
    if np.any(Ys >= num_alleles[:, np.newaxis]):
        if epsilon == 0:
            err_msg = "Some observed alleles have zero frequency but epsilon is zero."
            raise ModelInfeasibleError(err_msg)
        warn_msg = "Some observed alleles have zero frequency; "
        warn_msg += "they are explained by genotyping error only."
        return [ModelInfeasibleWarning(warn_msg)]
    return []


def check_error_rate(epsilon, non_zero_mask):
    """
    Check that the genotyping error rate leaves a valid probability of a
    correct call, 1 - (Kt - 1) * epsilon, at every marker.

    :param float epsilon: Genotyping error rate.
    :param numpy.ndarray non_zero_mask: Mask of non-zero frequencies of size (m, Kmax).
    """
    max_num_alleles = int(np.max(np.sum(non_zero_mask, axis=1), initial=1))
    if (max_num_alleles - 1) * epsilon > 1:
        err_msg = "Genotyping error rate is too large for the number of alleles; "
        err_msg += f"(Kt - 1) * epsilon must not exceed one, but Kt = {max_num_alleles}."
        raise ValidationError(err_msg)
