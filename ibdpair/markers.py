"""Derive inter-marker distances from marker positions."""

import numpy as np


def compute_distances(chromosomes, positions):
    """
    Compute the distance from each marker to the next one, and return it.

    Markers must be grouped by chromosome and sorted by position within
    each chromosome. The distance is infinite where the next marker lies on
    a different chromosome, and after the last marker.

    :param numpy.ndarray chromosomes: Chromosome of each marker.
    :param numpy.ndarray positions: Position of each marker, e.g. in base pairs.
    :return: Inter-marker distances.
    :rtype: numpy.ndarray
    """
    chromosomes = np.asarray(chromosomes)
    positions = np.asarray(positions, dtype=np.float64)

    if chromosomes.ndim != 1 or chromosomes.shape != positions.shape:
        err_msg = "Chromosomes and positions must be one-dimensional arrays of equal length."
        raise ValueError(err_msg)
    if len(positions) == 0:
        err_msg = "At least one marker is required."
        raise ValueError(err_msg)

    same_chrom = chromosomes[1:] == chromosomes[:-1]
    # A chromosome must form a single contiguous block.
    boundaries = chromosomes[1:][~same_chrom]
    if len(np.unique(boundaries)) != len(boundaries) or chromosomes[0] in boundaries:
        err_msg = "Markers are not grouped by chromosome."
        raise ValueError(err_msg)

    distances = np.full(len(positions), np.inf)
    diffs = np.diff(positions)
    if np.any(diffs[same_chrom] < 0):
        err_msg = "Markers are not sorted by position within chromosomes."
        raise ValueError(err_msg)
    distances[:-1][same_chrom] = diffs[same_chrom]
    return distances
