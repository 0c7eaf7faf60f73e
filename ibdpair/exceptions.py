"""Errors raised and warnings returned by ibdpair."""


class IBDPairError(Exception):
    """Base class for fatal ibdpair errors."""


class ValidationError(IBDPairError, ValueError):
    """Frequencies, distances or genotype calls violate an input invariant."""


class DataError(IBDPairError, ValueError):
    """Observed genotype calls are missing or malformed."""


class ModelInfeasibleError(IBDPairError, ValueError):
    """An allele with structurally zero probability was observed without genotyping error."""


class BootstrapDegenerateError(IBDPairError, RuntimeError):
    """A bootstrap confidence bound is not a number."""


class IBDPairWarning(UserWarning):
    """Base class for recoverable caveats returned alongside results."""


class ValidationWarning(IBDPairWarning):
    """Frequencies are usable but deviate slightly from expectations."""


class ModelInfeasibleWarning(IBDPairWarning):
    """An allele outside the marker's cardinality was observed; explained only by genotyping error."""


class OptimizationStalledWarning(IBDPairWarning):
    """The maximum likelihood estimate equals the initial point."""
