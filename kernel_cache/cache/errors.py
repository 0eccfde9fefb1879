class KernelCacheError(RuntimeError):
    """Base class for kernel cache failures."""


class FormatMismatchError(KernelCacheError):
    """Raised when a cache file does not hold the expected kind of store."""


class MissingKeyError(KernelCacheError, KeyError):
    """Raised when a result-dependent query is made for a key that is not cached."""

    def __str__(self):
        return RuntimeError.__str__(self)
