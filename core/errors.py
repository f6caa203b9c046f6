"""
core/errors.py — Error taxonomy for Shadow Pieces.

Only EmptyPoolError and PoolFetchError propagate far enough to abort a
session; everything else is handled inside the component that detects it
and degrades to a notice or a placeholder.
"""


class ChallengeError(Exception):
    """Base class for every error raised by the challenge engine."""


class CatalogError(ChallengeError):
    """A stage catalog breaks the index/time/option/reward rules."""


class EmptyPoolError(ChallengeError):
    """The entity pool has no eligible rows. Fatal to session entry."""


class PoolFetchError(ChallengeError):
    """The remote data service could not deliver the entity pool."""


class ImageLoadError(ChallengeError):
    """A puzzle image is missing or could not be decoded.

    Attributes:
        ref: The asset path that failed.
    """

    def __init__(self, ref: str, reason: str = "") -> None:
        self.ref = ref
        message = f"could not load image {ref}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class GrantError(ChallengeError):
    """The external currency grant failed. The session may still exit."""


class InsufficientFundsError(ChallengeError):
    """The entry fee could not be charged."""
