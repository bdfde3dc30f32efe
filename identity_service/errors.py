"""
Error types raised by Identity Service.

Lookup misses and non-matches are not errors: they are reported as None.
"""


class IdentityServiceError(Exception):
    """Base class for service errors."""


class DuplicateNameError(IdentityServiceError):
    """Backend rejected a registration because the name is already taken."""

    def __init__(self, name: str):
        super().__init__(f'Name already registered: {name}')
        self.name = name


class PersistenceError(IdentityServiceError):
    """Backend request failed for a reason other than a duplicate name."""


class StructuralInconsistencyError(IdentityServiceError):
    """Registry and trie hold different identity sets. Requires a full reload."""


class SessionNotReadyError(IdentityServiceError):
    """Operation needs a session in the READY state."""


class FaceQualityError(IdentityServiceError):
    """Face quality is below the registration threshold."""

    def __init__(self, quality):
        super().__init__(f'Face quality too low (score {quality.overall_score})')
        self.quality = quality
