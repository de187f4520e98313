"""Lockwright exception hierarchy.

All public exceptions inherit from LockwrightError, giving callers a single
base class to catch when they want to handle any Lockwright-specific failure
without swallowing unrelated errors.

Note that an unsatisfiable specification is *not* an exception inside the
resolver: ``Resolver.resolve()`` returns a ``Resolution`` whose ``correct``
flag is False. ``UnresolvableError`` is only raised by callers that insist
on a correct resolution, such as the lockfile codec.
"""


class LockwrightError(Exception):
    """Base exception for all Lockwright errors."""


class ProjectNotFoundError(LockwrightError):
    """Raised when no specfile can be found in the directory tree."""


class SpecfileError(LockwrightError):
    """Raised when a specfile cannot be read or is malformed.

    Covers YAML syntax errors, unknown source references, unknown
    source types, and duplicate top-level dependency names.
    """


class LockfileError(LockwrightError):
    """Raised when a lockfile cannot be parsed or written.

    Covers invalid JSON, missing keys, and dangling source indexes.
    """


class RoundTripInconsistencyError(LockfileError):
    """Raised when serialize -> parse -> serialize does not reproduce the text.

    This always indicates a codec defect. It is fatal: the lockfile is
    never written when the bounce check fails.
    """


class UnresolvableError(LockwrightError):
    """Raised when a correct resolution is required but the search failed."""


class DivergedSpecError(LockwrightError):
    """Raised when a targeted update is requested on a changed specfile."""


class MissingLockError(LockwrightError):
    """Raised when an update is requested but no lockfile exists."""


class SourceUnavailableError(LockwrightError):
    """Raised by a source whose ``candidates`` or ``cache`` call fails.

    The resolver treats it as an empty candidate list for that
    dependency, which forces backtracking.
    """


class CycleError(LockwrightError):
    """Raised when manifests form a cycle that has no consistent ordering."""
