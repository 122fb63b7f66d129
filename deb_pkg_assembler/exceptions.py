# Debian package assembler: Custom exceptions.
#
# Last Change: October 19, 2026

"""
Custom exceptions raised by the `deb-pkg-assembler` package.

None of these exceptions are caught or retried inside the package: the first
failure aborts the assembly and propagates to the caller. Where a failure is
caused by another exception, the original exception is available as
``__cause__``.
"""

# Public identifiers that require documentation.
__all__ = (
    "AssemblyError",
    "CompressionFailure",
    "IOFailure",
    "MissingControlProperty",
    "VersionResolutionFailure",
)


class AssemblyError(Exception):

    """Base class for the exceptions raised while assembling a package."""


class MissingControlProperty(AssemblyError):

    """
    Raised when a control property required for assembly is absent or empty.

    The property name is available as the :attr:`name` attribute.
    """

    def __init__(self, name, filename=None):
        """
        Initialize a :class:`MissingControlProperty` object.

        :param name: The name of the control property (a string).
        :param filename: The control file that was searched (a string or
                         :data:`None`).
        """
        self.name = name
        self.filename = filename
        if filename:
            message = "Control file %s doesn't define the %r property!" % (filename, name)
        else:
            message = "Control document doesn't define the %r property!" % name
        super(MissingControlProperty, self).__init__(message)


class VersionResolutionFailure(AssemblyError):

    """Raised when the package version can't be resolved."""


class CompressionFailure(AssemblyError):

    """Raised when the compression capability fails to produce a tarball."""


class IOFailure(AssemblyError, EnvironmentError):

    """Raised when a directory or file that assembly depends on is missing."""
