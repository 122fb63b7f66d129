# Debian package assembler: Version resolution.
#
# Last Change: October 19, 2026

"""
Resolution of the package version.

The assembler gets the version of the package it builds from a version
resolver: a callable that takes no arguments and returns the version as a
string. This module provides resolvers for the common cases:

- :func:`static_version()` for a version that is known up front,
- :func:`version_from_file()` for a version stored in a build artifact,
- :func:`version_from_command()` for a version reported by a program (for
  example ``git describe`` or the application binary itself).

Any other callable works just as well.
"""

# Standard library modules.
import codecs
import functools
import logging

# External dependencies.
from executor import execute
from humanfriendly import format_path

# Modules included in our package.
from deb_pkg_assembler.exceptions import VersionResolutionFailure

# Public identifiers that require documentation.
__all__ = (
    "logger",
    "resolve_version",
    "static_version",
    "version_from_command",
    "version_from_file",
)

# Initialize a logger.
logger = logging.getLogger(__name__)


def resolve_version(resolver):
    """
    Get the package version from a version resolver.

    :param resolver: A callable that returns the version (a string, other
                     values are converted to strings).
    :returns: The version with surrounding whitespace removed (a string).
    :raises: :exc:`.VersionResolutionFailure` when the resolver raises an
             exception or returns an empty value.
    """
    try:
        version = resolver()
        version = u'' if version is None else str(version)
    except Exception as e:
        raise VersionResolutionFailure("Failed to resolve package version! (%s)" % e) from e
    version = version.strip()
    if not version:
        raise VersionResolutionFailure("Version resolver returned an empty version!")
    logger.debug("Resolved package version: %s", version)
    return version


def static_version(version):
    """
    Create a version resolver for a known version.

    :param version: The version (a string).
    :returns: A callable that returns `version`.
    """
    return functools.partial(str, version)


def version_from_file(filename):
    """
    Create a version resolver that reads the version from a text file.

    :param filename: The pathname of a UTF-8 encoded text file whose first
                     line contains the version (a string).
    :returns: A callable that returns the version.
    """
    def resolver():
        logger.debug("Reading version from %s ..", format_path(filename))
        with codecs.open(filename, 'r', 'UTF-8') as handle:
            return handle.readline()
    return resolver


def version_from_command(*command, **options):
    """
    Create a version resolver that captures the output of a command.

    :param command: The command to run (one or more strings, see
                    :func:`executor.execute()`).
    :param options: Additional keyword arguments for :func:`executor.execute()`
                    (for example ``directory``).
    :returns: A callable that returns the first line of the command's output.

    A command that exits with a nonzero status raises
    :exc:`executor.ExternalCommandFailed`, which :func:`resolve_version()`
    turns into :exc:`.VersionResolutionFailure`.
    """
    def resolver():
        output = execute(*command, capture=True, logger=logger, **options)
        lines = output.splitlines()
        return lines[0] if lines else u''
    return resolver
