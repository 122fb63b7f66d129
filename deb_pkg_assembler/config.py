# Debian package assembler: Configuration defaults.
#
# Last Change: October 19, 2026

"""Configuration defaults for the `deb-pkg-assembler` package."""

# Standard library modules.
import os
import tempfile

# External dependencies.
from humanfriendly import coerce_boolean, parse_path

# Public identifiers that require documentation.
__all__ = (
    "ALLOW_FAKEROOT",
    "DEBIAN_BINARY_VERSION",
    "DEFAULT_REVISION",
    "INSTALLED_SIZE_ROUNDING",
    "REPRODUCIBLE_MTIME",
    "ROUNDING_MODES",
    "default_temporary_directory",
)

DEBIAN_BINARY_VERSION = '2.0'
"""
The format version written to the ``debian-binary`` archive member (a string).

The member content is this string followed by a single linefeed.
"""

DEFAULT_REVISION = os.environ.get('DPA_REVISION', '1')
"""
The Debian revision used when the caller doesn't provide one (a string).

The environment variable ``$DPA_REVISION`` can be used to control the value
of this variable.
"""

default_temporary_directory = parse_path(os.environ.get(
    'DPA_TEMP_DIRECTORY', os.path.join(tempfile.gettempdir(), 'deb-pkg-assembler'),
))
"""
The pathname of the staging directory used by the command line interface (a string).

This directory is deleted and recreated on every run, so it should never be
shared between concurrent runs.

:default: The expanded value of ``$DPA_TEMP_DIRECTORY`` or the subdirectory
          ``deb-pkg-assembler`` of the system wide temporary directory.
"""

ROUNDING_MODES = ('nearest', 'ceiling')
"""The supported values of :data:`INSTALLED_SIZE_ROUNDING` (a tuple of strings)."""

INSTALLED_SIZE_ROUNDING = os.environ.get('DPA_INSTALLED_SIZE_ROUNDING', 'nearest')
"""
How :func:`.folder_size_kb()` rounds bytes to kibibytes (a string).

``nearest`` uses Python's :func:`round()` (halves round to even), ``ceiling``
rounds up the way :man:`dpkg-gencontrol` does. The environment variable
``$DPA_INSTALLED_SIZE_ROUNDING`` can be used to control the value of this
variable.
"""

ALLOW_FAKEROOT = coerce_boolean(os.environ.get('DPA_ALLOW_FAKEROOT', 'false'))
"""
:data:`True` to run the default compressor under :man:`fakeroot`,
:data:`False` otherwise (the default).

The default compressor already records ``root`` as the owner of all archived
files, so this is only needed for exotic :man:`tar` implementations. The
environment variable ``$DPA_ALLOW_FAKEROOT`` can be used to control the value
of this variable (see :func:`~humanfriendly.coerce_boolean()` for acceptable
values).
"""

REPRODUCIBLE_MTIME = os.environ.get('SOURCE_DATE_EPOCH')
"""
A fixed modification time for archive members (a string with a number of Unix
seconds or :data:`None`).

When set, this value is used in the header of every archive member instead of
the modification time of the staged file. The value is taken from the
`SOURCE_DATE_EPOCH`_ environment variable.

.. _SOURCE_DATE_EPOCH: https://reproducible-builds.org/specs/source-date-epoch/
"""
