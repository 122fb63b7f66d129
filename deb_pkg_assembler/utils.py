# Debian package assembler: Utility functions.
#
# Last Change: October 19, 2026

"""
Utility functions.

The functions in the :mod:`deb_pkg_assembler.utils` module deal with the
directory trees that go into a package: measuring their size (for the
``Installed-Size`` control field) and preparing staging directories.
"""

# Standard library modules.
import errno
import logging
import os
import shutil

# External dependencies.
from humanfriendly import format_path, format_size

# Modules included in our package.
from deb_pkg_assembler import config
from deb_pkg_assembler.exceptions import IOFailure

# Public identifiers that require documentation.
__all__ = (
    "check_directory",
    "folder_size",
    "folder_size_kb",
    "is_same_or_subdirectory",
    "logger",
    "makedirs",
    "reset_directory",
)

# Initialize a logger.
logger = logging.getLogger(__name__)


def makedirs(directory):
    """
    Create a directory and any missing parent directories.

    It is not an error if the directory already exists.

    :param directory: The pathname of a directory (a string).
    :returns: :data:`True` if the directory was created, :data:`False` if it already
              exists.
    """
    try:
        os.makedirs(directory)
        return True
    except OSError as e:
        if e.errno == errno.EEXIST:
            return False
        else:
            raise


def reset_directory(directory):
    """
    Make sure a directory exists and is empty.

    :param directory: The pathname of a directory (a string).

    An existing directory is removed together with its contents before it is
    recreated, which discards stale files from previous runs. Calling this
    function twice in a row has the same effect as calling it once.
    """
    if os.path.isdir(directory):
        logger.debug("Removing stale directory: %s", format_path(directory))
        shutil.rmtree(directory)
    makedirs(directory)


def check_directory(directory):
    """
    Make sure a directory exists.

    :param directory: The pathname of a directory (a string).
    :returns: The absolute pathname of the directory (a string).
    :raises: :exc:`.IOFailure` when the directory doesn't exist.
    """
    if not os.path.isdir(directory):
        raise IOFailure(errno.ENOENT, "Directory doesn't exist!", directory)
    return os.path.abspath(directory)


def is_same_or_subdirectory(pathname, directory):
    """
    Check whether a pathname is a directory or lies inside it.

    :param pathname: The pathname to check (a string, it doesn't need to exist).
    :param directory: The pathname of a directory (a string).
    :returns: :data:`True` if `pathname` equals `directory` or is nested
              inside it (after resolving symbolic links), :data:`False`
              otherwise.
    """
    pathname = os.path.realpath(pathname)
    directory = os.path.realpath(directory)
    return pathname == directory or pathname.startswith(directory.rstrip(os.sep) + os.sep)


def folder_size(directory):
    """
    Calculate the total size of the regular files in a directory tree.

    :param directory: The pathname of a directory (a string).
    :returns: The sum of the file sizes in bytes (an integer).
    :raises: :exc:`.IOFailure` when the directory doesn't exist.

    Directories and symbolic links don't contribute to the total.
    """
    total = 0
    for root, dirs, files in os.walk(check_directory(directory)):
        for filename in files:
            pathname = os.path.join(root, filename)
            if os.path.isfile(pathname) and not os.path.islink(pathname):
                total += os.path.getsize(pathname)
    logger.debug("Files in %s take up %s.", format_path(directory), format_size(total, binary=True))
    return total


def folder_size_kb(directory, rounding=None):
    """
    Calculate the installed size of a directory tree in kibibytes.

    :param directory: The pathname of a directory (a string).
    :param rounding: One of the strings in :data:`.ROUNDING_MODES` (defaults
                     to :data:`.INSTALLED_SIZE_ROUNDING`).
    :returns: The size in kibibytes (an integer).
    :raises: :exc:`.IOFailure` when the directory doesn't exist,
             :exc:`~exceptions.ValueError` when `rounding` isn't supported.

    The result is suitable for the Installed-Size_ control field.

    .. _Installed-Size: http://www.debian.org/doc/debian-policy/ch-controlfields.html#s-f-Installed-Size
    """
    rounding = rounding or config.INSTALLED_SIZE_ROUNDING
    if rounding not in config.ROUNDING_MODES:
        raise ValueError("Unsupported rounding mode! (%r)" % rounding)
    total = folder_size(directory)
    if rounding == 'ceiling':
        return (total + 1023) // 1024
    return int(round(total / 1024.0))
