# Debian package assembler: Compression of directory trees.
#
# Last Change: October 19, 2026

"""
Pluggable compression of directory trees into ``*.tar.gz`` files.

The assembler never compresses anything itself, it delegates to a compressor:
any object with a ``compress(source_directory, target_file)`` method. Plain
callables with the same signature are accepted as well (see
:func:`coerce_compressor()`).

The default compressor :class:`TarballCompressor` runs the external
:man:`tar` program using :pypi:`executor`.
"""

# Standard library modules.
import logging
import os

# External dependencies.
from executor import execute
from humanfriendly import Timer, format_path, format_size

# Modules included in our package.
from deb_pkg_assembler import config
from deb_pkg_assembler.exceptions import CompressionFailure

# Public identifiers that require documentation.
__all__ = (
    "CallableCompressor",
    "Compressor",
    "TarballCompressor",
    "coerce_compressor",
    "compress_directory",
    "logger",
)

# Initialize a logger.
logger = logging.getLogger(__name__)


def coerce_compressor(value):
    """
    Coerce a value to a compressor.

    :param value: A :class:`Compressor` object, any other object with a
                  ``compress()`` method, a callable or :data:`None` (in which
                  case a :class:`TarballCompressor` is returned).
    :returns: An object with a ``compress()`` method.
    :raises: :exc:`~exceptions.TypeError` when the value isn't supported.
    """
    if value is None:
        return TarballCompressor()
    elif callable(getattr(value, 'compress', None)):
        return value
    elif callable(value):
        return CallableCompressor(value)
    else:
        raise TypeError("Expected a compressor or a callable, got %r instead!" % value)


def compress_directory(compressor, source_directory, target_file):
    """
    Use a compressor to create a ``*.tar.gz`` file.

    :param compressor: A value accepted by :func:`coerce_compressor()`.
    :param source_directory: The pathname of the directory to compress (a string).
    :param target_file: The pathname of the file to create (a string).
    :raises: :exc:`.CompressionFailure` when the compressor raises an
             exception or doesn't create `target_file`.
    """
    compressor = coerce_compressor(compressor)
    timer = Timer()
    logger.debug("Compressing %s to %s ..", format_path(source_directory), format_path(target_file))
    try:
        compressor.compress(source_directory, target_file)
    except Exception as e:
        raise CompressionFailure("Failed to compress %s! (%s)" % (source_directory, e)) from e
    if not os.path.isfile(target_file):
        raise CompressionFailure("Compressor didn't create %s!" % target_file)
    logger.debug("Compressed %s to %s in %s.",
                 format_path(source_directory),
                 format_size(os.path.getsize(target_file), binary=True),
                 timer)


class Compressor(object):

    """Base class for compressors."""

    def compress(self, source_directory, target_file):
        """
        Compress a directory tree into a gzip compressed tarball.

        :param source_directory: The pathname of the directory to compress (a string).
        :param target_file: The pathname of the ``*.tar.gz`` file to create (a string).

        This method must be implemented by subclasses.
        """
        raise NotImplementedError()


class CallableCompressor(Compressor):

    """Adapter that turns a plain function into a :class:`Compressor`."""

    def __init__(self, function):
        """
        Initialize a :class:`CallableCompressor` object.

        :param function: A callable that takes the source directory and the
                         target file as positional arguments.
        """
        self.function = function

    def compress(self, source_directory, target_file):
        """Call the wrapped function."""
        self.function(source_directory, target_file)


class TarballCompressor(Compressor):

    """
    Compressor that runs ``tar --create --gzip``.

    The archive members are named relative to the source directory (``./...``)
    and owned by ``root`` (numeric ids zero), which is what :man:`dpkg`
    expects of the ``control.tar.gz`` and ``data.tar.gz`` members.
    """

    def __init__(self, program='tar', fakeroot=None):
        """
        Initialize a :class:`TarballCompressor` object.

        :param program: The name or pathname of the :man:`tar` program (a string).
        :param fakeroot: :data:`True` to run :man:`tar` under :man:`fakeroot`
                         (defaults to :data:`.ALLOW_FAKEROOT`).
        """
        self.program = program
        self.fakeroot = config.ALLOW_FAKEROOT if fakeroot is None else fakeroot

    def compress(self, source_directory, target_file):
        """
        Run :man:`tar` to compress `source_directory` into `target_file`.

        :raises: :exc:`executor.ExternalCommandFailed` when :man:`tar` fails.
        """
        execute(
            self.program, '--create', '--gzip',
            '--owner=0', '--group=0', '--numeric-owner',
            '--file=%s' % os.path.abspath(target_file),
            '--directory=%s' % os.path.abspath(source_directory),
            '.',
            fakeroot=self.fakeroot,
            logger=logger,
        )
