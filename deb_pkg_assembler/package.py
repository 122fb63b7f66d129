# Debian package assembler: Package assembly.
#
# Last Change: October 19, 2026

"""
Assembly of Debian binary package archives (``*.deb`` files).

The :func:`build_package()` function creates a ``*.deb`` archive from two
directory trees that were prepared by a build pipeline:

- The *control* directory contains the ``control`` file and optionally
  maintainer scripts (``preinst``, ``postinst``, ``prerm``, ``postrm``) and
  other metadata files like ``conffiles``.

- The *data* directory contains the files to be installed, laid out relative
  to the root of the file system.

No Debian tooling (:man:`dpkg-deb`) is required: the outer ``ar`` archive is
encoded by :mod:`deb_pkg_assembler.archive` and the compression of the
directory trees is delegated to a pluggable compressor (see
:mod:`deb_pkg_assembler.compression`).
"""

# Standard library modules.
import logging
import os

# External dependencies.
from humanfriendly import Timer, format_path, format_size
from humanfriendly.text import pluralize

# Modules included in our package.
from deb_pkg_assembler import config
from deb_pkg_assembler.archive import ArchiveMember, encode_archive
from deb_pkg_assembler.compression import coerce_compressor, compress_directory
from deb_pkg_assembler.control import load_control_document
from deb_pkg_assembler.exceptions import AssemblyError, IOFailure, MissingControlProperty
from deb_pkg_assembler.utils import check_directory, folder_size_kb, is_same_or_subdirectory, reset_directory
from deb_pkg_assembler.version import resolve_version, static_version

# Public identifiers that require documentation.
__all__ = (
    "CONTROL_ARCHIVE",
    "CONTROL_FILE",
    "DATA_ARCHIVE",
    "DEBIAN_BINARY",
    "MEMBER_NAMES",
    "PackageAssembler",
    "build_package",
    "determine_package_archive",
    "logger",
    "update_control_document",
)

# Initialize a logger.
logger = logging.getLogger(__name__)

CONTROL_FILE = 'control'
"""The base name of the control file inside the control directory (a string)."""

DEBIAN_BINARY = 'debian-binary'
"""The name of the archive member that contains the format version (a string)."""

CONTROL_ARCHIVE = 'control.tar.gz'
"""The name of the archive member that contains the control directory (a string)."""

DATA_ARCHIVE = 'data.tar.gz'
"""The name of the archive member that contains the data directory (a string)."""

MEMBER_NAMES = (DEBIAN_BINARY, CONTROL_ARCHIVE, DATA_ARCHIVE)
"""
The names of the archive members in the order in which they're written (a
tuple of strings). :man:`dpkg` refuses packages that use a different order,
even though the ``ar`` format itself doesn't care.
"""


def build_package(control_directory, data_directory, output_directory, temporary_directory,
                  version_resolver, revision=None, compressor=None):
    """
    Create a Debian binary package archive.

    :param control_directory: The pathname of the directory with the
                              ``control`` file and maintainer scripts (a
                              string). The ``control`` file is updated in
                              place (see :func:`update_control_document()`).
    :param data_directory: The pathname of the directory with the files to
                           install (a string).
    :param output_directory: The pathname of the directory where the ``*.deb``
                             archive is created (a string).
    :param temporary_directory: The pathname of the staging directory (a
                                string). Any existing contents are deleted.
    :param version_resolver: A callable that returns the package version, or
                             the version itself (a string).
    :param revision: The Debian revision (a string, defaults to
                     :data:`.DEFAULT_REVISION`).
    :param compressor: A value accepted by :func:`.coerce_compressor()`
                       (defaults to :class:`.TarballCompressor`).
    :returns: The pathname of the generated ``*.deb`` archive.
    :raises: Any of the exceptions in :mod:`deb_pkg_assembler.exceptions`
             (file system errors are reported as :exc:`.IOFailure`), or
             :exc:`~exceptions.ValueError` for a staging directory that
             overlaps the control or data directory. Failures abort the
             assembly, so the output file may be left incomplete.
    """
    assembler = PackageAssembler(
        control_directory=control_directory,
        data_directory=data_directory,
        output_directory=output_directory,
        temporary_directory=temporary_directory,
        version_resolver=version_resolver,
        revision=revision,
        compressor=compressor,
    )
    return assembler.build()


def determine_package_archive(package, version, revision, architecture):
    """
    Determine the filename of a package archive.

    :param package: The name of the package (a string).
    :param version: The upstream version (a string).
    :param revision: The Debian revision (a string).
    :param architecture: The Debian architecture (a string).
    :returns: The filename of the ``*.deb`` archive (a string).

    >>> determine_package_archive('foo', '1.2.3', '001', 'amd64')
    'foo_1.2.3-001_amd64.deb'
    """
    return '%s_%s-%s_%s.deb' % (package, version, revision, architecture)


def update_control_document(document, version, data_directory):
    """
    Update the derived fields of a control document.

    :param document: A :class:`.ControlDocument` object.
    :param version: The package version (a string).
    :param data_directory: The pathname of the data directory (a string).
    :returns: A new :class:`.ControlDocument` object with updated ``Version``
              and Installed-Size_ fields.

    .. _Installed-Size: http://www.debian.org/doc/debian-policy/ch-controlfields.html#s-f-Installed-Size
    """
    logger.debug("Finding installed size of package ..")
    installed_size = folder_size_kb(data_directory)
    document = document.set_property('Version', version)
    document = document.set_property('Installed-Size', '%i' % installed_size)
    return document


class PackageAssembler(object):

    """
    Assemble Debian binary packages from prepared directory trees.

    The assembly runs through the following steps, in order, aborting on the
    first failure:

    1. Resolve the version and read ``Package`` and ``Architecture`` from
       the control file (:func:`resolve_metadata()`).
    2. Update ``Version`` and ``Installed-Size`` in the control file
       (:func:`patch_metadata()`).
    3. Reset the staging directory (:func:`stage()`).
    4. Compress the control and data directories and write the
       ``debian-binary`` file (:func:`compress()`).
    5. Write the ``ar`` archive (:func:`assemble()`).
    6. Log the members that were written (:func:`report()`).

    The staging directory is deleted and recreated by every run, so one
    :class:`PackageAssembler` must not be used by concurrent runs.
    """

    def __init__(self, control_directory, data_directory, output_directory, temporary_directory=None,
                 version_resolver=None, revision=None, compressor=None):
        """
        Initialize a :class:`PackageAssembler` object.

        Refer to :func:`build_package()` for the meaning of the arguments.
        The `temporary_directory` defaults to
        :data:`.default_temporary_directory`.
        """
        self.control_directory = control_directory
        self.data_directory = data_directory
        self.output_directory = output_directory
        self.temporary_directory = temporary_directory or config.default_temporary_directory
        if isinstance(version_resolver, str):
            version_resolver = static_version(version_resolver)
        self.version_resolver = version_resolver
        self.revision = revision or config.DEFAULT_REVISION
        self.compressor = coerce_compressor(compressor)

    @property
    def control_file(self):
        """The pathname of the control file (a string)."""
        return os.path.join(self.control_directory, CONTROL_FILE)

    def build(self):
        """
        Run all steps of the assembly.

        :returns: The pathname of the generated ``*.deb`` archive.
        :raises: :exc:`.IOFailure` for file system errors (the original
                 :exc:`~exceptions.EnvironmentError` is available as
                 ``__cause__``), :exc:`~exceptions.ValueError` when the
                 staging directory overlaps the control or data directory,
                 the exceptions of the individual steps otherwise.
        """
        timer = Timer()
        try:
            self.check_directories()
            document, package, version, architecture = self.resolve_metadata()
            self.patch_metadata(document, version)
            self.stage()
            self.compress()
            filename = os.path.join(self.output_directory, determine_package_archive(
                package, version, self.revision, architecture,
            ))
            members = self.assemble(filename)
        except AssemblyError:
            raise
        except EnvironmentError as e:
            raise IOFailure(e.errno, e.strerror or str(e), e.filename) from e
        self.report(filename, members)
        logger.info("Finished building %s in %s.", format_path(filename), timer)
        return filename

    def check_directories(self):
        """
        Make sure the directories used by the assembly are usable.

        :raises: :exc:`.IOFailure` when the control, data or output directory
                 doesn't exist, :exc:`~exceptions.ValueError` when the staging
                 directory is (inside) the control or data directory, because
                 :func:`stage()` would delete that directory.
        """
        check_directory(self.control_directory)
        check_directory(self.data_directory)
        check_directory(self.output_directory)
        for directory in (self.control_directory, self.data_directory):
            if is_same_or_subdirectory(self.temporary_directory, directory):
                msg = "Refusing to stage in %s because it would delete %s!"
                raise ValueError(msg % (self.temporary_directory, directory))

    def resolve_metadata(self):
        """
        Get the package metadata that determines the archive filename.

        :returns: A tuple with four values: the :class:`.ControlDocument`,
                  the package name, the version and the architecture.
        :raises: :exc:`.VersionResolutionFailure` when the version can't be
                 resolved, :exc:`.MissingControlProperty` when the control
                 file doesn't define ``Package`` or ``Architecture``.
        """
        version = resolve_version(self.version_resolver)
        document = load_control_document(self.control_file)
        package = document.read_property('Package')
        if not package:
            raise MissingControlProperty('Package', self.control_file)
        architecture = document.read_property('Architecture')
        if not architecture:
            raise MissingControlProperty('Architecture', self.control_file)
        logger.debug("Package %s version %s for architecture %s.", package, version, architecture)
        return document, package, version, architecture

    def patch_metadata(self, document, version):
        """
        Update and save the control file.

        :param document: The :class:`.ControlDocument` loaded by
                         :func:`resolve_metadata()`.
        :param version: The resolved version (a string).
        :returns: The updated :class:`.ControlDocument`.
        """
        document = update_control_document(document, version, self.data_directory)
        document.save(self.control_file)
        return document

    def stage(self):
        """Delete and recreate the staging directory."""
        logger.debug("Preparing staging directory: %s", format_path(self.temporary_directory))
        reset_directory(self.temporary_directory)

    def compress(self):
        """Create the files of the three archive members in the staging directory."""
        compress_directory(
            self.compressor,
            self.control_directory,
            os.path.join(self.temporary_directory, CONTROL_ARCHIVE),
        )
        compress_directory(
            self.compressor,
            self.data_directory,
            os.path.join(self.temporary_directory, DATA_ARCHIVE),
        )
        with open(os.path.join(self.temporary_directory, DEBIAN_BINARY), 'wb') as handle:
            handle.write(('%s\n' % config.DEBIAN_BINARY_VERSION).encode('ascii'))

    def assemble(self, filename):
        """
        Write the ``ar`` archive.

        :param filename: The pathname of the ``*.deb`` archive (a string).
        :returns: A list of :class:`.ArchiveMember` objects in archive order.

        The magic string and the encoded members are joined in memory and
        written to `filename` in a single sequential write.
        """
        members = [
            ArchiveMember.from_file(os.path.join(self.temporary_directory, name), name=name)
            for name in MEMBER_NAMES
        ]
        logger.debug("Writing %s to %s ..", pluralize(len(members), "archive member"), format_path(filename))
        with open(filename, 'wb') as handle:
            handle.write(encode_archive(members))
        return members

    def report(self, filename, members):
        """
        Log the members of a generated archive.

        :param filename: The pathname of the ``*.deb`` archive (a string).
        :param members: The result of :func:`assemble()`.
        """
        for member in members:
            logger.info("Added member %s (%s) to %s.", member.name,
                        format_size(member.size, binary=True),
                        format_path(filename))
