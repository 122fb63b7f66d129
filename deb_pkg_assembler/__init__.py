# Debian package assembler.
#
# Last Change: October 19, 2026

"""
The top-level :mod:`deb_pkg_assembler` module.

The :mod:`deb_pkg_assembler` module defines the `deb-pkg-assembler` version
number and the external programs that are required by the default compressor
(:class:`.TarballCompressor`). The assembly of the ``*.deb`` archive itself
doesn't depend on any Debian tooling. :man:`fakeroot` is only needed when
:data:`.ALLOW_FAKEROOT` is enabled.
"""

# Semi-standard module versioning.
__version__ = '1.0'

external_program_dependencies = (
    'tar',   # compression.TarballCompressor
    'gzip',  # tar --gzip
)
"""A tuple of strings with the external programs used by the default compressor."""
