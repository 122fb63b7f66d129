# Debian package assembler: Automated tests.
#
# Last Change: October 19, 2026

"""Test suite for the `deb-pkg-assembler` package."""

# Standard library modules.
import functools
import io
import logging
import os
import shutil
import tarfile
import tempfile

# External dependencies.
from executor import which
from humanfriendly import format_size
from humanfriendly.testing import PatchedAttribute, TestCase, run_cli

# Modules included in our package.
from deb_pkg_assembler import config, external_program_dependencies
from deb_pkg_assembler.archive import (
    ARCHIVE_MAGIC,
    HEADER_SIZE,
    ArchiveMember,
    encode_archive,
    encode_member,
    inspect_archive,
    parse_archive,
)
from deb_pkg_assembler.cli import main
from deb_pkg_assembler.compression import (
    CallableCompressor,
    TarballCompressor,
    coerce_compressor,
    compress_directory,
)
from deb_pkg_assembler.control import (
    ControlDocument,
    load_control_document,
    patch_control_file,
    split_lines,
)
from deb_pkg_assembler.exceptions import (
    AssemblyError,
    CompressionFailure,
    IOFailure,
    MissingControlProperty,
    VersionResolutionFailure,
)
from deb_pkg_assembler.package import (
    MEMBER_NAMES,
    PackageAssembler,
    build_package,
    determine_package_archive,
)
from deb_pkg_assembler.utils import folder_size_kb, makedirs, reset_directory
from deb_pkg_assembler.version import (
    resolve_version,
    static_version,
    version_from_command,
    version_from_file,
)

# Initialize a logger.
logger = logging.getLogger(__name__)

# Configuration defaults.
TEST_CONTROL_TEXT = 'Package: foo\nArchitecture: amd64\n'
TEST_PACKAGE_FILENAME = 'foo_1.2.3-001_amd64.deb'


class DebPkgAssemblerTestCase(TestCase):

    """Container for the `deb-pkg-assembler` test suite."""

    def test_makedirs(self):
        """Test that makedirs() can deal with race conditions."""
        with Context() as finalizers:
            parent = finalizers.mkdtemp()
            child = os.path.join(parent, 'nested')
            # This will create the directory.
            assert makedirs(child) is True
            # This should not complain that the directory already exists.
            assert makedirs(child) is False

    def test_reset_directory(self):
        """Test that reset_directory() discards stale files and is idempotent."""
        with Context() as finalizers:
            directory = os.path.join(finalizers.mkdtemp(), 'staging')
            # A directory that doesn't exist yet is created.
            reset_directory(directory)
            assert os.path.isdir(directory)
            write_file(os.path.join(directory, 'stale', 'file'), b'')
            reset_directory(directory)
            assert os.listdir(directory) == []
            reset_directory(directory)
            assert os.listdir(directory) == []

    def test_line_splitting(self):
        """Test that all line terminators are recognized."""
        assert split_lines('a\r\nb\rc\nd') == ['a', 'b', 'c', 'd']
        assert split_lines('a\n\nb\n') == ['a', '', 'b']
        assert split_lines('') == []

    def test_read_property(self):
        """Test reading of control properties."""
        document = ControlDocument.parse(dedent_control('''
            Package: foo
            Architecture:   amd64
            Description: Example package
             Continuation line mentioning Package: bar
        '''))
        assert document.read_property('Package') == 'foo'
        assert document.read_property('Architecture') == 'amd64'
        # Missing keys silently result in an empty string.
        assert document.read_property('Version') == ''
        # Matching is literal and case sensitive.
        assert document.read_property('package') == ''

    def test_set_property_round_trip(self):
        """Test that a property that was set can be read back."""
        document = ControlDocument.parse(TEST_CONTROL_TEXT)
        for value in ('1.0', '2:1.0~rc1+dfsg', ''):
            assert document.set_property('Package', value).read_property('Package') == value
        # The original document isn't modified.
        assert document.read_property('Package') == 'foo'

    def test_set_property_preserves_order(self):
        """Test that setting a property doesn't reorder lines."""
        document = ControlDocument.parse('Package: foo\n# comment\nVersion: 0\nArchitecture: all\n')
        patched = document.set_property('Version', '1.2.3')
        assert patched.lines == ('Package: foo', '# comment', 'Version: 1.2.3', 'Architecture: all')

    def test_set_property_appends_missing_key(self):
        """Test that setting a property that doesn't exist appends a line."""
        document = ControlDocument.parse(TEST_CONTROL_TEXT).set_property('Installed-Size', 42)
        assert document.lines[-1] == 'Installed-Size: 42'
        assert document.read_property('Installed-Size') == '42'

    def test_duplicate_keys(self):
        """Test that writes affect all matching lines while reads only see the first."""
        document = ControlDocument.parse('Depends: a\nPackage: foo\nDepends: b\n')
        assert document.read_property('Depends') == 'a'
        patched = document.set_property('Depends', 'c')
        assert patched.lines == ('Depends: c', 'Package: foo', 'Depends: c')
        assert patched.read_property('Depends') == 'c'
        assert patched.properties == [('Depends', 'c'), ('Package', 'foo'), ('Depends', 'c')]

    def test_line_ending_normalization(self):
        """Test that control files are written with linefeeds only."""
        with Context() as finalizers:
            control_file = os.path.join(finalizers.mkdtemp(), 'control')
            with open(control_file, 'wb') as handle:
                handle.write(b'Package: foo\r\nArchitecture: amd64\rDescription: x\r\n')
            document = load_control_document(control_file)
            document.set_property('Version', '1').save()
            with open(control_file, 'rb') as handle:
                assert handle.read() == b'Package: foo\nArchitecture: amd64\nDescription: x\nVersion: 1\n'

    def test_save_without_filename(self):
        """Test that saving a document needs a filename."""
        self.assertRaises(ValueError, ControlDocument.parse(TEST_CONTROL_TEXT).save)

    def test_load_missing_control_file(self):
        """Test that loading a missing control file raises IOFailure."""
        self.assertRaises(IOFailure, load_control_document, '/a/file/that/will/never/exist')

    def test_patch_control_file(self):
        """Test that patch_control_file() persists the patched document."""
        with Context() as finalizers:
            control_file = os.path.join(finalizers.mkdtemp(), 'control')
            with open(control_file, 'w') as handle:
                handle.write(TEST_CONTROL_TEXT)
            patch_control_file(control_file, [('Version', '1.2.3'), ('Architecture', 'armhf')])
            document = load_control_document(control_file)
            assert document.read_property('Version') == '1.2.3'
            assert document.read_property('Architecture') == 'armhf'
            assert document.read_property('Package') == 'foo'

    def test_folder_size(self):
        """Test the calculation of the installed size."""
        with Context() as finalizers:
            directory = finalizers.mkdtemp()
            assert folder_size_kb(directory) == 0
            write_file(os.path.join(directory, 'a'), b'x' * 512)
            # Halves round to even.
            assert folder_size_kb(directory) == 0
            assert folder_size_kb(directory, rounding='ceiling') == 1
            write_file(os.path.join(directory, 'nested', 'deeper', 'b'), b'x' * 1024)
            assert folder_size_kb(directory) == 2
            write_file(os.path.join(directory, 'c'), b'x' * 1024)
            assert folder_size_kb(directory) == 2
            # Symbolic links don't contribute to the total.
            os.symlink(os.path.join(directory, 'c'), os.path.join(directory, 'd'))
            assert folder_size_kb(directory) == 2
            self.assertRaises(ValueError, folder_size_kb, directory, rounding='floor')

    def test_folder_size_monotonicity(self):
        """Test that adding files never decreases the installed size."""
        with Context() as finalizers:
            directory = finalizers.mkdtemp()
            previous = folder_size_kb(directory)
            for i, size in enumerate((10, 500, 1, 3000, 0, 100000)):
                write_file(os.path.join(directory, 'file-%i' % i), b'x' * size)
                current = folder_size_kb(directory)
                assert current >= previous
                previous = current

    def test_folder_size_missing_directory(self):
        """Test that a missing directory raises IOFailure."""
        self.assertRaises(IOFailure, folder_size_kb, '/a/directory/that/will/never/exist')

    def test_member_header_layout(self):
        """Test the fixed width layout of member headers."""
        member = ArchiveMember.create('debian-binary', b'2.0\n', modified=1234567890)
        header = member.header
        assert len(header) == HEADER_SIZE
        assert header[0:16] == b'debian-binary   '
        assert header[16:28] == b'1234567890  '
        assert header[28:34] == b'0     '
        assert header[34:40] == b'0     '
        assert header[40:48] == b'100644  '
        assert header[48:58] == b'4         '
        assert header[58:60] == b'\x60\x0a'
        assert member.encode() == header + b'2.0\n'

    def test_member_padding(self):
        """Test that members are padded to an even length."""
        for size in range(10):
            member = ArchiveMember.create('data.tar.gz', b'x' * size)
            encoded = member.encode()
            assert len(encoded) % 2 == 0
            assert len(encoded) == HEADER_SIZE + size + (size % 2)
            assert int(encoded[48:58]) == size

    def test_odd_member_padding(self):
        """Test that a nine byte member gets exactly one trailing linefeed."""
        encoded = ArchiveMember.create('control.tar.gz', b'123456789').encode()
        assert len(encoded) == HEADER_SIZE + 10
        assert encoded[-2:] == b'9\n'
        assert encoded[48:58].strip() == b'9'

    def test_member_field_overflow(self):
        """Test that values that don't fit in their field are rejected."""
        self.assertRaises(ValueError, ArchiveMember.create('a-name-longer-than-16', b'').encode)
        self.assertRaises(ValueError, ArchiveMember.create('', b'').encode)
        self.assertRaises(ValueError, ArchiveMember.create('name', b'', modified=-1).encode)
        self.assertRaises(ValueError, ArchiveMember.create('name', b'', modified=10 ** 12).encode)

    def test_encode_member_from_file(self):
        """Test encoding a file as an archive member."""
        with Context() as finalizers:
            filename = os.path.join(finalizers.mkdtemp(), 'debian-binary')
            write_file(filename, b'2.0\n')
            os.utime(filename, (1500000000, 1500000000))
            with PatchedAttribute(config, 'REPRODUCIBLE_MTIME', None):
                encoded = encode_member(filename)
            assert encoded.startswith(b'debian-binary   1500000000  ')
            with PatchedAttribute(config, 'REPRODUCIBLE_MTIME', '42'):
                encoded = encode_member(filename, name='renamed')
            assert encoded.startswith(b'renamed         42          ')

    def test_archive_parsing(self):
        """Test that encoded archives can be parsed."""
        members = [
            ArchiveMember.create('debian-binary', b'2.0\n', modified=1),
            ArchiveMember.create('control.tar.gz', b'odd', modified=2),
            ArchiveMember.create('data.tar.gz', b'', modified=3),
        ]
        data = encode_archive(members)
        assert data.startswith(ARCHIVE_MAGIC)
        assert parse_archive(data) == members

    def test_archive_parsing_errors(self):
        """Test that malformed archives are rejected."""
        member = ArchiveMember.create('debian-binary', b'2.0\n').encode()
        self.assertRaises(ValueError, parse_archive, b'not an archive')
        self.assertRaises(ValueError, parse_archive, ARCHIVE_MAGIC + member[:30])
        self.assertRaises(ValueError, parse_archive, ARCHIVE_MAGIC + member[:58] + b'XX' + member[60:])
        self.assertRaises(ValueError, parse_archive, ARCHIVE_MAGIC + member[:-2])

    def test_version_resolution(self):
        """Test the version resolvers."""
        assert resolve_version(static_version(' 1.2.3\n')) == '1.2.3'
        assert resolve_version(version_from_command('echo 4.5.6')) == '4.5.6'
        with Context() as finalizers:
            filename = os.path.join(finalizers.mkdtemp(), 'VERSION')
            write_file(filename, b'7.8.9\nignored\n')
            assert resolve_version(version_from_file(filename)) == '7.8.9'
            self.assertRaises(VersionResolutionFailure, resolve_version,
                              version_from_file(os.path.join(os.path.dirname(filename), 'missing')))

    def test_version_resolution_errors(self):
        """Test that resolver failures are reported as VersionResolutionFailure."""
        def broken():
            raise RuntimeError("no version")
        try:
            resolve_version(broken)
            assert False, "Expected VersionResolutionFailure!"
        except VersionResolutionFailure as e:
            assert isinstance(e.__cause__, RuntimeError)
        self.assertRaises(VersionResolutionFailure, resolve_version, lambda: '  ')
        self.assertRaises(VersionResolutionFailure, resolve_version, lambda: None)
        self.assertRaises(VersionResolutionFailure, resolve_version, version_from_command('false'))

    def test_version_coercion(self):
        """Test that resolvers may return values other than strings."""
        assert resolve_version(lambda: 1) == '1'
        assert resolve_version(lambda: 2.5) == '2.5'

    def test_compressor_coercion(self):
        """Test the accepted compressor values."""
        assert isinstance(coerce_compressor(None), TarballCompressor)
        assert isinstance(coerce_compressor(tarfile_compressor), CallableCompressor)
        compressor = TarballCompressor()
        assert coerce_compressor(compressor) is compressor
        self.assertRaises(TypeError, coerce_compressor, 42)

    def test_compression_errors(self):
        """Test that compressor failures are reported as CompressionFailure."""
        def broken(source_directory, target_file):
            raise RuntimeError("disk full")
        with Context() as finalizers:
            source = finalizers.mkdtemp()
            target = os.path.join(finalizers.mkdtemp(), 'data.tar.gz')
            try:
                compress_directory(broken, source, target)
                assert False, "Expected CompressionFailure!"
            except CompressionFailure as e:
                assert isinstance(e.__cause__, RuntimeError)
            # A compressor that silently does nothing is a failure as well.
            self.assertRaises(CompressionFailure, compress_directory, lambda s, t: None, source, target)

    def test_tarball_compressor(self):
        """Test the default compressor based on the external ``tar`` program."""
        if not all(map(which, external_program_dependencies)):
            return self.skipTest("tar and gzip programs not available")
        with Context() as finalizers:
            source = finalizers.mkdtemp()
            write_file(os.path.join(source, 'usr', 'bin', 'hello'), b'#!/bin/sh\n')
            target = os.path.join(finalizers.mkdtemp(), 'data.tar.gz')
            compress_directory(TarballCompressor(), source, target)
            with tarfile.open(target, 'r:gz') as archive:
                names = archive.getnames()
                assert './usr/bin/hello' in names
                assert all(m.uid == 0 and m.gid == 0 for m in archive.getmembers())

    def test_filename_convention(self):
        """Test the naming of package archives."""
        assert determine_package_archive('foo', '1.2.3', '001', 'amd64') == TEST_PACKAGE_FILENAME

    def test_package_building(self):
        """Test building of Debian binary packages."""
        with Context() as finalizers:
            control_directory, data_directory = create_package_template(finalizers)
            output_directory = finalizers.mkdtemp()
            temporary_directory = os.path.join(finalizers.mkdtemp(), 'staging')
            # Stale files in the staging directory are discarded.
            write_file(os.path.join(temporary_directory, 'stale-file'), b'stale')
            package_file = build_package(
                control_directory=control_directory,
                data_directory=data_directory,
                output_directory=output_directory,
                temporary_directory=temporary_directory,
                version_resolver=lambda: '1.2.3',
                revision='001',
                compressor=tarfile_compressor,
            )
            assert package_file == os.path.join(output_directory, TEST_PACKAGE_FILENAME)
            assert not os.path.exists(os.path.join(temporary_directory, 'stale-file'))
            # The control file was updated in place.
            document = load_control_document(os.path.join(control_directory, 'control'))
            assert document.read_property('Version') == '1.2.3'
            assert int(document.read_property('Installed-Size')) >= 0
            assert document.read_property('Package') == 'foo'
            # Check the magic string and the order of the members.
            with open(package_file, 'rb') as handle:
                assert handle.read(8) == b'!<arch>\n'
            members = inspect_archive(package_file)
            assert tuple(m.name for m in members) == MEMBER_NAMES
            assert members[0].content == b'2.0\n'
            assert all(m.owner == 0 and m.group == 0 and m.mode == 0o100644 for m in members)
            # Check the contents of the tarballs.
            assert './control' in list_tarball(members[1].content)
            assert './usr/bin/foo' in list_tarball(members[2].content)

    def test_package_rebuilding(self):
        """Test that a second build overwrites the first one."""
        with Context() as finalizers:
            control_directory, data_directory = create_package_template(finalizers)
            output_directory = finalizers.mkdtemp()
            assembler = PackageAssembler(
                control_directory=control_directory,
                data_directory=data_directory,
                output_directory=output_directory,
                temporary_directory=os.path.join(finalizers.mkdtemp(), 'staging'),
                version_resolver='1.2.3',
                revision='001',
                compressor=tarfile_compressor,
            )
            first = assembler.build()
            write_file(os.path.join(data_directory, 'usr', 'share', 'foo', 'big'), b'x' * 4096)
            second = assembler.build()
            assert first == second
            assert os.listdir(output_directory) == [TEST_PACKAGE_FILENAME]
            document = load_control_document(assembler.control_file)
            assert document.read_property('Installed-Size') == '4'
            assert len([p for p in document.properties if p[0] == 'Version']) == 1

    def test_missing_control_properties(self):
        """Test that Package and Architecture are required."""
        for text, name in (('Architecture: amd64\n', 'Package'), ('Package: foo\nArchitecture:\n', 'Architecture')):
            with Context() as finalizers:
                control_directory, data_directory = create_package_template(finalizers, control_text=text)
                output_directory = finalizers.mkdtemp()
                try:
                    build_package(control_directory, data_directory, output_directory,
                                  os.path.join(finalizers.mkdtemp(), 'staging'),
                                  static_version('1.0'), compressor=tarfile_compressor)
                    assert False, "Expected MissingControlProperty!"
                except MissingControlProperty as e:
                    assert e.name == name
                assert os.listdir(output_directory) == []

    def test_assembly_failures(self):
        """Test that failures abort the assembly."""
        def broken_version():
            raise IOError("version file unreadable")

        def broken_compressor(source_directory, target_file):
            raise RuntimeError("compression failed")
        with Context() as finalizers:
            control_directory, data_directory = create_package_template(finalizers)
            output_directory = finalizers.mkdtemp()
            staging = os.path.join(finalizers.mkdtemp(), 'staging')
            self.assertRaises(VersionResolutionFailure, build_package,
                              control_directory, data_directory, output_directory, staging,
                              broken_version, '001', tarfile_compressor)
            self.assertRaises(CompressionFailure, build_package,
                              control_directory, data_directory, output_directory, staging,
                              '1.2.3', '001', broken_compressor)
            self.assertRaises(IOFailure, build_package,
                              control_directory, '/a/directory/that/will/never/exist', output_directory,
                              staging, '1.2.3', '001', tarfile_compressor)
            assert os.listdir(output_directory) == []

    def test_file_system_failures(self):
        """Test that operating system errors during assembly are reported as IOFailure."""
        with Context() as finalizers:
            control_directory, data_directory = create_package_template(finalizers)
            output_directory = finalizers.mkdtemp()
            # A directory in the place of the archive can't be opened for writing.
            os.mkdir(os.path.join(output_directory, TEST_PACKAGE_FILENAME))
            try:
                build_package(control_directory, data_directory, output_directory,
                              os.path.join(finalizers.mkdtemp(), 'staging'),
                              '1.2.3', '001', tarfile_compressor)
                assert False, "Expected IOFailure!"
            except IOFailure as e:
                assert isinstance(e, AssemblyError)
                assert isinstance(e, EnvironmentError)
                assert isinstance(e.__cause__, EnvironmentError)
                assert e.filename == os.path.join(output_directory, TEST_PACKAGE_FILENAME)

    def test_overlapping_staging_directory(self):
        """Test that the staging directory can't replace the control or data directory."""
        with Context() as finalizers:
            control_directory, data_directory = create_package_template(finalizers)
            output_directory = finalizers.mkdtemp()
            for staging in (data_directory, os.path.join(control_directory, 'staging')):
                self.assertRaises(ValueError, build_package,
                                  control_directory, data_directory, output_directory,
                                  staging, '1.2.3', '001', tarfile_compressor)
            assert os.path.isfile(os.path.join(data_directory, 'usr', 'bin', 'foo'))
            assert os.path.isfile(os.path.join(control_directory, 'control'))
            assert os.listdir(output_directory) == []

    def test_member_reporting(self):
        """Test that every archive member that was written is logged."""
        with Context() as finalizers:
            control_directory, data_directory = create_package_template(finalizers)
            output_directory = finalizers.mkdtemp()
            with self.assertLogs('deb_pkg_assembler.package', level='INFO') as captured:
                package_file = build_package(
                    control_directory, data_directory, output_directory,
                    os.path.join(finalizers.mkdtemp(), 'staging'),
                    '1.2.3', '001', tarfile_compressor,
                )
            messages = [record.getMessage() for record in captured.records]
            added = [m for m in messages if m.startswith("Added member")]
            members = inspect_archive(package_file)
            assert len(added) == len(MEMBER_NAMES) == len(members)
            for message, member in zip(added, members):
                assert message.startswith("Added member %s " % member.name)
                assert format_size(member.size, binary=True) in message
            assert messages[-1].startswith("Finished building")

    def test_command_line_interface(self):
        """Test the command line interface."""
        if not all(map(which, external_program_dependencies)):
            return self.skipTest("tar and gzip programs not available")
        with Context() as finalizers:
            control_directory, data_directory = create_package_template(finalizers)
            output_directory = finalizers.mkdtemp()
            returncode, output = run_cli(
                main,
                '--output=%s' % output_directory,
                '--temp=%s' % os.path.join(finalizers.mkdtemp(), 'staging'),
                '--version=1.2.3',
                '--revision=001',
                control_directory, data_directory,
            )
            assert returncode == 0
            package_file = os.path.join(output_directory, TEST_PACKAGE_FILENAME)
            assert os.path.isfile(package_file)
            returncode, output = run_cli(main, '--inspect=%s' % package_file)
            assert returncode == 0
            for name in MEMBER_NAMES:
                assert name in output

    def test_command_line_errors(self):
        """Test that the command line interface reports errors."""
        with Context() as finalizers:
            control_directory, data_directory = create_package_template(finalizers)
            # The version is mandatory.
            returncode, output = run_cli(main, control_directory, data_directory)
            assert returncode != 0
            # Both directories are mandatory.
            returncode, output = run_cli(main, '--version=1', control_directory)
            assert returncode != 0
            # Non-existing directories are rejected.
            returncode, output = run_cli(main, '--version=1', control_directory, '/a/directory/that/will/never/exist')
            assert returncode != 0
        # Without arguments the usage message is shown.
        returncode, output = run_cli(main)
        assert returncode == 0
        assert 'Usage: deb-pkg-assembler' in output


def tarfile_compressor(source_directory, target_file):
    """Compressor for the test suite that doesn't depend on external programs."""
    with tarfile.open(target_file, 'w:gz') as archive:
        archive.add(source_directory, arcname='.')


def list_tarball(content):
    """Get the member names of an in-memory ``*.tar.gz`` file."""
    with tarfile.open(fileobj=io.BytesIO(content), mode='r:gz') as archive:
        return archive.getnames()


def create_package_template(finalizers, control_text=TEST_CONTROL_TEXT):
    """Create a control directory and a data directory with a ten byte file."""
    control_directory = finalizers.mkdtemp()
    data_directory = finalizers.mkdtemp()
    write_file(os.path.join(control_directory, 'control'), control_text.encode('UTF-8'))
    write_file(os.path.join(data_directory, 'usr', 'bin', 'foo'), b'0123456789')
    return control_directory, data_directory


def write_file(filename, content):
    """Create a file (and its parent directories) with the given content."""
    makedirs(os.path.dirname(filename))
    with open(filename, 'wb') as handle:
        handle.write(content)


def dedent_control(text):
    """Strip the indentation of a control file literal, keeping continuation lines indented."""
    lines = [line for line in text.splitlines() if line.strip()]
    indent = min(len(line) - len(line.lstrip()) for line in lines)
    return ''.join(line[indent:] + '\n' for line in lines)


class Context(object):

    """Context manager for simple and reliable finalizers."""

    def __init__(self):
        """Initialize a :class:`Context` object."""
        self.finalizers = []

    def __enter__(self):
        """Enter the context."""
        return self

    def __exit__(self, exc_type=None, exc_value=None, traceback=None):
        """Leave the context (running the finalizers)."""
        for finalizer in reversed(self.finalizers):
            finalizer()
        self.finalizers = []

    def register(self, *args, **kw):
        """Register a finalizer."""
        self.finalizers.append(functools.partial(*args, **kw))

    def mkdtemp(self, *args, **kw):
        """Create a temporary directory that will be cleaned up when the context ends."""
        directory = tempfile.mkdtemp(*args, **kw)
        self.register(shutil.rmtree, directory, ignore_errors=True)
        return directory
