# Debian package assembler: Unix archive encoding.
#
# Last Change: October 19, 2026

"""
Encoding and decoding of Unix ``ar`` archives.

A Debian binary package is an ``ar`` archive: the 8 byte magic string
``!<arch>\\n`` followed by a sequence of members. Every member starts with a
fixed width header of 60 ASCII bytes:

==============  =====  ===================================================
Field           Width  Value written by :func:`encode_member()`
==============  =====  ===================================================
name            16     The member name (at most 16 characters)
modified        12     Modification time in Unix seconds (decimal)
owner           6      ``0``
group           6      ``0``
mode            8      ``100644`` (the octal file mode, as text)
size            10     Size of the content in bytes (decimal)
end marker      2      The bytes ``0x60 0x0A``
==============  =====  ===================================================

All fields are left justified and padded with spaces. The header is followed
by the content of the member and, when the content has an odd length, a single
linefeed that keeps the next member on an even offset. The pad byte is never
counted in the size field.
"""

# Standard library modules.
import collections
import logging
import os

# External dependencies.
from humanfriendly import format_path, format_size
from humanfriendly.text import compact

# Modules included in our package.
from deb_pkg_assembler import config

# Public identifiers that require documentation.
__all__ = (
    "ARCHIVE_MAGIC",
    "ArchiveMember",
    "END_OF_HEADER",
    "HEADER_SIZE",
    "MEMBER_FILE_MODE",
    "encode_archive",
    "encode_member",
    "inspect_archive",
    "logger",
    "parse_archive",
)

# Initialize a logger.
logger = logging.getLogger(__name__)

ARCHIVE_MAGIC = b'!<arch>\n'
"""The magic string at the start of every ``ar`` archive (a byte string)."""

END_OF_HEADER = b'`\n'
"""The two bytes that terminate every member header (a byte string)."""

HEADER_SIZE = 60
"""The size of a member header in bytes, including :data:`END_OF_HEADER` (an integer)."""

MEMBER_FILE_MODE = 0o100644
"""The file mode recorded for every member (an integer, rendered in octal)."""

PADDING = b'\n'
"""The byte appended to members with an odd content length (a byte string)."""

HEADER_FIELDS = (
    ('name', 16),
    ('modified', 12),
    ('owner', 6),
    ('group', 6),
    ('mode', 8),
    ('size', 10),
)
"""The names and widths of the fields in a member header (a tuple of tuples)."""


def encode_member(filename, name=None, modified=None):
    """
    Encode a file as an archive member.

    :param filename: The pathname of the file to encode (a string).
    :param name: The member name (a string, defaults to the base name of
                 `filename`).
    :param modified: The modification time in Unix seconds (an integer,
                     defaults to the value of :data:`.REPRODUCIBLE_MTIME` or
                     the modification time of `filename`).
    :returns: The header, content and padding (a byte string).
    """
    return ArchiveMember.from_file(filename, name=name, modified=modified).encode()


def encode_archive(members):
    """
    Encode an ``ar`` archive.

    :param members: An iterable of :class:`ArchiveMember` objects.
    :returns: The magic string followed by the encoded members, in the order
              given (a byte string).
    """
    chunks = [ARCHIVE_MAGIC]
    chunks.extend(m.encode() for m in members)
    return b''.join(chunks)


def parse_archive(data):
    """
    Decode an ``ar`` archive.

    :param data: The contents of the archive (a byte string).
    :returns: A list of :class:`ArchiveMember` objects in archive order.
    :raises: :exc:`~exceptions.ValueError` when the data isn't a well formed
             ``ar`` archive (missing magic string, malformed header, truncated
             member).
    """
    if not data.startswith(ARCHIVE_MAGIC):
        raise ValueError("Data doesn't start with the 'ar' magic string!")
    members = []
    offset = len(ARCHIVE_MAGIC)
    while offset < len(data):
        header = data[offset:offset + HEADER_SIZE]
        if len(header) < HEADER_SIZE:
            raise ValueError("Truncated member header at offset %i!" % offset)
        if header[-len(END_OF_HEADER):] != END_OF_HEADER:
            raise ValueError("Invalid end of header marker at offset %i!" % offset)
        fields = {}
        position = 0
        for field_name, width in HEADER_FIELDS:
            fields[field_name] = header[position:position + width].decode('ascii').rstrip(' ')
            position += width
        size = int(fields['size'])
        start = offset + HEADER_SIZE
        content = data[start:start + size]
        if len(content) < size:
            raise ValueError(compact(
                "Member {name} claims {size} bytes of content but only {available} are available!",
                name=repr(fields['name']), size=size, available=len(content),
            ))
        members.append(ArchiveMember(
            # GNU ar terminates member names with a slash.
            name=fields['name'].rstrip('/'),
            modified=int(fields['modified'] or 0),
            owner=int(fields['owner'] or 0),
            group=int(fields['group'] or 0),
            mode=int(fields['mode'] or '0', 8),
            content=content,
        ))
        offset = start + size + (size % 2)
    return members


def inspect_archive(filename):
    """
    Get the members of an ``ar`` archive file.

    :param filename: The pathname of an existing ``*.deb`` archive (a string).
    :returns: A list of :class:`ArchiveMember` objects in archive order.
    :raises: See :func:`parse_archive()`.
    """
    logger.debug("Inspecting archive: %s", format_path(filename))
    with open(filename, 'rb') as handle:
        return parse_archive(handle.read())


class ArchiveMember(collections.namedtuple('ArchiveMember', 'name, modified, owner, group, mode, content')):

    """
    A named blob inside an ``ar`` archive.

    .. attribute:: name

       The member name (a string of at most 16 printable ASCII characters).

    .. attribute:: modified

       The modification time in Unix seconds (a non-negative integer).

    .. attribute:: owner

       The numeric owner id (an integer, always zero in generated packages).

    .. attribute:: group

       The numeric group id (an integer, always zero in generated packages).

    .. attribute:: mode

       The file mode (an integer, :data:`MEMBER_FILE_MODE` in generated
       packages).

    .. attribute:: content

       The raw content (a byte string).
    """

    @classmethod
    def create(cls, name, content, modified=0):
        """
        Create an archive member with the default ownership and file mode.

        :param name: The member name (a string).
        :param content: The raw content (a byte string).
        :param modified: The modification time in Unix seconds (an integer,
                         defaults to zero).
        :returns: An :class:`ArchiveMember` object.
        """
        return cls(name=name, modified=modified, owner=0, group=0, mode=MEMBER_FILE_MODE, content=content)

    @classmethod
    def from_file(cls, filename, name=None, modified=None):
        """
        Create an archive member from the contents of a file.

        :param filename: The pathname of the file (a string).
        :param name: The member name (a string, defaults to the base name of
                     `filename`).
        :param modified: The modification time in Unix seconds (an integer,
                         defaults to :data:`.REPRODUCIBLE_MTIME` when set and
                         the modification time of `filename` otherwise).
        :returns: An :class:`ArchiveMember` object.
        """
        if modified is None:
            if config.REPRODUCIBLE_MTIME:
                modified = int(config.REPRODUCIBLE_MTIME)
            else:
                modified = int(os.path.getmtime(filename))
        with open(filename, 'rb') as handle:
            content = handle.read()
        return cls.create(name or os.path.basename(filename), content, modified=modified)

    @property
    def size(self):
        """The size of the content in bytes, excluding padding (an integer)."""
        return len(self.content)

    @property
    def header(self):
        """
        The encoded member header (a byte string of :data:`HEADER_SIZE` bytes).

        :raises: :exc:`~exceptions.ValueError` when a field value doesn't fit
                 in its field, or when the name isn't printable ASCII.
        """
        if self.modified < 0:
            raise ValueError("Modification time can't be negative! (%r)" % self.modified)
        values = dict(
            name=self.name,
            modified='%i' % self.modified,
            owner='%i' % self.owner,
            group='%i' % self.group,
            mode='%o' % self.mode,
            size='%i' % self.size,
        )
        if not (self.name and self.name.isprintable() and ' ' not in self.name):
            raise ValueError("Invalid member name! (%r)" % self.name)
        fields = []
        for field_name, width in HEADER_FIELDS:
            value = values[field_name]
            if len(value) > width:
                raise ValueError(compact(
                    "Value of {field} field of member {name} exceeds {width} characters! ({value})",
                    field=field_name, name=repr(self.name), width=width, value=repr(value),
                ))
            fields.append(value.ljust(width))
        return ''.join(fields).encode('ascii') + END_OF_HEADER

    def encode(self):
        """
        Encode the member.

        :returns: The header, content and (when the content has an odd length)
                  a single linefeed (a byte string of even length).
        """
        chunks = [self.header, self.content]
        if (HEADER_SIZE + self.size) % 2:
            chunks.append(PADDING)
        return b''.join(chunks)

    def __str__(self):
        """Render a short human friendly description of the member."""
        return "%s (%s)" % (self.name, format_size(self.size, binary=True))
