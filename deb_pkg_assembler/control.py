# Debian package assembler: Control file manipulation.
#
# Last Change: October 19, 2026

"""
Reading and rewriting of properties in Debian control files.

The :class:`ControlDocument` class in the :mod:`deb_pkg_assembler.control`
module represents a control file as an ordered sequence of lines. Lines of the
form ``Key: Value`` can be read and rewritten one property at a time, all other
lines (continuation lines, comments, blank lines) are passed through as opaque
text. Unlike a full :man:`deb822` parser this keeps the control file exactly
as the package author wrote it, apart from line endings: every line is
terminated by a single linefeed when the document is written.

Two details of the property semantics are worth pointing out:

- :func:`ControlDocument.read_property()` returns the value of the *first*
  matching line, while :func:`ControlDocument.set_property()` rewrites *every*
  matching line.

- Keys are matched literally and case sensitively as a prefix of the line
  (``key + ':'``).
"""

# Standard library modules.
import codecs
import logging
import os
import re

# External dependencies.
from humanfriendly import format_path
from humanfriendly.text import pluralize

# Modules included in our package.
from deb_pkg_assembler.exceptions import IOFailure

# Public identifiers that require documentation.
__all__ = (
    "ControlDocument",
    "load_control_document",
    "logger",
    "patch_control_file",
    "split_lines",
)

# Initialize a logger.
logger = logging.getLogger(__name__)

LINE_TERMINATOR_PATTERN = re.compile(r'\r\n|\r|\n')
"""Compiled regular expression that matches any of the supported line terminators."""

PROPERTY_PATTERN = re.compile(r'^([^\s:#][^:]*):(.*)$')
"""Compiled regular expression that matches ``Key: Value`` lines."""


def split_lines(text):
    r"""
    Split text into lines, accepting any mix of line terminators.

    :param text: The text to split (a string).
    :returns: A list of strings without line terminators.

    ``\r\n``, ``\r`` and ``\n`` are all recognized. A terminator at the end of
    the text doesn't produce a trailing empty line:

    >>> split_lines('Package: foo\r\nArchitecture: amd64\r\n')
    ['Package: foo', 'Architecture: amd64']
    """
    lines = LINE_TERMINATOR_PATTERN.split(text)
    if lines and not lines[-1]:
        lines.pop(-1)
    return lines


def load_control_document(control_file):
    """
    Load a control file.

    :param control_file: The filename of the control file (a string).
    :returns: A :class:`ControlDocument` object.
    :raises: :exc:`.IOFailure` when the control file doesn't exist.
    """
    if not os.path.isfile(control_file):
        raise IOFailure("Control file doesn't exist! (%s)" % control_file)
    logger.debug("Loading control file: %s", format_path(control_file))
    with open(control_file, 'rb') as handle:
        return ControlDocument.parse(handle.read(), filename=control_file)


def patch_control_file(control_file, overrides):
    """
    Patch properties of a control file in place.

    :param control_file: The filename of the control file (a string).
    :param overrides: A dictionary (or an iterable of key/value tuples) with
                      the properties to set. The values are converted to
                      strings.
    :returns: The patched :class:`ControlDocument` object.

    Every property is applied with :func:`ControlDocument.set_property()`
    and the result is written back to `control_file`.
    """
    document = load_control_document(control_file)
    items = overrides.items() if isinstance(overrides, dict) else overrides
    for key, value in items:
        document = document.set_property(key, value)
    document.save()
    return document


class ControlDocument(object):

    """
    An ordered sequence of lines from a Debian control file.

    :class:`ControlDocument` objects are immutable: :func:`set_property()`
    returns a new document. Persisting a document is always explicit, using
    :func:`save()`.
    """

    def __init__(self, lines=(), filename=None):
        """
        Initialize a :class:`ControlDocument` object.

        :param lines: An iterable of strings (the lines of the control file,
                      without line terminators).
        :param filename: The filename the document was loaded from (a string
                         or :data:`None`). Used as the default location for
                         :func:`save()`.
        """
        self.lines = tuple(lines)
        self.filename = filename

    @classmethod
    def parse(cls, text, filename=None):
        """
        Parse the text of a control file.

        :param text: The contents of the control file (a string or a byte
                     string, which is decoded as UTF-8).
        :param filename: The filename the text was read from (a string or
                         :data:`None`).
        :returns: A :class:`ControlDocument` object.
        """
        if isinstance(text, bytes):
            text = codecs.decode(text, 'UTF-8')
        return cls(split_lines(text), filename=filename)

    @property
    def properties(self):
        """
        The ``Key: Value`` lines of the document.

        A list of tuples with two strings each: the key and the value stripped
        of surrounding whitespace, in document order. Duplicate keys are
        reported as many times as they occur.
        """
        pairs = []
        for line in self.lines:
            match = PROPERTY_PATTERN.match(line)
            if match:
                pairs.append((match.group(1), match.group(2).strip()))
        return pairs

    @property
    def text(self):
        """The document as text, each line terminated by a single linefeed (a string)."""
        return u''.join(u'%s\n' % line for line in self.lines)

    def read_property(self, key):
        """
        Get the value of a property.

        :param key: The name of the property (a string).
        :returns: The value of the first line that starts with ``key + ':'``,
                  stripped of surrounding whitespace (a string). If no line
                  matches the empty string is returned.
        """
        prefix = key + u':'
        for line in self.lines:
            if line.startswith(prefix):
                return line[len(prefix):].strip()
        return u''

    def set_property(self, key, value):
        """
        Set the value of a property.

        :param key: The name of the property (a string).
        :param value: The new value (converted to a string).
        :returns: A new :class:`ControlDocument` object.

        Every line that starts with ``key + ':'`` is replaced by
        ``key + ': ' + value``. When no line matches, the property is
        appended to the end of the document.
        """
        prefix = key + u':'
        replacement = u'%s: %s' % (key, value)
        lines = []
        matches = 0
        for line in self.lines:
            if line.startswith(prefix):
                lines.append(replacement)
                matches += 1
            else:
                lines.append(line)
        if matches:
            logger.debug("Rewrote %s to %r.", pluralize(matches, "line"), replacement)
        else:
            logger.debug("Appending new property %r ..", replacement)
            lines.append(replacement)
        return ControlDocument(lines, filename=self.filename)

    def save(self, filename=None):
        """
        Write the document to a control file.

        :param filename: The filename to write (a string). Defaults to the
                         filename the document was loaded from.
        :raises: :exc:`~exceptions.ValueError` when no filename is given and
                 the document wasn't loaded from a file.
        """
        filename = filename or self.filename
        if not filename:
            raise ValueError("Don't know where to save the control document!")
        logger.debug("Writing control file: %s", format_path(filename))
        # Break the hard link chain.
        if os.path.exists(filename):
            os.unlink(filename)
        with open(filename, 'wb') as handle:
            handle.write(self.text.encode('UTF-8'))

    def __eq__(self, other):
        """Compare the lines of two :class:`ControlDocument` objects."""
        return isinstance(other, ControlDocument) and self.lines == other.lines

    def __ne__(self, other):
        """Compare the lines of two :class:`ControlDocument` objects."""
        return not self.__eq__(other)

    def __hash__(self):
        """Hash the lines of the document."""
        return hash(self.lines)

    def __repr__(self):
        """Render a human friendly representation of the document."""
        return "ControlDocument(%r)" % (self.properties,)
