# Debian package assembler: Command line interface
#
# Last Change: October 19, 2026

"""
Usage: deb-pkg-assembler [OPTIONS] CONTROL_DIR DATA_DIR

Assemble a Debian binary package archive (*.deb) from a directory with the
control file and maintainer scripts (CONTROL_DIR) and a directory with the
files to install (DATA_DIR), without using `dpkg-deb'. The Version and
Installed-Size fields of CONTROL_DIR/control are updated in place.

Supported options:

  -o, --output=DIR

    Create the package archive in the directory given by DIR (defaults to
    the current working directory).

  -t, --temp=DIR

    Use the directory given by DIR to stage the archive members. The
    directory is deleted and recreated, so don't point this at anything you
    want to keep! Defaults to $DPA_TEMP_DIRECTORY or a subdirectory of the
    system wide temporary directory.

  -V, --version=TEXT

    Use TEXT as the upstream version of the package.

  -f, --version-file=FILE

    Read the upstream version of the package from the first line of FILE.

  -c, --version-command=COMMAND

    Use the first line of output of the shell command COMMAND as the
    upstream version of the package.

  -r, --revision=TEXT

    Use TEXT as the Debian revision of the package (defaults to
    $DPA_REVISION or 1).

  -i, --inspect=FILE

    List the members of the package archive given by FILE.

  -v, --verbose

    Make more noise! (useful during debugging)

  -q, --quiet

    Make less noise.

  -h, --help

    Show this message and exit.
"""

# Standard library modules.
import codecs
import functools
import getopt
import logging
import os
import sys
import time

# External dependencies.
import coloredlogs
from humanfriendly import format_path, format_size, parse_path
from humanfriendly.text import format
from humanfriendly.terminal import (
    HIGHLIGHT_COLOR,
    ansi_wrap,
    terminal_supports_colors,
    usage,
    warning,
)

# Modules included in our package.
from deb_pkg_assembler import config
from deb_pkg_assembler.archive import inspect_archive
from deb_pkg_assembler.package import build_package
from deb_pkg_assembler.utils import check_directory
from deb_pkg_assembler.version import static_version, version_from_command, version_from_file

# Initialize a logger.
logger = logging.getLogger(__name__)

OUTPUT_ENCODING = 'UTF-8'


def main():
    """Command line interface for the ``deb-pkg-assembler`` program."""
    # Configure logging output.
    coloredlogs.install()
    # Command line option defaults.
    actions = []
    output_directory = os.getcwd()
    temporary_directory = config.default_temporary_directory
    version_resolver = None
    revision = config.DEFAULT_REVISION
    # Parse the command line options.
    try:
        options, arguments = getopt.getopt(sys.argv[1:], 'o:t:V:f:c:r:i:vqh', [
            'output=', 'temp=', 'version=', 'version-file=', 'version-command=',
            'revision=', 'inspect=', 'verbose', 'quiet', 'help',
        ])
        for option, value in options:
            if option in ('-o', '--output'):
                output_directory = check_directory(parse_path(value))
            elif option in ('-t', '--temp'):
                temporary_directory = parse_path(value)
            elif option in ('-V', '--version'):
                version_resolver = static_version(value)
            elif option in ('-f', '--version-file'):
                version_resolver = version_from_file(parse_path(value))
            elif option in ('-c', '--version-command'):
                version_resolver = version_from_command(value)
            elif option in ('-r', '--revision'):
                revision = value
            elif option in ('-i', '--inspect'):
                actions.append(functools.partial(show_archive_members, archive=value))
            elif option in ('-v', '--verbose'):
                coloredlogs.increase_verbosity()
            elif option in ('-q', '--quiet'):
                coloredlogs.decrease_verbosity()
            elif option in ('-h', '--help'):
                usage(__doc__)
                return
        # Positional arguments select the build action, which needs a version.
        if arguments:
            if len(arguments) != 2:
                raise Exception("Please provide exactly two directories (CONTROL_DIR and DATA_DIR)!")
            if not version_resolver:
                raise Exception("Please specify the package version using -V, -f or -c!")
            actions.append(functools.partial(
                build_package,
                control_directory=check_directory(parse_path(arguments[0])),
                data_directory=check_directory(parse_path(arguments[1])),
                output_directory=output_directory,
                temporary_directory=temporary_directory,
                version_resolver=version_resolver,
                revision=revision,
            ))
    except Exception as e:
        warning("Error: %s", e)
        sys.exit(1)
    # Execute the selected action.
    try:
        if actions:
            for action in actions:
                action()
        else:
            usage(__doc__)
    except Exception:
        logger.exception("An error occurred! Aborting..")
        sys.exit(1)


def show_archive_members(archive):
    """
    Show the members of a Debian archive on the terminal.

    :param archive: The pathname of an existing ``*.deb`` archive (a string).
    """
    members = inspect_archive(archive)
    say(highlight("Archive members of %s:"), format_path(archive))
    for member in members:
        say(" - {name} {size} {modified} {mode}",
            name=highlight(member.name.ljust(16)),
            size=format_size(member.size, keep_width=True).rjust(10),
            modified=time.strftime('%Y-%m-%d %H:%M', time.gmtime(member.modified)),
            mode='%o' % member.mode)


def highlight(text):
    """
    Highlight a piece of text using ANSI escape sequences.

    :param text: The text to highlight (a string).
    :returns: The highlighted text (when standard output is connected to a
              terminal) or the original text (when standard output is not
              connected to a terminal).
    """
    if terminal_supports_colors(sys.stdout):
        text = ansi_wrap(text, color=HIGHLIGHT_COLOR)
    return text


def say(text, *args, **kw):
    """Reliably print Unicode strings to the terminal (standard output stream)."""
    text = format(text, *args, **kw)
    try:
        print(text)
    except UnicodeEncodeError:
        print(codecs.encode(text, OUTPUT_ENCODING))
