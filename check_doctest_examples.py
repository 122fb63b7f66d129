#!/usr/bin/env python

"""Quick hack to evaluate the doctest fragments in the source code."""

# Standard library modules.
import doctest
import glob
import logging
import os
import sys

# External dependencies.
import coloredlogs
from humanfriendly import format_path

# Initialize a logger.
logger = logging.getLogger('check-doctest-examples')


def main():
    """Command line interface."""
    coloredlogs.install()
    failures = 0
    for name in sorted(glob.glob('deb_pkg_assembler/*.py')):
        failures += testfile(name, verbose='-v' in sys.argv)
    if failures > 0:
        sys.exit(1)


def testfile(filename, verbose=False):
    """Evaluate and report on the doctest fragments in a single Python file."""
    logger.info("Checking %s", format_path(filename))
    filename = os.path.abspath(filename)
    module_name = 'deb_pkg_assembler.%s' % os.path.splitext(os.path.basename(filename))[0]
    module = __import__(module_name, fromlist=['*'])
    results = doctest.testmod(module, optionflags=doctest.NORMALIZE_WHITESPACE, verbose=verbose)
    if results.attempted > 0:
        if results.failed == 0:
            logger.info("Evaluated %i doctests, all passed!", results.attempted)
        else:
            logger.error("Evaluated %i doctests, %i failed!", results.attempted, results.failed)
    return results.failed


if __name__ == '__main__':
    main()
