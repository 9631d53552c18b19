# Copyright 2026, lddgraph contributors
#
# This file is part of lddgraph.
#
# lddgraph is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# lddgraph is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with lddgraph.  If not, see <http://www.gnu.org/licenses/>.

import io
import logging
import os
import shlex
import subprocess
import sys

from lddgraph.common.exceptions import InputError
from lddgraph.elfsniff import is_loadable_binary

STDIN_PATH = '-'
LISTER = shlex.split(os.environ.get('LDDGRAPH_LDD', 'ldd -v'))

class ReportSource:
    """Text lines of an ldd -v report for one command line argument.

    The report comes from standard input, from running the lister on a
    loadable ELF file or from a file holding a captured report. For the
    first and the last case the real path of the examined object is not
    known up front, which is what 'pending' tells the parser.
    """

    def __init__(self, path, lister=None):
        self.path = path
        self.lister = list(lister) if lister is not None else LISTER
        self.pending = True
        self._stream = None
        self._proc = None
        self._exhausted = False
        self._stdin = False

    def open(self):
        if self.path == STDIN_PATH:
            logging.debug('reading report from stdin')
            buffer = getattr(sys.stdin, 'buffer', None)
            if buffer is not None:
                # undecodable bytes in paths must not end the run
                self._stream = io.TextIOWrapper(buffer, errors='replace')
            else:
                self._stream = sys.stdin
            self._stdin = True
        elif is_loadable_binary(self.path):
            cmdline = self.lister + [self.path]
            logging.debug('running %s', ' '.join(cmdline))
            try:
                self._proc = subprocess.Popen(cmdline, stdout=subprocess.PIPE,
                                              universal_newlines=True,
                                              errors='replace')
            except OSError as err:
                raise InputError('{}: {}: {}'.format(self.path, cmdline[0],
                                                     err.strerror or err))
            self._stream = self._proc.stdout
            self.pending = False
        else:
            logging.debug('reading report from %s', self.path)
            try:
                self._stream = open(self.path, 'r', errors='replace')
            except OSError as err:
                raise InputError('{}: {}'.format(self.path,
                                                 err.strerror or err))
        return self

    def __iter__(self):
        for line in self._stream:
            yield line
        self._exhausted = True

    def close(self):
        """Release the input, failing if it was not consumed cleanly."""
        stream, self._stream = self._stream, None
        proc, self._proc = self._proc, None
        if stream is None:
            return
        if not self._exhausted:
            self._release(stream, proc)
            raise InputError('{}: aborted'.format(self.path))

        if proc is not None:
            stream.close()
            returncode = proc.wait()
            if returncode < 0:
                raise InputError('{}: {} killed by signal {}'.format(
                    self.path, self.lister[0], -returncode))
            if returncode != 0:
                raise InputError('{}: {} exited with status {}'.format(
                    self.path, self.lister[0], returncode))
        elif self._stdin:
            self._release_stdin(stream)
        else:
            try:
                stream.close()
            except OSError as err:
                raise InputError('{}: close: {}'.format(self.path, err))

    def _release_stdin(self, stream):
        # the underlying buffer stays open for the next argument
        if stream is not sys.stdin:
            stream.detach()

    def _release(self, stream, proc):
        if stream is not None and self._stdin:
            self._release_stdin(stream)
        elif stream is not None:
            try:
                stream.close()
            except OSError as err:
                logging.debug('%s: close: %s', self.path, err)
        if proc is not None:
            if proc.poll() is None:
                proc.terminate()
            proc.wait()

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc_value, traceback):
        if exc_type is None:
            self.close()
        else:
            self._release(self._stream, self._proc)
            self._stream = None
            self._proc = None
        return False
