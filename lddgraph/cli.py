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

import argparse
import logging
import os
import sys

from lddgraph.common.exceptions import LddGraphError
from lddgraph.dot import write_dot
from lddgraph.report import ReportParser
from lddgraph.source import ReportSource

DEBUG = os.environ.get('LDDGRAPH_DEBUG')

class ArgumentParser(argparse.ArgumentParser):

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, '{}: error: {}\n'.format(self.prog, message))

class Runner():

    def __init__(self, argv=None, outfd=None):
        self.parse_arguments(argv)
        self.outfd = outfd if outfd is not None else sys.stdout

    def parse_arguments(self, argv):
        parser = ArgumentParser(prog='lddgraph', add_help=False,
                                usage='%(prog)s { - | ldd-output-file | '
                                      'dynamically-loadable-file } ...',
                                description='Convert the shared object '
                                'dependencies reported by ldd -v into a '
                                'graphviz digraph.')
        parser.add_argument('paths', type=str, nargs='+',
                            help='files to examine, - reads ldd -v output '
                            'from stdin')
        if argv is None:
            argv = sys.argv[1:]
        # argparse would swallow "--" and pass "-1" on as a path
        for arg in argv:
            if arg.startswith('-') and arg != '-':
                parser.error('unrecognized arguments: {}'.format(arg))
        self.args = parser.parse_args(argv)

        loglevel = logging.WARNING
        if DEBUG:
            loglevel = logging.DEBUG

        logging.basicConfig(level=loglevel)

    def process_one(self, path):
        with ReportSource(path) as source:
            parser = ReportParser(path, pending=source.pending)
            graph = parser.parse(source)
        write_dot(graph, self.outfd)
        return graph

    def process(self):
        logging.debug('Processing %d paths in total', len(self.args.paths))
        for path in self.args.paths:
            try:
                self.process_one(path)
            except LddGraphError as err:
                logging.error('%s', err)
                return 1
        return 0

def main(argv=None):
    runner = Runner(argv)
    sys.exit(runner.process())

if __name__ == '__main__':
    main()
