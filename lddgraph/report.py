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

import logging

from lddgraph.common.exceptions import ReportError
from lddgraph.graph import DependencyGraph, normalize_path

HEADER = 'header'
VERSION_INFO = 'version-info'

def tokenize(line):
    return line.split()

def _trim_trailing_colon(field):
    if len(field) > 1 and field.endswith(':'):
        return field[:-1]
    return field

def _trim_outer_parens(field):
    if len(field) > 1 and field.startswith('(') and field.endswith(')'):
        return field[1:-1]
    return field

def _dependency_name(fields):
    """Name of the object a direct dependency line refers to.

    Returns (name, found), or None if fields do not describe a dependency:
      <lib> (<loadaddr>)
      <lib> => (<loadaddr>)
      <lib> => <path>
      <lib> => <path> (<loadaddr>)
      <lib> => not found
    """
    if len(fields) == 2:
        if fields[1].startswith('('):
            return fields[0], True
        return None
    if len(fields) not in (3, 4) or fields[1] != '=>':
        return None
    if fields[2:] == ['not', 'found']:
        return fields[0], False
    if len(fields) == 4 and not fields[3].startswith('('):
        return None
    if fields[2].startswith('('):
        # vdso style entries have no path
        if len(fields) == 4:
            return None
        return fields[0], True
    return fields[2], True

class ReportParser:
    """Build the dependency graph of one object from its ldd -v report.

    The report starts with the direct dependencies the loader brings in
    (header), followed by 'Version information:' and one block per object
    listing the symbol versions it requires from which library.
    """

    def __init__(self, path, pending=False, link_not_found=True):
        self.path = path
        self.pending = pending
        self.link_not_found = link_not_found
        self.graph = DependencyGraph(path)
        self.mode = HEADER
        self.current = DependencyGraph.ROOT

    def parse(self, lines):
        for line in lines:
            self.feed(line)
        dropped = self.graph.reconcile()
        logging.debug('%s: %d nodes, %d edges (%d unversioned dropped)',
                      self.path, len(self.graph.nodes),
                      len(self.graph.edges), dropped)
        return self.graph

    def feed(self, line):
        fields = tokenize(line)
        if not fields:
            return

        if len(fields) == 4 and fields[0] == 'not' and fields[1] == 'a':
            raise ReportError('{}: not a dynamically loaded file'.format(
                self.path))

        # <path>: <libpath>: version `<symbol>' not found (required by <path>)
        if len(fields) >= 5 and fields[2] == 'version' and \
                fields[4].startswith('not'):
            logging.warning('%s: some symbol versions are unresolvable: %s',
                            self.path, line.strip())
            return

        if fields == ['Version', 'information:']:
            if self.mode == HEADER:
                logging.debug('%s: version information follows', self.path)
            self.mode = VERSION_INFO
            return

        if self.mode == HEADER:
            self._parse_header(fields, line)
        else:
            self._parse_version_info(fields, line)

    def _lookup(self, path):
        idx = self.graph.find_node(path)
        if idx is None:
            raise ReportError('{}: cannot find prior reference!'.format(path))
        return idx

    def _parse_header(self, fields, line):
        dependency = _dependency_name(fields)
        if dependency is None:
            logging.warning('%s: unrecognized line: %s', self.path,
                            line.strip())
            return

        name, found = dependency
        # the same soname may be listed again with another resolution, so
        # every line gets a node of its own
        idx = self.graph.add_node(name)
        self.graph.add_edge(DependencyGraph.ROOT, idx)
        if not found:
            logging.warning('%s: library not found', name)
            if self.link_not_found:
                self.graph.add_edge(idx, self.graph.not_found_node())

    def _parse_version_info(self, fields, line):
        # <path>:
        if len(fields) == 1 and fields[0].endswith(':'):
            path = normalize_path(_trim_trailing_colon(fields[0]))
            if self.pending:
                self.graph.finalize_root(path)
                self.path = path
                self.pending = False
            self.current = self._lookup(path)
            return

        # <library> (<version>) => <path>
        if len(fields) == 4 and fields[2] == '=>':
            version = _trim_outer_parens(fields[1])
            target = self._lookup(fields[3])
            self.graph.add_label(self.current, target, version)
            return

        logging.warning('%s: unrecognized line: %s', self.path, line.strip())
