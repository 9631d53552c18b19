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

NOT_FOUND = 'not found'

def normalize_path(path):
    # "./libc.so" and "libc.so" name the same object
    if len(path) > 1 and path.startswith('./'):
        return path[2:]
    return path

class Node:

    def __init__(self, path):
        self.path = path
        self.finalized = False

    def finalize_path(self, path):
        if self.finalized:
            raise ValueError('path of {} already finalized'.format(self.path))
        self.path = path
        self.finalized = True

    def __repr__(self):
        return 'Node({!r})'.format(self.path)

class Edge:

    def __init__(self, source, target, labels=None):
        # source and target are indices into DependencyGraph.nodes
        self.source = source
        self.target = target
        self.labels = list(labels) if labels else []

    @property
    def labeled(self):
        return len(self.labels) > 0

    def __repr__(self):
        return 'Edge({}, {}, {!r})'.format(self.source, self.target,
                                           self.labels)

class DependencyGraph:
    """Nodes and edges collected from the report of one input.

    Nodes live in a list and are addressed by their index; edges only store
    these indices. The path index maps a normalized path to the first node
    registered under it, which is what lookups from the version information
    part of a report resolve to.
    """

    ROOT = 0

    def __init__(self, root_path):
        self.nodes = []
        self.edges = []
        self._path_index = {}
        self._labeled_edges = {}
        self._not_found = None
        self.add_node(root_path)

    @property
    def root(self):
        return self.nodes[self.ROOT]

    def add_node(self, path):
        """Register a new node, even if the path is already known."""
        path = normalize_path(path)
        idx = len(self.nodes)
        self.nodes.append(Node(path))
        self._path_index.setdefault(path, idx)
        logging.debug('node %d: %s', idx, path)
        return idx

    def find_node(self, path):
        return self._path_index.get(normalize_path(path))

    def finalize_root(self, path):
        path = normalize_path(path)
        old_path = self.root.path
        self.root.finalize_path(path)
        if self._path_index.get(old_path) == self.ROOT:
            del self._path_index[old_path]
            # a later node registered under the provisional path takes over
            for idx, node in enumerate(self.nodes):
                if idx != self.ROOT and node.path == old_path:
                    self._path_index[old_path] = idx
                    break
        # the root precedes every other node, so it wins the lookup
        self._path_index[path] = self.ROOT
        logging.debug('root path %s resolved to %s', old_path, path)

    def not_found_node(self):
        if self._not_found is None:
            self._not_found = self.add_node(NOT_FOUND)
        return self._not_found

    def add_edge(self, source, target, label=None):
        edge = Edge(source, target, [label] if label else None)
        self.edges.append(edge)
        if label:
            self._labeled_edges[(source, target)] = edge
        logging.debug('edge %s -> %s %s', self.nodes[source].path,
                      self.nodes[target].path, edge.labels)
        return edge

    def find_labeled_edge(self, source, target):
        return self._labeled_edges.get((source, target))

    def add_label(self, source, target, label):
        """Attach a version label to the labeled edge between two nodes.

        Repeated requirements between the same pair of nodes end up on one
        edge, keeping the labels in the order they were added.
        """
        edge = self.find_labeled_edge(source, target)
        if edge is None:
            return self.add_edge(source, target, label)
        edge.labels.append(label)
        logging.debug('edge %s -> %s %s', self.nodes[source].path,
                      self.nodes[target].path, edge.labels)
        return edge

    def outgoing(self, idx):
        return [edge for edge in self.edges if edge.source == idx]

    def incoming(self, idx):
        return [edge for edge in self.edges if edge.target == idx]

    def reconcile(self):
        """Drop unlabeled edges whose target also has a labeled edge.

        Returns the number of dropped edges.
        """
        explained = set(edge.target for edge in self.edges if edge.labeled)
        kept = []
        for edge in self.edges:
            if not edge.labeled and edge.target in explained:
                logging.debug('dropping %s -> %s, versioned edge exists',
                              self.nodes[edge.source].path,
                              self.nodes[edge.target].path)
                continue
            kept.append(edge)
        dropped = len(self.edges) - len(kept)
        self.edges = kept
        return dropped

    def __len__(self):
        return len(self.nodes)
