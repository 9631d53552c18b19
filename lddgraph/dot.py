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

SUMMARY_NODE = 'lddgraph summary'

def escape(name):
    return name.replace('\\', '\\\\').replace('"', '\\"')

def quote(name):
    return '"{}"'.format(escape(name))

def join_lines(lines):
    # \n is the DOT escape for a line break inside a label
    return '"{}"'.format('\\n'.join(escape(line) for line in lines))

def summary_id(graph):
    """Node name for the summary that no node of graph uses."""
    paths = set(node.path for node in graph.nodes)
    name = SUMMARY_NODE
    suffix = 1
    while name in paths:
        suffix += 1
        name = '{} {}'.format(SUMMARY_NODE, suffix)
    return name

def format_summary(graph, name):
    label = join_lines([graph.root.path,
                        '{} nodes'.format(len(graph.nodes)),
                        '{} edges'.format(len(graph.edges))])
    return '{} [shape=note, label={}];'.format(quote(name), label)

def format_edge(graph, edge):
    retval = '{} -> {}'.format(quote(graph.nodes[edge.source].path),
                               quote(graph.nodes[edge.target].path))
    if edge.labeled:
        retval += ' [label={}, style=solid]'.format(join_lines(edge.labels))
    else:
        retval += ' [style=dotted]'
    return retval + ';'

def write_dot(graph, outfd):
    """Write graph as a Graphviz digraph to outfd.

    Versioned requirements are drawn as solid, labeled lines, plain loader
    dependencies as dotted lines.
    """
    outfd.write('digraph G {\n')
    summary = summary_id(graph)
    outfd.write(format_summary(graph, summary) + '\n')

    for node in graph.nodes:
        outfd.write(quote(node.path) + ';\n')

    for edge in graph.edges:
        outfd.write(format_edge(graph, edge) + '\n')

    # keep the summary close to the drawing
    if graph.edges:
        first = graph.nodes[graph.edges[0].target]
        outfd.write('{} -> {} [style=invis];\n'.format(quote(first.path),
                                                     quote(summary)))

    outfd.write('}\n')
