import unittest

from lddgraph.common.exceptions import ReportError
from lddgraph.graph import DependencyGraph, NOT_FOUND
from lddgraph.report import ReportParser, tokenize, HEADER, VERSION_INFO

FILE_PATH = 'test/test_files/'
TEST_BASH = FILE_PATH + 'bash.ldd'
TEST_NOTFOUND = FILE_PATH + 'notfound.ldd'
TEST_UNRESOLVABLE = FILE_PATH + 'unresolvable.ldd'
TEST_OLD_VDSO = FILE_PATH + 'old_vdso.ldd'
TEST_NOTDYNAMIC = FILE_PATH + 'notdynamic.ldd'
TEST_MISSING_REF = FILE_PATH + 'missing_ref.ldd'

LIBC = '/lib/x86_64-linux-gnu/libc.so.6'
LIBTINFO = '/lib/x86_64-linux-gnu/libtinfo.so.6'
LD_SO = '/lib64/ld-linux-x86-64.so.2'

def parse_file(path, report_path=None, pending=True, **kwargs):
    parser = ReportParser(report_path or path, pending=pending, **kwargs)
    with open(path, 'r') as fd:
        return parser.parse(fd)

def edge_list(graph):
    return [(graph.nodes[e.source].path, graph.nodes[e.target].path, e.labels)
            for e in graph.edges]

class TestTokenize(unittest.TestCase):

    def test_0_tokenize(self):
        self.assertEqual(tokenize('\tlibc.so.6 => /lib/libc.so.6 (0x7f)\n'),
                         ['libc.so.6', '=>', '/lib/libc.so.6', '(0x7f)'])
        self.assertEqual(tokenize('  \t \n'), [])
        self.assertEqual(tokenize(''), [])

class TestReportParser(unittest.TestCase):

    def test_0_header_dependency(self):
        parser = ReportParser('prog')
        parser.feed('\tlibfoo.so.1 => /usr/lib/libfoo.so.1 (0x00007f)\n')
        graph = parser.graph
        self.assertEqual([n.path for n in graph.nodes],
                         ['prog', '/usr/lib/libfoo.so.1'])
        self.assertEqual(edge_list(graph),
                         [('prog', '/usr/lib/libfoo.so.1', [])])

    def test_0_header_keeps_duplicate_nodes(self):
        parser = ReportParser('prog')
        parser.feed('\tlibfoo.so.1 => /usr/lib/libfoo.so.1 (0x00007f)\n')
        parser.feed('\t/usr/lib/libfoo.so.1 (0x00007f)\n')
        self.assertEqual(len(parser.graph), 3)
        self.assertEqual(len(parser.graph.edges), 2)

    def test_0_blank_lines(self):
        parser = ReportParser('prog')
        parser.feed('\n')
        parser.feed('   \t\n')
        self.assertEqual(len(parser.graph), 1)
        self.assertEqual(parser.graph.edges, [])

    def test_0_version_information_once(self):
        parser = ReportParser('prog')
        self.assertEqual(parser.mode, HEADER)
        parser.feed('\tVersion information:\n')
        self.assertEqual(parser.mode, VERSION_INFO)
        parser.feed('\tVersion information:\n')
        self.assertEqual(parser.mode, VERSION_INFO)
        self.assertEqual(len(parser.graph), 1)
        self.assertEqual(parser.graph.edges, [])

    def test_1_bash(self):
        graph = parse_file(TEST_BASH)
        self.assertEqual(graph.root.path, '/bin/bash')
        self.assertEqual([n.path for n in graph.nodes],
                         ['/bin/bash', 'linux-vdso.so.1', LIBTINFO, LIBC,
                          LD_SO])
        self.assertEqual(edge_list(graph), [
            ('/bin/bash', 'linux-vdso.so.1', []),
            ('/bin/bash', LIBTINFO, ['NCURSES6_TINFO_5.0.19991023']),
            ('/bin/bash', LIBC, ['GLIBC_2.2.5', 'GLIBC_2.3', 'GLIBC_2.34']),
            (LIBTINFO, LIBC, ['GLIBC_2.3', 'GLIBC_2.2.5']),
            (LIBC, LD_SO, ['GLIBC_2.2.5', 'GLIBC_PRIVATE']),
        ])

    def test_1_nodes_registered_once(self):
        graph = parse_file(TEST_BASH)
        for edge in graph.edges:
            for idx in (edge.source, edge.target):
                path = graph.nodes[idx].path
                self.assertEqual(
                    [n.path for n in graph.nodes].count(path), 1, path)

    def test_1_edges_bounded_by_lines(self):
        for path, dependencies, requirements in ((TEST_BASH, 4, 7),
                                                 (TEST_NOTFOUND, 5, 3)):
            graph = parse_file(path)
            with open(path, 'r') as fd:
                fields = [tokenize(line) for line in fd]
            marker = fields.index(['Version', 'information:'])
            header = [f for f in fields[:marker] if f]
            versioned = [f for f in fields[marker + 1:]
                         if len(f) == 4 and f[2] == '=>']
            self.assertEqual(len(header), dependencies, path)
            self.assertEqual(len(versioned), requirements, path)
            self.assertLessEqual(len(graph.edges),
                                 len(header) + len(versioned), path)

    def test_1_versioned_edge_replaces_loader_edge(self):
        parser = ReportParser('prog')
        parser.feed('\tlibfoo.so.1 => /usr/lib/libfoo.so.1 (0x00007f)\n')
        parser.feed('\tVersion information:\n')
        parser.feed('\tprog:\n')
        parser.feed('\t\tlibfoo.so.1 (GLIBC_2.2.5) => /usr/lib/libfoo.so.1\n')
        graph = parser.parse([])
        self.assertEqual(edge_list(graph),
                         [('prog', '/usr/lib/libfoo.so.1', ['GLIBC_2.2.5'])])

    def test_2_not_found(self):
        with self.assertLogs(level='WARNING') as logs:
            graph = parse_file(TEST_NOTFOUND)
        self.assertEqual(sum('library not found' in line
                             for line in logs.output), 2)
        self.assertEqual(graph.root.path, 'prog')
        paths = [n.path for n in graph.nodes]
        self.assertEqual(paths.count(NOT_FOUND), 1)
        self.assertIn('libbar.so.1', paths)
        self.assertIn('libbaz.so.2', paths)
        self.assertEqual(edge_list(graph), [
            ('prog', 'linux-vdso.so.1', []),
            ('prog', 'libbar.so.1', []),
            ('libbar.so.1', NOT_FOUND, []),
            ('prog', 'libbaz.so.2', []),
            ('libbaz.so.2', NOT_FOUND, []),
            ('prog', LIBC, ['GLIBC_2.2.5']),
            (LIBC, LD_SO, ['GLIBC_2.3', 'GLIBC_PRIVATE']),
        ])

    def test_2_not_found_unlinked(self):
        graph = parse_file(TEST_NOTFOUND, link_not_found=False)
        self.assertNotIn(NOT_FOUND, [n.path for n in graph.nodes])
        self.assertEqual(len(graph.nodes), 6)

    def test_2_unresolvable_versions(self):
        with self.assertLogs(level='WARNING') as logs:
            graph = parse_file(TEST_UNRESOLVABLE)
        self.assertTrue(any('some symbol versions are unresolvable' in line
                            for line in logs.output))
        self.assertEqual(edge_list(graph)[1],
                         ('prog', LIBC, ['GLIBC_2.99', 'GLIBC_2.2.5']))

    def test_2_unrecognized_lines(self):
        with self.assertLogs(level='WARNING') as logs:
            graph = parse_file(TEST_OLD_VDSO)
        unrecognized = [line for line in logs.output
                        if 'unrecognized line' in line]
        self.assertEqual(len(unrecognized), 2)
        self.assertIn('statically linked', unrecognized[0])
        self.assertIn('garbage here', unrecognized[1])
        self.assertEqual(graph.root.path, '/usr/bin/calc')
        self.assertEqual(edge_list(graph), [
            ('/usr/bin/calc', 'linux-vdso.so.1', []),
            ('/usr/bin/calc', '/lib/libm.so.6', ['GLIBC_2.2.5']),
            ('/lib/libm.so.6', '/lib/libc.so.6', ['GLIBC_2.2.5']),
        ])

    def test_3_stdin_path_resolved(self):
        graph = parse_file(TEST_BASH, report_path='-')
        self.assertEqual(graph.root.path, '/bin/bash')
        self.assertIsNone(graph.find_node('-'))

    def test_3_final_path_not_replaced(self):
        # the heading for the examined file has to match the given path
        self.assertRaises(ReportError, parse_file, TEST_BASH, pending=False)
        parser = ReportParser('./bash')
        parser.feed('\tVersion information:\n')
        parser.feed('\t./bash:\n')
        self.assertEqual(parser.current, DependencyGraph.ROOT)
        self.assertEqual(parser.graph.root.path, 'bash')

    def test_4_not_dynamic(self):
        self.assertRaises(ReportError, parse_file, TEST_NOTDYNAMIC)

    def test_4_missing_reference(self):
        with self.assertRaises(ReportError) as ctx:
            parse_file(TEST_MISSING_REF)
        self.assertIn('/lib/x86_64-linux-gnu/libm.so.6', str(ctx.exception))

    def test_4_unknown_heading(self):
        parser = ReportParser('prog', pending=True)
        parser.feed('\tVersion information:\n')
        parser.feed('\t/bin/prog:\n')
        self.assertRaises(ReportError, parser.feed, '\t/lib/libnope.so:\n')
