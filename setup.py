from setuptools import setup, find_packages

setup(
    name = 'lddgraph',
    description = 'Convert ldd -v dependency reports into graphviz digraphs',
    author = 'lddgraph contributors',
    version = '0.1',
    license = 'GPL-3.0',
    packages = find_packages(exclude=['test', 'test.*']),
    zip_safe = False,
    install_requires = [
        'pyelftools>=0.27'
    ],
    extras_require = {
        'test': ['pytest'],
    },
    entry_points = {
        'console_scripts': ['lddgraph = lddgraph.cli:main'],
    }
)
