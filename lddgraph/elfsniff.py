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

from elftools.common.exceptions import ELFParseError
from elftools.common.utils import struct_parse
from elftools.elf.structs import ELFStructs

from lddgraph.common.exceptions import InputError

ELF_MAGIC = b'\x7fELF'
EI_NIDENT = 16

# e_ident[EI_CLASS] and e_ident[EI_DATA] values
ELFCLASSES = {1: 32, 2: 64}
ELFDATA_LITTLE = {1: True, 2: False}

def _read_ident(fd):
    ident = fd.read(EI_NIDENT)
    if len(ident) < EI_NIDENT or ident[:4] != ELF_MAGIC:
        return None, None
    return ELFCLASSES.get(ident[4]), ELFDATA_LITTLE.get(ident[5])

def is_loadable_binary(path):
    """Check whether path is an ELF shared object or PIE executable.

    Anything that is not (short files, other magic, unknown class or data
    encoding) is taken to be a captured text report instead. Files that
    cannot be read at all raise InputError.
    """
    try:
        with open(path, 'rb') as fd:
            elfclass, little_endian = _read_ident(fd)
            if elfclass is None or little_endian is None:
                logging.debug('%s: no ELF identification', path)
                return False

            structs = ELFStructs(little_endian=little_endian,
                                 elfclass=elfclass)
            structs.create_basic_structs()
            try:
                header = struct_parse(structs.Elf_Ehdr, fd, stream_pos=0)
            except ELFParseError as err:
                logging.debug('%s: truncated ELF header (%s)', path, err)
                return False
    except OSError as err:
        raise InputError('{}: {}'.format(path, err.strerror or err))

    logging.debug('%s: ELF%d %s, %s', path, elfclass,
                  header['e_ident']['EI_VERSION'], header['e_type'])
    return header['e_ident']['EI_VERSION'] == 'EV_CURRENT' and \
        header['e_type'] == 'ET_DYN'
