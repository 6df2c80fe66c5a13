# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Readers for the metadata files found in an installed package tree.
"""
import os
import re
from typing import List, Optional
from ..errors import MetadataError

PORT_PATTERN = re.compile(r'^(\d{1,5})(?:-(\d{1,5}))?(?:/(tcp|udp|sctp))?$', re.IGNORECASE)
PATH_ASSIGNMENT = re.compile(r'^(?:export\s+)?(PATH=.*)$')


def find_package_file(pkg_root: str, filename: str) -> Optional[str]:
    """
    Finds a file by name anywhere below pkg_root.

    Args:
        pkg_root (str): Directory to search.
        filename (str): Exact file name, e.g. 'IDENT'.

    Returns:
        Optional[str]: The first match in sorted walk order, or None.
    """
    if not os.path.isdir(pkg_root):
        return None
    for dirpath, dirnames, filenames in os.walk(pkg_root):
        dirnames.sort()
        if filename in filenames:
            return os.path.join(dirpath, filename)
    return None


def read_exposes(path: Optional[str]) -> List[str]:
    """
    Reads the ports a package declares in its EXPOSES file.

    Args:
        path (Optional[str]): Path to the EXPOSES file, or None.

    Returns:
        List[str]: Ports in file order; empty when the file is absent.
    """
    if not path or not os.path.isfile(path):
        return []

    with open(path, 'r') as f:
        ports = f.read().split()

    for port in ports:
        match = PORT_PATTERN.match(port)
        if not match:
            raise MetadataError(f"Invalid port '{port}' in {path}")
        low = int(match.group(1))
        high = int(match.group(2) or low)
        if not 1 <= low <= high <= 65535:
            raise MetadataError(f"Port out of range '{port}' in {path}")
    return ports


def read_init_path(init_sh: str) -> str:
    """
    Extracts the PATH assignment from a root filesystem's init.sh.

    Args:
        init_sh (str): Path to init.sh.

    Returns:
        str: The assignment, e.g. 'PATH=/opt/bldr/pkgs/core/busybox/bin'.
    """
    if not os.path.isfile(init_sh):
        raise MetadataError(f"Bootstrap script not found: {init_sh}")

    with open(init_sh, 'r') as f:
        for line in f:
            match = PATH_ASSIGNMENT.match(line.strip())
            if match:
                return match.group(1)

    raise MetadataError(f"No PATH line in {init_sh}")


def read_version_file(path: str) -> Optional[str]:
    """
    Reads a version identifier such as a toolchain channel from a file.

    Returns the first non-empty line that is not a comment, or None if the
    file does not exist.
    """
    if not os.path.isfile(path):
        return None
    with open(path, 'r') as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith('#'):
                return line
    return None
