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
Package identifiers of the form origin/name[/version[/release]].
"""
from typing import List, Optional
from pydantic import BaseModel
from ..errors import PackageIdentError


class PackageIdent(BaseModel):
    """
    Parsed package identifier.

    Examples:
        - core/redis
        - core/redis/3.2.4
        - acme/widget/1.2.0/20200101000000
    """
    origin: str
    name: str
    version: Optional[str] = None
    release: Optional[str] = None

    @classmethod
    def parse(cls, ident: str) -> "PackageIdent":
        """
        Parse a package identifier string.

        Args:
            ident: Identifier such as 'core/redis/3.2.4'.

        Returns:
            Parsed PackageIdent.

        Raises:
            PackageIdentError: If fewer than two or more than four segments are
                given, or any segment is empty.
        """
        if not ident or not ident.strip():
            raise PackageIdentError("Empty package identifier")

        parts = ident.strip().split("/")
        if len(parts) < 2 or len(parts) > 4:
            raise PackageIdentError(
                f"Invalid package identifier '{ident}': expected origin/name[/version[/release]]"
            )
        if any(not part for part in parts):
            raise PackageIdentError(f"Invalid package identifier '{ident}': empty segment")

        parts += [None] * (4 - len(parts))
        origin, name, version, release = parts
        return cls(origin=origin, name=name, version=version, release=release)

    @classmethod
    def from_ident_file(cls, path: str) -> "PackageIdent":
        """
        Parse the contents of an installed package's IDENT file.
        """
        with open(path, "r") as f:
            return cls.parse(f.read().strip())

    @property
    def segments(self) -> List[str]:
        return [p for p in (self.origin, self.name, self.version, self.release) if p is not None]

    @property
    def is_fully_qualified(self) -> bool:
        return self.version is not None and self.release is not None

    @property
    def version_tag(self) -> str:
        """Image tag origin/name:version-release."""
        if not self.is_fully_qualified:
            raise PackageIdentError(f"Cannot derive a version tag from partial identifier '{self}'")
        return f"{self.origin}/{self.name}:{self.version}-{self.release}"

    @property
    def latest_tag(self) -> str:
        """Image tag origin/name:latest."""
        return f"{self.origin}/{self.name}:latest"

    def matches(self, other: "PackageIdent") -> bool:
        """
        Check whether other satisfies this (possibly partial) identifier.

        Every segment present here must equal the same segment of other.
        """
        theirs = other.segments
        ours = self.segments
        if len(theirs) < len(ours):
            return False
        return theirs[:len(ours)] == ours

    def __str__(self) -> str:
        return "/".join(self.segments)

    def __repr__(self) -> str:
        return f"PackageIdent({self})"
