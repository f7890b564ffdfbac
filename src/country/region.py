import math
from dataclasses import dataclass, field, replace
from typing import FrozenSet, Iterable, Optional

from .exceptions import FusionError, InputError

SEPARATOR = "-"
FIELD_SEPARATOR = ":"


@dataclass(frozen=True)
class Region:
    """
    A node of the country graph.

    Regions are never mutated: fusion and rewiring build new instances, so
    copies of a country can share them freely.
    """
    name: str
    gdp: float
    links: FrozenSet[str] = frozenset()
    members: FrozenSet[str] = field(default=frozenset(), compare=False)

    def __post_init__(self):
        object.__setattr__(self, 'links', frozenset(self.links))
        if not self.members:
            object.__setattr__(self, 'members', frozenset([self.name]))
        if self.name in self.links:
            raise ValueError(f"Region {self.name!r} cannot link to itself")

    def is_linked(self, other: 'Region') -> bool:
        return other.name in self.links and self.name in other.links

    def fuse(self, other: 'Region') -> 'Region':
        """
        Fuse two adjacent regions into one.

        Args:
            other: Region linked to this one

        Returns:
            Region named "<self>-<other>" with the summed GDP and the union
            of both link sets minus the mutual link
        """
        if not self.is_linked(other):
            raise FusionError(f"Cannot fuse {self.name!r} and {other.name!r}: regions are not linked")

        name = fused_name(self.name, other.name)
        if name in self.links or name in other.links:
            raise FusionError(f"Fused region name {name!r} is already taken by a neighbor")

        return Region(
            name=name,
            gdp=self.gdp + other.gdp,
            links=(self.links | other.links) - {self.name, other.name},
            members=self.members | other.members,
        )

    def relink(self, old_names: Iterable[str], new_name: str) -> 'Region':
        """Replace links to any of old_names with a single link to new_name."""
        return replace(self, links=(self.links - set(old_names)) | {new_name})


def fused_name(left: str, right: str) -> str:
    return f"{left}{SEPARATOR}{right}"


def parse_region(line: str, line_number: Optional[int] = None) -> Region:
    """
    Parse one "NAME : GDP : NEIGHBOR-NEIGHBOR-..." line.
    """
    where = f"line {line_number}: " if line_number is not None else ""
    fields = [part.strip() for part in line.split(FIELD_SEPARATOR)]

    if len(fields) < 2 or not fields[0]:
        raise InputError(f"{where}Missing region name or gdp in {line.strip()!r}")
    if len(fields) < 3:
        raise InputError(f"{where}Missing region links in {line.strip()!r}")
    if len(fields) > 3:
        raise InputError(f"{where}Too many fields in {line.strip()!r}")

    name, raw_gdp, raw_links = fields
    try:
        gdp = float(raw_gdp)
    except ValueError as e:
        raise InputError(f"{where}Could not parse gdp {raw_gdp!r}: {e}") from e
    if not math.isfinite(gdp):
        raise InputError(f"{where}Region {name!r} has a non-finite gdp {raw_gdp!r}")

    links = [link.strip() for link in raw_links.split(SEPARATOR)]
    try:
        return Region(name=name, gdp=gdp, links=frozenset(link for link in links if link))
    except ValueError as e:
        raise InputError(f"{where}{e}") from e


def format_region(region: Region) -> str:
    """Serialize a region back to its input line, neighbors sorted."""
    return f" {FIELD_SEPARATOR} ".join([
        region.name,
        repr(region.gdp),
        SEPARATOR.join(sorted(region.links)),
    ])
