import math
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import networkx as nx
import numpy as np

from .exceptions import FusionError
from .region import Region, fused_name


class Country:
    """
    Undirected graph of regions keyed by name.

    Adjacency is stored on both ends: if region X links to Y, Y links to X.
    """

    def __init__(self, regions: Optional[Iterable[Region]] = None):
        self.regions: Dict[str, Region] = {}
        for region in regions or ():
            self.regions[region.name] = region

    def __len__(self) -> int:
        return len(self.regions)

    def __contains__(self, name: str) -> bool:
        return name in self.regions

    def __getitem__(self, name: str) -> Region:
        return self.regions[name]

    def __repr__(self) -> str:
        return f"Country({sorted(self.regions)!r})"

    def __str__(self) -> str:
        return self.summary()

    def names(self) -> List[str]:
        """Region names sorted lexicographically."""
        return sorted(self.regions)

    def copy(self) -> 'Country':
        # Regions are immutable, copying the mapping is enough
        clone = Country()
        clone.regions = dict(self.regions)
        return clone

    def links(self) -> List[Tuple[str, str]]:
        """
        Every undirected link exactly once, as (smaller name, larger name).
        Pairs are grouped by region in ascending GDP order.
        """
        ordered = sorted(self.regions.values(), key=lambda r: (r.gdp, r.name))
        pairs = []
        for region in ordered:
            for link in sorted(region.links):
                if region.name < link:
                    pairs.append((region.name, link))
        return pairs

    def fuse_regions(self, left_name: str, right_name: str) -> Region:
        """
        Replace two linked regions with their fusion and rewire their neighbors.

        Args:
            left_name: First region, its name comes first in the fused name
            right_name: Second region, must be linked to the first

        Returns:
            The fused region, now part of the country
        """
        for name in (left_name, right_name):
            if name not in self.regions:
                raise FusionError(f"Cannot fuse unknown region {name!r}")

        name = fused_name(left_name, right_name)
        if name in self.regions:
            raise FusionError(f"Fused region name {name!r} is already taken")
        fused = self.regions[left_name].fuse(self.regions[right_name])

        del self.regions[left_name]
        del self.regions[right_name]

        old_names = (left_name, right_name)
        for name in fused.links:
            self.regions[name] = self.regions[name].relink(old_names, fused.name)

        self.regions[fused.name] = fused
        return fused

    def gdp_values(self) -> np.ndarray:
        return np.fromiter((r.gdp for r in self.regions.values()), dtype=float, count=len(self.regions))

    def total_gdp(self) -> float:
        return float(sum(r.gdp for r in self.regions.values()))

    def mean_gdp(self) -> float:
        return self.total_gdp() / len(self.regions)

    def std_dev_sq(self) -> float:
        """
        Population variance of the region GDPs.

        Kept squared: comparisons only need the ordering.
        """
        return float(np.var(self.gdp_values()))

    variance = std_dev_sq

    def std_dev(self) -> float:
        return math.sqrt(self.std_dev_sq())

    def summary(self) -> str:
        if not self.regions:
            return "The country has no regions"
        return "\n".join([
            f"The avg GDP is {self.mean_gdp()}",
            f"The std_dev_sq is {self.std_dev_sq()}",
            f"The std_dev is {self.std_dev()}",
        ])

    def to_graph(self) -> nx.Graph:
        """Networkx view of the country, with gdp stored as a node attribute."""
        G = nx.Graph()
        for region in self.regions.values():
            G.add_node(region.name, gdp=region.gdp)
        for left, right in self.links():
            G.add_edge(left, right)
        return G

    def iter_regions(self) -> Iterator[Region]:
        for name in self.names():
            yield self.regions[name]
