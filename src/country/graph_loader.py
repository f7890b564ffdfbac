from typing import Any, Dict, Optional, Sequence

import networkx as nx
import numpy as np

from .country import Country
from .exceptions import InputError
from .region import SEPARATOR, Region, format_region, parse_region

ERROR_MARKER = "Error\n"


def parse_country(text: str, validate: bool = True) -> Country:
    """
    Parse a country from its line-based description.
    One region per line: NAME : GDP : NEIGHBOR-NEIGHBOR-...
    Blank lines are skipped.
    """
    country = Country()
    for line_number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        region = parse_region(line, line_number)
        if region.name in country:
            raise InputError(f"line {line_number}: Duplicate region name {region.name!r}")
        country.regions[region.name] = region

    if validate:
        validate_country(country)
    return country


def validate_country(country: Country) -> None:
    """
    Check that every link points to a known region and is listed on both ends.
    Names may not contain the neighbor separator: they could never be
    referenced as neighbors and could collide with fused names.
    """
    for region in country.iter_regions():
        if SEPARATOR in region.name:
            raise InputError(f"Region name {region.name!r} cannot contain {SEPARATOR!r}")
        for link in sorted(region.links):
            if link not in country:
                raise InputError(f"Region {region.name!r} links to unknown region {link!r}")
            if region.name not in country[link].links:
                raise InputError(
                    f"Link {region.name!r} -> {link!r} is not symmetric: {link!r} does not list {region.name!r}")


def format_country(country: Country) -> str:
    """
    Serialize a parsed country back to its line-based description.
    Fused countries cannot be written: their names contain the neighbor separator.
    """
    for name in country.names():
        if SEPARATOR in name:
            raise ValueError(f"Cannot format fused region {name!r}")
    return "\n".join(format_region(region) for region in country.iter_regions())


def load_country(path: str, validate: bool = True, verbose: bool = False) -> Country:
    """
    Load a country from a region description file.
    """
    with open(path, 'r', encoding='utf-8') as f:
        text = f.read()

    country = parse_country(text, validate=validate)

    if verbose:
        G = country.to_graph()
        print(f"\nAnalyzing file: {path}")
        print(f"Regions: {G.number_of_nodes()}")
        print(f"Links: {G.number_of_edges()}")
        if G.number_of_nodes() and not nx.is_connected(G):
            print(f"Found {nx.number_connected_components(G)} components")

    return country


def format_result(country: Country) -> str:
    """Sorted region names, one per line, no trailing newline."""
    return "\n".join(country.names())


def write_result(path: str, country: Country) -> None:
    with open(path, 'w', encoding='utf-8') as f:
        f.write(format_result(country))


def write_error(path: str) -> None:
    with open(path, 'w', encoding='utf-8') as f:
        f.write(ERROR_MARKER)


def country_from_graph(G: nx.Graph, gdp: Optional[Sequence[float]] = None) -> Country:
    """
    Build a country from a networkx graph.

    Args:
        G: Undirected graph, node labels become region names
        gdp: GDP per node in G.nodes() order; defaults to the 'gdp' node attribute

    Returns:
        Country whose links are the graph edges (self-loops dropped)
    """
    nodes = list(G.nodes())
    if gdp is None:
        gdp = [G.nodes[node].get('gdp', 0.0) for node in nodes]
    if len(gdp) != len(nodes):
        raise ValueError(f"Expected {len(nodes)} gdp values, got {len(gdp)}")

    return Country(
        Region(name=str(node), gdp=float(value),
               links=frozenset(str(nb) for nb in G.neighbors(node) if nb != node))
        for node, value in zip(nodes, gdp)
    )


def generate_country(num_regions: int, extra_link_prob: float = 0.2,
                     max_gdp: float = 100.0, seed: Optional[int] = None) -> Country:
    """
    Random connected country: a random spanning tree plus extra links.

    Region i links to a random earlier region, then every other pair is
    linked with probability extra_link_prob. Names are R0, R1, ...
    """
    rng = np.random.default_rng(seed)
    G = nx.Graph()
    G.add_nodes_from(f"R{i}" for i in range(num_regions))

    for i in range(1, num_regions):
        G.add_edge(f"R{i}", f"R{int(rng.integers(0, i))}")

    for i in range(num_regions):
        for j in range(i + 1, num_regions):
            if rng.random() < extra_link_prob:
                G.add_edge(f"R{i}", f"R{j}")

    gdp = np.round(rng.uniform(1.0, max_gdp, size=num_regions), 2)
    return country_from_graph(G, gdp)


def get_country_stats(country: Country) -> Dict[str, Any]:
    """
    Compute basic graph and GDP statistics
    """
    G = country.to_graph()
    n = G.number_of_nodes()
    stats = {
        'num_regions': n,
        'num_links': G.number_of_edges(),
        'density': nx.density(G),
        'num_components': nx.number_connected_components(G),
        'is_connected': n > 0 and nx.is_connected(G),
    }

    if n:
        degrees = [d for _, d in G.degree()]
        stats.update({
            'avg_degree': sum(degrees) / n,
            'min_degree': min(degrees),
            'max_degree': max(degrees),
            'total_gdp': country.total_gdp(),
            'mean_gdp': country.mean_gdp(),
            'std_dev_sq': country.std_dev_sq(),
            'std_dev': country.std_dev(),
        })

    return stats
