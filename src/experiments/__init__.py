"""
Benchmarks of the region fusion search on synthetic countries.
"""
