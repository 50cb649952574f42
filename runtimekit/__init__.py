"""
RuntimeKit: resolve, cache and activate language runtimes.

A requested version ("17", "11.0.3-ea") is matched against installed copies
in the shared tool cache before any vendor catalog is queried; a new release
is downloaded, registered in the cache and exported to the host environment.
"""

__version__ = "0.1.0"
