"""Search Nearby feature action.

Buffers a feature the user selected on a map surface through a remote
geometry service, queries a target data source for features that
intersect the buffer, and selects the matching features rendered on the
same map surface.
"""

__version__ = "0.1.0"
