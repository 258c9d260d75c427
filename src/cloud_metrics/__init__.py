"""
Cloud Metrics Writer

Exports locally recorded metric points to a remote time-series monitoring API,
registering metric descriptors on first use and batching points into
rate-limited requests.
"""

__version__ = "1.0.0"
