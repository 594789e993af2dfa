"""
CableLens - Network path diagnostics

Traces the route to a domain, annotates every hop with geographic and
network-ownership data, and classifies each segment as an overland or
submarine-cable link.
"""

__version__ = "1.0.0"
__author__ = "CableLens"
