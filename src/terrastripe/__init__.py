"""
Attribute expansion and flattening for a Stripe infrastructure provider.

Configuration trees go in, typed API parameters come out, and API responses
are mapped back onto the trees the host framework records.
"""

__version__ = "0.1.0"
