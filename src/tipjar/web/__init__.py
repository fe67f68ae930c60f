"""
HTTP boundary for tipjar (Django JSON API).

Serializes exactly the ParsedReport / DistributeResult wire shapes.
"""
