"""pgantt.tools package

Developer utilities for chart blocks (inspect, build).

Keep this package's __init__ free of eager imports so `python -m` stays cheap.
"""

__all__: list[str] = []
