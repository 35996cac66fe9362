"""petgrid.tools package

Command-line utilities around the day grid (drop application, month view,
layout checks).

Keep this package's __init__ free of eager imports so `python -m
petgrid.tools.<name>` stays side-effect free.
"""

__all__: list[str] = []
