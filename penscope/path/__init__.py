"""Device-space path accumulation with a persistent current point."""

from penscope.path.tracker import PathSegments, PathTracker, Point, Subpath

__all__ = ["PathSegments", "PathTracker", "Point", "Subpath"]
