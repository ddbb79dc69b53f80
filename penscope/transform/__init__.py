"""Affine transforms between unit space and device space."""

from penscope.transform.affine import Affine, initial_transform

__all__ = ["Affine", "initial_transform"]
