"""
Spatial data structures for efficient force calculations.

Provides the index-addressed quadtree used for Barnes-Hut O(n log n)
gravity approximation.
"""

from .quadtree import ROOT, BarnesHutTree, Quad, TreeNode, TreeStructureError

__all__ = ["BarnesHutTree", "Quad", "TreeNode", "TreeStructureError", "ROOT"]
