"""
Catalog hierarchy walking
"""
from .tree_walker import TreeWalker

__all__ = ['TreeWalker']
