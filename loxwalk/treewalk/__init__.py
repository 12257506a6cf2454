"""Resolved syntax tree, name resolver, runtime values and tree-walking interpreter."""

__all__ = ["interpreter", "nodes", "resolver", "runtime"]