"""Lexer, syntax tree, name resolver and tree-walking interpreter for Lox."""

__version__ = "0.1.0"