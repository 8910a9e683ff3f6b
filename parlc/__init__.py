"""Compiler for the PArL language: lexer, LL(1) parser, semantic checks and stack-machine code generation."""

__version__ = "0.1.0"