"""Generates the JavaScript bindings for the Emscripten build of cephes."""

__version__ = "0.1.0"
