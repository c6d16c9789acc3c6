"""
gotestcraft - Table-driven Go test scaffold generator.

Given a Go source file and a position inside a function or method, gotestcraft
produces the edits that add a test skeleton to the companion _test.go file.
"""

__version__ = "0.1.0"
