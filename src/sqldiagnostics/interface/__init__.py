"""
Interface layer: command-line entry points.
"""
