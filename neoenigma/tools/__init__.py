"""
Command-line tools for NeoEnigma.
"""
