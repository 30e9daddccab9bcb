"""
REST API plugin.

Turns a declarative REST action description into an executor-ready request
descriptor and renders the same action as a curl command line.
"""

__version__ = "0.1.0"
