"""
docstream

Client-side implementation of an event-sourced, content-addressed document
protocol: identifiers, signed event envelopes, JSON patch content updates and a
deterministic document-state reducer.
"""

__version__ = "0.1.0"
