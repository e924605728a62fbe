"""
flagsync - capability-negotiated feature payloads for SDKs.
"""

__version__ = "0.1.0"
