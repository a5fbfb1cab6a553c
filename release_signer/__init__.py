"""
Release signing resolution for Android builds.

This package decides which signing identity an Android release build uses,
based on an optional key.properties credentials file, and drives the SDK
signing tools with that identity.
"""

__version__ = "0.1.0"
