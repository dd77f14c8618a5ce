"""
Update center catalog generator.

Fuses a Maven-style artifact repository with wiki metadata into the
update-center.json catalog and the release-history.json document.
"""

__version__ = "1.0.0"
