"""Affiscope: multi-site affiliate catalog backend."""
