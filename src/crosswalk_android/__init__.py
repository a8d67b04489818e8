"""Crosswalk release import and multi-ABI build tooling for Android projects."""
