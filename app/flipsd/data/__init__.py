"""Bundled data files for flipsd."""
