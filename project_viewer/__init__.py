"""Serve pre-built project sites from object storage under /projects/<repoId>/."""
