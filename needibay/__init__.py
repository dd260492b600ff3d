"""Needibay: web front-end for the admin, distributor and salesperson roles."""

__version__ = "0.3.0"
