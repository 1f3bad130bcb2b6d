"""Stateless OAuth proxy that hands provider access tokens to a client-side CMS."""

__version__ = "0.1.0"
