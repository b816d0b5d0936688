"""Showcase storefront data layer: two-tier TTL cache over the remote table store."""
