"""Storefront state layer: event bus, catalog and basket, two-step checkout."""
