"""Capture-based GraphQL mock pipeline: extract, fingerprint, register, validate and merge HAR recordings."""
