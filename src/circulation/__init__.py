# ABOUTME: Top-level package for the circulation desk.
# ABOUTME: Subpackages: catalog (entities, store, locks), core (coordination, status), cli.
