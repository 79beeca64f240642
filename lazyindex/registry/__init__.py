"""Registry — the catalog of built lazy-load indices.

The registry provides:
- Storage: append-only, digest-unique, insertion-ordered index records
- Query: AND-composed filters by image reference and platform
- Info: structured single-record lookup by index digest
- Recording: storing the result of an external index build
"""
