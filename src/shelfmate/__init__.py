# ABOUTME: Shelfmate - personal book library with shareable shelves.
# ABOUTME: Resolves ISBNs against external catalogs and keeps library state consistent.

__version__ = "0.1.0"
