# This file makes the 'plumbing' directory a Python package
# The low-level object store, index and tree/commit codecs live here; commands import the modules directly
