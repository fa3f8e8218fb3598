"""Utility functions for avrorec.

This module provides schema fingerprints and size calculation.
Import from the submodules (or from the top-level package):

- ``avrorec.utils.fingerprint``: CRC-64-AVRO fingerprints, single-object header
- ``avrorec.utils.sizing``: encoded size of a record without encoding it
"""
