"""
r2vault - daily data-directory backups to S3-compatible storage, atomic local
writes with an audit trail, and a storage identity check.
"""

__version__ = "1.0.0"
