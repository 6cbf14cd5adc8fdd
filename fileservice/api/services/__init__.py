"""Browsing, import and export services"""
from .error_classifier import classify_relational_error, classify_storage_error
from .import_worker import ImportWorker
from .postgres_browser import PostgresBrowser, split_table_name
from .s3_browser import S3Browser
from .table_export import serialize_table

__all__ = [
    "classify_relational_error",
    "classify_storage_error",
    "ImportWorker",
    "PostgresBrowser",
    "split_table_name",
    "S3Browser",
    "serialize_table",
]
