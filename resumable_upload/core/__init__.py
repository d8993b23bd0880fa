"""Errors and HTTP transport shared by the upload pipeline."""
