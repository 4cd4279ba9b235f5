#!/usr/bin/env python3
"""Common error base for the filediff engine."""

from __future__ import annotations


class FileDiffError(Exception):
    """Base class for every fatal filediff failure.

    `code` is a short machine-friendly tag used in logs and exit messages.
    """

    def __init__(self, message: str, code: str = "UNKNOWN"):
        super().__init__(message)
        self.code = code
