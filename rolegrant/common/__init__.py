# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Common package providing shared helpers for rolegrant.

This package includes:
- Token identifier generation and formatting
- Time helpers (UTC clock, duration formatting)
"""

from .utils import (
    # Identifiers
    TOKEN_ID_BITS, MAX_TOKEN_ID, generate_token_id, format_token_id,

    # Time operations
    get_current_time, ensure_utc, format_duration,
)

__all__ = [
    'TOKEN_ID_BITS', 'MAX_TOKEN_ID', 'generate_token_id', 'format_token_id',
    'get_current_time', 'ensure_utc', 'format_duration',
]
