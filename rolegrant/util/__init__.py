# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Utility package for rolegrant.

Provides configuration loading and input validation helpers.
"""

from .config import (
    ENV_PREFIX,
    get_config_value,
    get_bool_config,
    get_int_config,
    parse_duration_string,
    load_config_file,
)

from .validation import (
    parse_token_id,
    is_valid_privilege,
    validate_privileges,
    validate_uses,
    validate_ttl,
)

__all__ = [
    # Configuration
    'ENV_PREFIX',
    'get_config_value',
    'get_bool_config',
    'get_int_config',
    'parse_duration_string',
    'load_config_file',

    # Validation
    'parse_token_id',
    'is_valid_privilege',
    'validate_privileges',
    'validate_uses',
    'validate_ttl',
]
