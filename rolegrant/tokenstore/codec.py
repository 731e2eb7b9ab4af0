"""
JSON serialization of the token store file.

The file holds one object:

    {"version": 1, "tokens": {"<decimal id>": {"privileges": [...],
                                               "remaining_uses": n,
                                               "expiration": "<ISO 8601>"}}}
"""

import json
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from ..common.utils import MAX_TOKEN_ID, format_token_id
from ..core.types import TokenId, TokenRecord
from ..errors import StoreFormatError


FORMAT_VERSION = 1


def encode_tokens(tokens: Mapping[TokenId, TokenRecord]) -> str:
    """Serialize the whole mapping to the store file format."""
    data = {
        "version": FORMAT_VERSION,
        "tokens": {
            format_token_id(token_id): record.to_dict()
            for token_id, record in sorted(tokens.items())
        },
    }
    return json.dumps(data, indent=2) + "\n"


def decode_tokens(text: str, path: Optional[str] = None) -> Dict[TokenId, TokenRecord]:
    """
    Parse store file content.

    Raises:
        StoreFormatError: If the content is not a valid store document
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise StoreFormatError(f"Invalid JSON in {path}: {e}", path=path, cause=e)

    if not isinstance(data, dict):
        raise StoreFormatError("store document must be an object", path=path)
    if data.get("version") != FORMAT_VERSION:
        raise StoreFormatError(f"unsupported store version: {data.get('version')!r}", path=path)

    raw_tokens = data.get("tokens")
    if not isinstance(raw_tokens, dict):
        raise StoreFormatError("store document has no 'tokens' object", path=path)

    tokens: Dict[TokenId, TokenRecord] = {}
    for key, raw_record in raw_tokens.items():
        token_id = _decode_key(key, path)
        tokens[token_id] = _decode_record(key, raw_record, path)
    return tokens


def _decode_key(key: str, path: Optional[str]) -> TokenId:
    if not (key.isascii() and key.isdigit()):
        raise StoreFormatError(f"invalid token id {key!r}", path=path)
    token_id = int(key)
    if key != format_token_id(token_id):
        raise StoreFormatError(f"token id {key!r} is not in canonical form", path=path)
    if token_id > MAX_TOKEN_ID:
        raise StoreFormatError(f"token id {key} exceeds 128 bits", path=path)
    return token_id


def _decode_record(key: str, raw: Any, path: Optional[str]) -> TokenRecord:
    if not isinstance(raw, dict):
        raise StoreFormatError(f"record {key} must be an object", path=path)

    privileges = raw.get("privileges")
    if not isinstance(privileges, list) or not all(isinstance(p, str) for p in privileges):
        raise StoreFormatError(f"record {key}: 'privileges' must be a list of strings", path=path)

    uses = raw.get("remaining_uses")
    if isinstance(uses, bool) or not isinstance(uses, int) or uses < 0:
        raise StoreFormatError(f"record {key}: 'remaining_uses' must be a non-negative integer", path=path)

    expiration = raw.get("expiration")
    if not isinstance(expiration, str):
        raise StoreFormatError(f"record {key}: 'expiration' must be a timestamp", path=path)
    try:
        datetime.fromisoformat(expiration)
    except ValueError as e:
        raise StoreFormatError(f"record {key}: bad expiration {expiration!r}", path=path, cause=e)

    return TokenRecord.from_dict(raw)
