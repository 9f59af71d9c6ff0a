from __future__ import annotations

import base64
import binascii
import logging
from typing import Optional


logger = logging.getLogger(__name__)


def encode_opaque_cursor(data: str) -> str:
    """ Encode a cursor string as an opaque cursor: base64 of its UTF-8 bytes """
    return base64.b64encode(data.encode('utf-8')).decode('ascii')


def decode_opaque_cursor(cursor: Optional[str]) -> Optional[str]:
    """ Decode an opaque cursor into the cursor string

    Bad cursors are not errors: they decode to None, as if no cursor was given at all.
    """
    if not cursor:
        return None

    try:
        return base64.b64decode(cursor).decode('utf-8')
    except (binascii.Error, UnicodeDecodeError, ValueError):
        logger.debug('Ignored a malformed cursor: %r', cursor)
        return None
