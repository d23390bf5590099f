from .conversion import (
    MAX_INLINE_BYTES,
    bytes_to_inline_asset,
    decode_asset,
    file_to_inline_asset,
    guess_mime_type,
    is_image,
    parse_data_url,
    to_data_url,
)

__all__ = [
    "MAX_INLINE_BYTES",
    "bytes_to_inline_asset",
    "decode_asset",
    "file_to_inline_asset",
    "guess_mime_type",
    "is_image",
    "parse_data_url",
    "to_data_url",
]
