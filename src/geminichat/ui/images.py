"""Inline image display for chat messages.

Hidden design decisions:
- Image rendering approach (textual-image picks Sixel, TGP or halfcells)
- Decoding inline base64 payloads into images
- Image sizing within a chat bubble
"""

import io

from PIL import Image as PILImage
from PIL import UnidentifiedImageError
from textual.widgets import Static
from textual_image.widget import Image as TextualImageWidget

from ..assets import decode_asset
from ..errors import AssetError
from ..models import InlineAsset
from .config import IMAGE_MAX_HEIGHT


def asset_to_image(asset: InlineAsset) -> PILImage.Image:
    """Decode an inline asset into a PIL image.

    Raises:
        AssetError: If the payload is not a readable image
    """
    try:
        image = PILImage.open(io.BytesIO(decode_asset(asset)))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise AssetError(f"Cannot display {asset.mime_type} image: {e}") from e
    return image


def describe_asset(asset: InlineAsset) -> str:
    """One-line label for an attachment."""
    return f"[attachment: {asset.mime_type}, {asset.size:,} bytes]"


def build_asset_widget(asset: InlineAsset) -> TextualImageWidget | Static:
    """Widget for one inline part: the picture itself, or a label."""
    if not asset.mime_type.startswith("image/"):
        return Static(describe_asset(asset), markup=False, classes="message-attachment")
    try:
        image = asset_to_image(asset)
    except AssetError as e:
        return Static(f"[{e}]", markup=False, classes="message-attachment")
    widget = TextualImageWidget(image, classes="message-image")
    widget.styles.max_height = IMAGE_MAX_HEIGHT
    return widget
