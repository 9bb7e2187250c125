"""Screenshot encoding: compress captures before they go into payloads and prompts."""
from PIL import Image
import io
import base64


def compress_screenshot(screenshot_bytes: bytes, max_width: int = 1280, quality: int = 60) -> bytes:
    """
    Downscale to max_width and re-encode as JPEG.
    A 1920px-wide PNG section capture drops to a few hundred KB.
    """
    img = Image.open(io.BytesIO(screenshot_bytes))

    w, h = img.size
    if w > max_width:
        ratio = max_width / w
        img = img.resize((max_width, max(1, int(h * ratio))), Image.LANCZOS)

    # JPEG has no alpha channel
    if img.mode in ('RGBA', 'LA'):
        bg = Image.new('RGB', img.size, (255, 255, 255))
        bg.paste(img, mask=img.split()[-1])
        img = bg
    elif img.mode != 'RGB':
        img = img.convert('RGB')

    buf = io.BytesIO()
    img.save(buf, format='JPEG', quality=quality, optimize=True)
    return buf.getvalue()


def screenshot_to_b64(screenshot_bytes: bytes, compress: bool = True,
                      max_width: int = 1280, quality: int = 60) -> str:
    """Base64 JPEG (compressed) or the raw capture bytes as base64."""
    if compress:
        screenshot_bytes = compress_screenshot(screenshot_bytes, max_width=max_width, quality=quality)
    return base64.b64encode(screenshot_bytes).decode()


def media_type_of(b64: str) -> str:
    """Sniff the media type of a base64 raster from its magic bytes."""
    head = base64.b64decode(b64[:24] + "=" * (-len(b64[:24]) % 4))
    if head.startswith(b"\x89PNG"):
        return "image/png"
    if head[:3] == b"GIF":
        return "image/gif"
    if head[:4] == b"RIFF":
        return "image/webp"
    return "image/jpeg"
