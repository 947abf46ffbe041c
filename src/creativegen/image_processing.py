import base64
import io

from PIL import Image

from .config import Config
from .logger import GenerationLogger


class ImageProcessor:
    """Turns generated image payloads into PNG files ready for upload."""

    def __init__(self, config: Config, logger: GenerationLogger):
        self.config = config
        self.logger = logger

    def decode_image(self, payload: str) -> bytes:
        """Decode a base64 payload and return PNG bytes."""
        img_bytes = base64.b64decode(payload)

        with Image.open(io.BytesIO(img_bytes)) as img:
            self.logger.debug(f"Decoded {img.format} image ({img.size[0]}x{img.size[1]})")
            if img.format == "PNG":
                return img_bytes

            # Storage expects image/png
            buf = io.BytesIO()
            if img.mode not in ("RGB", "RGBA", "L", "LA", "P"):
                img = img.convert("RGBA")
            img.save(buf, format="PNG")
            return buf.getvalue()
