import os

from dotenv import load_dotenv
from openai import OpenAI

from .config import Config
from .logger import GenerationLogger

load_dotenv()


class ImageGenerator:
    """Handles all image and text generation API calls."""

    # Maximum number of images a single generation request may ask for.
    IMAGE_API_LIMIT = 4

    def __init__(self, config: Config, logger: GenerationLogger, client: OpenAI = None):
        self.client = client or OpenAI(api_key=os.getenv("OPENAI_API_KEY"))
        self.config = config
        self.logger = logger

    def generate_images(self, prompt: str, count: int):
        """
        Request up to `count` images for the prompt.

        Returns the base64 encoded payloads that came back, which can be fewer
        than requested or none at all.
        """
        count = min(count, self.IMAGE_API_LIMIT)
        self.logger.debug(f"Requesting {count} image(s) from {self.config.IMAGE_MODEL}")

        try:
            result = self.client.images.generate(
                model=self.config.IMAGE_MODEL, prompt=prompt, size=self.config.IMAGE_SIZE, n=count
            )
        except Exception as e:
            self.logger.error(f"Failed to generate images: {e}")
            raise

        return [image.b64_json for image in (result.data or []) if image.b64_json]

    def generate_text(self, prompt: str) -> str:
        """Expand a text prompt into an image prompt with the language model."""
        try:
            response = self.client.responses.create(
                model=self.config.GPT_MODEL,
                input=prompt,
            )
        except Exception as e:
            self.logger.error(f"Failed to generate text prompt: {e}")
            raise

        text = response.output_text.strip()
        self.logger.info(f"Generated prompt: {' '.join(text.split()[:10])}")
        return text
