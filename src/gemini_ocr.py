"""
Google Gemini schedule extraction.

Sends an uploaded schedule image to Gemini and returns the raw response text.
Repairing and parsing that text is left to parsing.py.
"""
import io

from PIL import Image, UnidentifiedImageError
import google.generativeai as genai

from config import Settings
from performance import PerformanceTimer, create_logger
from prompt import get_shift_prompt

log = create_logger("GEMINI")


class InvalidImageError(ValueError):
    """Raised when the uploaded bytes are not a readable image."""


def load_image(image_data: bytes) -> Image.Image:
    """Open uploaded bytes with Pillow, raising InvalidImageError if unreadable."""
    try:
        image = Image.open(io.BytesIO(image_data))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidImageError(f"Uploaded file is not a readable image: {e}") from e
    return image


class GeminiShiftExtractor:
    """Extracts shift text from schedule images with a Gemini model."""

    def __init__(self, settings: Settings):
        self.model_name = settings.gemini_model

        genai.configure(api_key=settings.google_api_key)

        # Near-deterministic output
        generation_config = {
            'temperature': 0.1,
            'top_p': 0.1,
            'top_k': 1,
        }

        self.model = genai.GenerativeModel(
            self.model_name,
            generation_config=generation_config
        )

    def extract(self, image_data: bytes, mime_type: str = None) -> str:
        """
        Run the shift extraction prompt over one image.

        Args:
            image_data: Raw image bytes
            mime_type: Declared upload type, used for logging only

        Returns:
            Raw model response text, stripped
        """
        image = load_image(image_data)
        log(f"Sending {len(image_data):,} byte {image.format or mime_type} image to {self.model_name}")

        with PerformanceTimer(f"Gemini extraction ({self.model_name})", log):
            response = self.model.generate_content([get_shift_prompt(), image])

        response_text = response.text.strip()
        log(f"Gemini returned {len(response_text)} characters")
        return response_text
