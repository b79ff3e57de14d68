"""
OCR service for extracting text from earnings screenshots.
"""

import io
import logging
from typing import Dict, List, Optional

import pytesseract
from PIL import Image, ImageEnhance

from riderscan.config import settings

logger = logging.getLogger(__name__)

BBOX_KEYS = ('text', 'left', 'top', 'width', 'height', 'conf')


class OCRService:
    """
    Tesseract wrapper for Korean earnings screenshots.

    Built once at application startup and shared through dependency
    injection; it holds configuration only, so concurrent calls are safe.
    """

    MAX_SIDE = 2400
    CONTRAST = 2.0
    CONFIG = r'--oem 3 --psm 6'

    def __init__(self, tesseract_cmd: Optional[str] = None, languages: Optional[str] = None):
        """Initialize OCR service with Tesseract configuration."""
        pytesseract.pytesseract.tesseract_cmd = tesseract_cmd or settings.TESSERACT_CMD
        self.languages = languages or settings.OCR_LANGUAGES

    def extract_text_from_image(self, image_data: bytes) -> str:
        """
        Extract text from a screenshot using Tesseract OCR.

        Args:
            image_data: Raw image bytes (JPEG, PNG, etc.)

        Returns:
            Extracted text, or "" when the image cannot be read
        """
        try:
            image = self._preprocess_image(Image.open(io.BytesIO(image_data)))
            text = pytesseract.image_to_string(image, lang=self.languages, config=self.CONFIG)
            return text.strip()

        except (OSError, pytesseract.TesseractError):
            logger.warning("Failed to extract text from image", exc_info=True, extra={
                "size": len(image_data),
            })
            return ""

    def extract_text_with_bbox(self, image_data: bytes) -> Dict[str, List]:
        """
        Extract text with bounding box coordinates using Tesseract.

        Returns:
            Dictionary with keys: 'text', 'left', 'top', 'width', 'height', 'conf'
            Each key maps to a list of values for each detected word.
        """
        try:
            image = self._preprocess_image(Image.open(io.BytesIO(image_data)))
            return pytesseract.image_to_data(
                image,
                lang=self.languages,
                config=self.CONFIG,
                output_type=pytesseract.Output.DICT,
            )

        except (OSError, pytesseract.TesseractError):
            logger.warning("Failed to extract text with bbox", exc_info=True, extra={
                "size": len(image_data),
            })
            return {key: [] for key in BBOX_KEYS}

    def _preprocess_image(self, image: Image.Image) -> Image.Image:
        """
        Preprocess a screenshot to improve OCR accuracy.

        Phone screenshots are often taller than Tesseract needs; downscaling
        the longest side keeps recognition time bounded.
        """
        if max(image.size) > self.MAX_SIDE:
            scale = self.MAX_SIDE / max(image.size)
            image = image.resize(
                (max(1, int(image.width * scale)), max(1, int(image.height * scale))),
                Image.LANCZOS,
            )

        if image.mode != 'RGB':
            image = image.convert('RGB')

        image = image.convert('L')

        enhancer = ImageEnhance.Contrast(image)
        return enhancer.enhance(self.CONTRAST)
