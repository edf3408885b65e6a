# ============================================================================
# src/ticket_intake/extractors/ocr_extractor.py
# ============================================================================
"""
OCR Stage for Photographed Citations

Turns one uploaded image into text with Tesseract (pytesseract), then hands
the text to the Field Extraction Engine.

1. Load with EXIF orientation correction and downscaling
2. Recognize; when the first pass is weak, retry once on an enhanced image
3. Fail with RecognitionFailed on recognizer error or empty text

Recognition failures are not retried by callers: the user is asked to enter
the ticket manually instead.
"""

import asyncio
import functools
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np
import pytesseract
from PIL import Image, ImageEnhance, ImageFilter

from ..config import ocr_settings, OCRSettings, threshold_settings, ThresholdSettings
from ..core.context import AcquisitionMethod, OCR_SOURCE, UnifiedTicketRecord
from ..utils.exceptions import RecognitionFailed
from ..utils.image_utils import detect_image_type, load_image_for_ocr
from ..utils.logging import log_performance
from .field_extractor import FieldExtractor

logger = logging.getLogger(__name__)


@dataclass
class OCRResult:
    """Raw recognizer output for one image."""
    text: str
    confidence: float             # recognizer's mean word confidence, 0-1
    word_count: int = 0
    enhanced: bool = False
    image_type: Optional[str] = None


@dataclass
class OCROutcome:
    """Recognition plus the records extracted from it."""
    ocr: OCRResult
    records: List[UnifiedTicketRecord] = field(default_factory=list)


class OCRStage:
    """
    Image -> text -> UnifiedTicketRecord list.

    Records are tagged with the OCR source and their confidence never
    exceeds the recognizer's own confidence or the configured OCR ceiling.
    """

    def __init__(
        self,
        extractor: Optional[FieldExtractor] = None,
        settings: Optional[OCRSettings] = None,
        thresholds: Optional[ThresholdSettings] = None,
    ):
        self.logger = logging.getLogger(__name__)
        self.settings = settings or ocr_settings
        self.thresholds = thresholds or threshold_settings
        self.extractor = extractor or FieldExtractor(self.thresholds)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def process(self, image_bytes: bytes, timeout: Optional[float] = None) -> OCROutcome:
        """
        Recognize an image and extract citation records from it.

        Args:
            timeout: per Tesseract call; the subprocess is killed when exceeded

        Raises:
            RecognitionFailed: image unreadable, recognizer error or empty text
        """
        ocr = self.recognize(image_bytes, timeout=timeout)

        base = min(ocr.confidence, self.thresholds.OCR_CONFIDENCE_CEILING)
        records = self.extractor.extract_records(
            ocr.text,
            source=OCR_SOURCE,
            base_confidence=base,
            method=AcquisitionMethod.OCR,
            evidence={
                "ocr_confidence": round(ocr.confidence, 4),
                "ocr_enhanced": ocr.enhanced,
                "image_type": ocr.image_type,
            },
        )

        self.logger.info(
            f"OCR produced {len(records)} record(s) from {len(ocr.text)} chars "
            f"({ocr.confidence:.2f} recognizer confidence)"
        )
        return OCROutcome(ocr=ocr, records=records)

    async def process_async(
        self,
        image_bytes: bytes,
        timeout: Optional[float] = None,
    ) -> OCROutcome:
        """
        Run process() in the default executor so the event loop stays free.

        The same budget is handed to Tesseract, so a timed-out recognition
        kills its subprocess instead of leaving it running in the worker thread.
        """
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(None, functools.partial(self.process, image_bytes, timeout))
        if timeout is None:
            return await future
        try:
            return await asyncio.wait_for(future, timeout=timeout)
        except asyncio.TimeoutError as e:
            raise RecognitionFailed(f"OCR exceeded {timeout:.0f}s") from e

    @log_performance(logger, "OCR recognition")
    def recognize(self, image_bytes: bytes, timeout: Optional[float] = None) -> OCRResult:
        """
        Recognize text in an uploaded image.

        Raises:
            RecognitionFailed: image unreadable, recognizer error or empty text
        """
        image_type = detect_image_type(image_bytes or b"")
        try:
            image = load_image_for_ocr(image_bytes, max_dimension=self.settings.OCR_MAX_DIMENSION)
        except ValueError as e:
            raise RecognitionFailed(str(e)) from e

        try:
            text, confidence, words = self._ocr_with_tesseract(image, timeout)
            enhanced = False

            if self.settings.OCR_ENHANCE and len(text.strip()) < self.settings.MIN_TEXT_LENGTH:
                self.logger.info(f"Weak first pass ({len(text.strip())} chars), retrying enhanced")
                retry = self._ocr_with_tesseract(self.enhance_image(image, aggressive=True), timeout)
                if len(retry[0].strip()) > len(text.strip()):
                    text, confidence, words = retry
                    enhanced = True
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError, OSError, RuntimeError) as e:
            raise RecognitionFailed(f"Recognizer error: {e}") from e

        if not text.strip():
            raise RecognitionFailed("No text recognized in image")

        return OCRResult(
            text=text,
            confidence=confidence,
            word_count=words,
            enhanced=enhanced,
            image_type=image_type,
        )

    # ------------------------------------------------------------------
    # Image handling
    # ------------------------------------------------------------------

    def enhance_image(self, image: Image.Image, aggressive: bool = False) -> Image.Image:
        """
        Enhance a photo for OCR.

        Grayscale, contrast and sharpening; in aggressive mode also
        brightness, unsharp mask, light-pixel thresholding and a median filter.
        Returns the original image if enhancement fails.
        """
        try:
            gray = image.convert("L") if image.mode != "L" else image

            enhanced = ImageEnhance.Contrast(gray).enhance(1.5)
            enhanced = enhanced.filter(ImageFilter.SHARPEN)

            if aggressive:
                enhanced = ImageEnhance.Contrast(enhanced).enhance(1.3)
                enhanced = ImageEnhance.Brightness(enhanced).enhance(1.1)
                enhanced = enhanced.filter(ImageFilter.UnsharpMask(radius=2, percent=150))

                # Push paper-coloured pixels to white
                pixels = np.array(enhanced)
                pixels = np.where(pixels > 128, 255, pixels)
                enhanced = Image.fromarray(pixels.astype(np.uint8))
                enhanced = enhanced.filter(ImageFilter.MedianFilter(size=3))

            return enhanced

        except Exception as e:
            self.logger.warning(f"Image enhancement failed: {e}")
            return image

    def _ocr_with_tesseract(
        self,
        image: Image.Image,
        timeout: Optional[float] = None,
    ) -> Tuple[str, float, int]:
        """
        OCR using Tesseract, keeping line breaks.

        pytesseract raises RuntimeError when the timeout kills the process.

        Returns:
            (text, mean word confidence 0-1, word count)
        """
        data = pytesseract.image_to_data(
            image,
            lang=self.settings.TESSERACT_LANG,
            config=self.settings.TESSERACT_CONFIG,
            output_type=pytesseract.Output.DICT,
            timeout=timeout or 0,
        )

        lines = {}
        confidences = []

        for i, conf in enumerate(data["conf"]):
            try:
                conf = float(conf)
            except (TypeError, ValueError):
                continue
            if conf <= 0:
                continue
            word = str(data["text"][i]).strip()
            if not word:
                continue
            key = (data["block_num"][i], data["par_num"][i], data["line_num"][i])
            lines.setdefault(key, []).append(word)
            confidences.append(conf / 100.0)

        text = "\n".join(" ".join(words) for _, words in sorted(lines.items()))
        confidence = sum(confidences) / len(confidences) if confidences else 0.0
        return text, confidence, len(confidences)
