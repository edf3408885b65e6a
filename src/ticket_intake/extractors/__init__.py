"""Text extraction: the field extraction engine and the OCR stage."""

from .field_extractor import FieldExtractor, ExtractionResult, COVERAGE_WEIGHTS
from .ocr_extractor import OCRStage, OCRResult, OCROutcome
