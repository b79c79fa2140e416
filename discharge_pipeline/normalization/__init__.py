from discharge_pipeline.normalization.section_normalizer import (
    NormalizedDocument,
    SectionNormalizer,
)
from discharge_pipeline.normalization.sections import CANONICAL_SECTIONS, CanonicalSection

__all__ = ["CANONICAL_SECTIONS", "CanonicalSection", "NormalizedDocument", "SectionNormalizer"]
