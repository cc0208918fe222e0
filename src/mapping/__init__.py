"""Strategies mapping listing errors back to original source files."""

from .ranges import Range
from .range_corrector import RangeCorrector
from .source_mapper import SourceMap, SourceMapper, apply_expansion

__all__ = ["Range", "RangeCorrector", "SourceMap", "SourceMapper", "apply_expansion"]
