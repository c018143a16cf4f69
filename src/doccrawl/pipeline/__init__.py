"""Per-document conversion pipeline."""

from .base import ConversionPipeline, PageContext, PipelineStep

__all__ = ["ConversionPipeline", "PageContext", "PipelineStep"]
