from policy_summarizer.extraction.cascade import ExtractionCascade
from policy_summarizer.extraction.factory import ExtractionCascadeFactory
from policy_summarizer.extraction.models import ExtractedText, SourceDocument

__all__ = ["ExtractedText", "ExtractionCascade", "ExtractionCascadeFactory", "SourceDocument"]
