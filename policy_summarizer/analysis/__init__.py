from policy_summarizer.analysis.analyzer import PolicyAnalyzer
from policy_summarizer.analysis.base import BaseAnalyzer
from policy_summarizer.analysis.factory import AnalyzerFactory
from policy_summarizer.analysis.retrying import RetryingAnalyzer

__all__ = ["AnalyzerFactory", "BaseAnalyzer", "PolicyAnalyzer", "RetryingAnalyzer"]
