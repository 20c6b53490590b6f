# clai/safety/__init__.py
"""
Danger detection and confirmation for generated commands.
"""
from clai.safety.gate import SafetyGate, SafetyVerdict
from clai.safety.patterns import DEFAULT_DANGEROUS_PATTERNS, PatternMatcher

__all__ = ["SafetyGate", "SafetyVerdict", "PatternMatcher", "DEFAULT_DANGEROUS_PATTERNS"]
