# clai/ai/__init__.py
"""
AI layer: backends, the fallback chain, prompts and response extraction.
"""
