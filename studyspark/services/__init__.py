"""
StudySpark Backend — Services Package
=======================================

What:  AI Gateway, LLM provider implementations and the upload pipeline.
"""
