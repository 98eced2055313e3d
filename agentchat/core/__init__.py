"""
Core domain logic: ingestion, retrieval, context assembly and streaming.
"""
