"""
ragcore - multi-tenant retrieval-augmented generation pipeline
"""
