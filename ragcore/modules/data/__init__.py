"""
Data Module - retrieval side of the RAG pipeline

Chunking, embedding and vector storage providers live under providers.vector.
"""
