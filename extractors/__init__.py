"""
Model-backed extractors for the paper digestion pipeline
"""
