"""Data models shared by the extractor, proposer, and capture loop."""
