"""Application interfaces (ports): Protocols implemented by infrastructure."""
