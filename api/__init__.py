"""
MovieDrop HTTP API (FastAPI)
"""
