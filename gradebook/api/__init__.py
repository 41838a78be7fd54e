"""
API REST (FastAPI) del registro académico
"""
