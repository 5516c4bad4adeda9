"""
Interfaces module - User-facing entry points for the tutor.

This module provides:
1. CLI interface for chatting in the terminal
2. HTTP API using FastAPI
"""
