"""
Untitled note → debounced threshold → LLM title suggestions → rename

Watches a folder of Markdown notes, waits for placeholder-named notes to
collect enough content, asks an LLM backend for title suggestions exactly
once per note, and applies the chosen title.
"""

__version__ = "0.1.0"
