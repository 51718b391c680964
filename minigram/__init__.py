# minigram/__init__.py
"""
Backend de MiniGram: registro/login con sesión por cookie, feed de posts
con likes/comentarios/tags, grafo de follows y captions generados por IA.
"""

__version__ = "1.0.0"
