"""
Clients cho các API bên ngoài (TMDB, OpenAI).
"""
