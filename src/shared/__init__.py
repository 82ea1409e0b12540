"""Small helpers shared by the blog model and its providers."""
