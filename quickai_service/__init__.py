"""
Quick.ai backend package.

Exposes the background-removal pipeline, the completions client used by the
content routes, and the FastAPI application factory.
"""
