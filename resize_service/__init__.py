"""
Image resize microservice package.

Exposes the pipeline stages (fetch, format detection, transform, publish),
the queue dispatcher, and the FastAPI application.
"""
