"""
Identicon Service package for Identidock.

This package serves a deterministic identity image ("monster") for any
name. It provides:

- app.main: API surface for the form page, image route and health.
- app.identity: Salted name -> identifier derivation.
- app.cache: Redis-backed image cache over an owned connection pool.
- app.adapters: HTTP client for the image generation backend.
- app.resolver: Cache-aside resolution of names to image bytes.
- app.pages: Form page rendering.

Guidelines:
- The service is stateless; rely on the external cache for reuse.
- Cache entries never expire; an identifier always maps to the same image.
- Only generation failures reach clients; cache failures degrade to misses.
"""
