"""Services layer for ClipForge.

Services implement business logic and orchestrate data operations.
Organized by feature:
- providers: third-party voice/model catalog clients
- resolution: credential resolution, proxy/fallback resolution, playback
- pipeline: stage classification, gating and reconciliation
- store: persistence collaborator
"""
