"""Detection orchestration."""

from cosmicpatterns.detection.engine import CosmicPatternEngine

__all__ = ["CosmicPatternEngine"]
