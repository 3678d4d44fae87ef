from .eliminator import DedupResult, DuplicateEliminator, FingerprintIndex

__all__ = ["DedupResult", "DuplicateEliminator", "FingerprintIndex"]
