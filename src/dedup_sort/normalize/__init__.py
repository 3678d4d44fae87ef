from .lines import LineNormalizer, NormalizeResult, normalize_lines

__all__ = ["LineNormalizer", "NormalizeResult", "normalize_lines"]
