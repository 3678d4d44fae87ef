"""dedup_sort

Removes byte-identical duplicate files from a directory tree and normalizes
the remaining text files (no blanks, no comments, unique lines, sorted).

Public API surface:
- dedup_sort.cli.main : CLI entrypoint
- dedup_sort.pipeline.run.run : full pass (dedup -> normalize -> optional watch)
- dedup_sort.dedup.eliminator.DuplicateEliminator : content-hash duplicate removal
- dedup_sort.normalize.lines.LineNormalizer : per-file line normalization
- dedup_sort.watch.loop.WatchLoop : continuous re-normalization on file writes
"""
__all__ = ["__version__"]
__version__ = "0.3.6"
