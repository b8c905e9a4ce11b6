"""
Daybook - Source Package

Extracts bookkeeping entries from dated journal notes, finds the notes
that hold them across a large journal folder, and rolls the entries up
into category, daily and budget statistics.

DESIGN PRINCIPLES:
1. The parser declines, it never fails
2. Failures are contained at the smallest unit (line, document, tier)
3. Statistics are always recomputed, never patched
4. Configuration is an immutable value handed in whole
5. Corpus access is an interface; storage is swappable
"""

__version__ = "1.0.0"
__author__ = "Daybook Team"
