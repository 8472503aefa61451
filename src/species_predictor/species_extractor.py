"""Top-hit organism extraction from BLAST text reports."""

import re
from typing import Optional

from .models import SpeciesPrediction

HITS_MARKER = "Sequences producing significant alignments"
RULE_MARKER = "-----"

_WHITESPACE = re.compile(r'\s+')


def _is_candidate(line: str) -> bool:
    stripped = line.strip()
    return bool(stripped) and RULE_MARKER not in stripped and HITS_MARKER not in stripped


def find_top_hit(report: str, window: int = 10) -> str:
    """Normalized first hit line within ``window`` lines after the marker.

    Blank lines, rule lines and the marker line itself are skipped.
    Returns an empty string when there is no marker or no hit line.
    """
    lines = report.splitlines()
    for index, line in enumerate(lines):
        if HITS_MARKER in line:
            for candidate in lines[index + 1:index + 1 + window]:
                if _is_candidate(candidate):
                    return _WHITESPACE.sub(' ', candidate.strip())
            return ""
    return ""


def extract_species(report: str, window: int = 10, skip_fields: int = 0,
                    max_fields: Optional[int] = 8) -> SpeciesPrediction:
    """
    Extract the predicted organism from the top hit of a report.

    Args:
        report: BLAST text report
        window: Lines after the marker searched for the top hit
        skip_fields: Leading space-separated fields dropped (the accession column)
        max_fields: Fields kept after skipping, None keeps all

    Returns:
        SpeciesPrediction, empty when the report has no hits
    """
    hit_line = find_top_hit(report, window)
    if not hit_line:
        return SpeciesPrediction()

    fields = hit_line.split(' ')[skip_fields:]
    if max_fields is not None:
        fields = fields[:max_fields]
    return SpeciesPrediction(name=' '.join(fields), hit_line=hit_line)
