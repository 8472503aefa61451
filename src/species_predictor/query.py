"""BLAST query construction."""

from pathlib import Path
from typing import Optional, Union

from .models import Contig, Query


def build_query(contig: Contig, max_length: Optional[int] = None) -> Query:
    """Build the query record for a contig.

    With ``max_length`` the body is cut to its first ``max_length`` bases;
    the header is kept as is.
    """
    if max_length is not None and max_length <= 0:
        raise ValueError(f"Query length must be positive, got {max_length}")
    if max_length is None or contig.length <= max_length:
        return Query(header=contig.header, sequence=contig.sequence)
    return Query(header=contig.header, sequence=contig.sequence[:max_length], truncated=True)


def write_query(query: Query, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.write_text(query.to_fasta())
    return path
