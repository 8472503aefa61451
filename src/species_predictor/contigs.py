"""Contig parsing and longest-contig selection."""

import logging
from pathlib import Path
from typing import Dict, List, Tuple, Union

from Bio import SeqIO

from .error_handler import EmptyAssemblyError
from .models import Contig

logger = logging.getLogger(__name__)


def read_contigs(path: Union[str, Path]) -> List[Contig]:
    """Parse a FASTA file into contigs, in file order."""
    return [
        Contig(header=record.description, sequence=str(record.seq))
        for record in SeqIO.parse(str(path), "fasta")
    ]


def select_longest(contigs: List[Contig]) -> Contig:
    """Return the longest contig.

    On equal lengths the first contig in file order wins.

    Raises:
        EmptyAssemblyError: If there are no contigs
    """
    if not contigs:
        raise EmptyAssemblyError("No contigs to select from")

    longest = contigs[0]
    for contig in contigs[1:]:
        if contig.length > longest.length:
            longest = contig
    return longest


def write_contig(contig: Contig, path: Union[str, Path]) -> Path:
    """Write a contig as exactly two lines, replacing any existing file."""
    path = Path(path)
    path.write_text(contig.to_fasta())
    return path


def contig_stats(contigs: List[Contig]) -> Dict[str, int]:
    """Count, total length, longest length and N50 of a contig set."""
    lengths = sorted((c.length for c in contigs), reverse=True)
    total = sum(lengths)

    n50 = 0
    running = 0
    for length in lengths:
        running += length
        if running * 2 >= total:
            n50 = length
            break

    return {
        'count': len(lengths),
        'total_length': total,
        'longest': lengths[0] if lengths else 0,
        'n50': n50,
    }


def extract_longest_contig(contigs_path: Union[str, Path],
                           output_path: Union[str, Path]) -> Tuple[Contig, Dict[str, int]]:
    """Select the longest contig of an assembly and write it to ``output_path``.

    Returns:
        The longest contig and the assembly's contig statistics

    Raises:
        EmptyAssemblyError: If the assembly has no contigs
    """
    contigs = read_contigs(contigs_path)
    if not contigs:
        raise EmptyAssemblyError(f"Assembly produced no contigs: {contigs_path}")

    stats = contig_stats(contigs)
    logger.info(f"Contigs: {stats['count']}, total length: {stats['total_length']}, "
                f"N50: {stats['n50']}")

    longest = select_longest(contigs)
    write_contig(longest, output_path)
    logger.info(f"Longest contig {longest.header} ({longest.length} bp) written to {output_path}")
    return longest, stats
