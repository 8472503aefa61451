"""Shared fixtures for the species predictor tests."""

from pathlib import Path
from typing import List, Optional

import pytest

from species_predictor.assembler import Assembler
from species_predictor.blast_client import AlignmentServiceClient
from species_predictor.error_handler import AssemblyError
from species_predictor.models import AlignmentJob, JobStatus, Query

CONTIGS_FASTA = """>NODE_1_length_12_cov_3.0
ACGTACGTAC
GT
>NODE_2_length_25_cov_8.5
ACGTACGTACGTACGTACGTACGTA
>NODE_3_length_6_cov_1.0
TTTTTT
"""

BLAST_REPORT = """BLASTN 2.15.0+

Reference: Zheng Zhang, Scott Schwartz, Lukas Wagner, and Webb
Miller (2000), "A greedy algorithm for aligning DNA sequences", J
Comput Biol 2000; 7(1-2):203-14.

RID: 8XK2ZJ4H016

Database: Nucleotide collection (nt)
Query= NODE_2_length_25_cov_8.5

Length=25
                                                                      Score     E
Sequences producing significant alignments:                          (Bits)  Value

NC_012920.1 Homo sapiens mitochondrion, complete genome               1847    0.0  
AP008824.1 Homo sapiens mitochondrial DNA, complete genome, isola...  1847    0.0  

ALIGNMENTS
"""

NO_HITS_REPORT = """BLASTN 2.15.0+

Query= NODE_2_length_25_cov_8.5

Length=25

***** No hits found *****
"""


class ScriptedClient(AlignmentServiceClient):
    """Alignment service double that replays a fixed list of statuses."""

    def __init__(self, statuses: List[JobStatus], report: str = BLAST_REPORT,
                 rid: Optional[str] = "8XK2ZJ4H016"):
        self.statuses = list(statuses)
        self.report = report
        self.rid = rid
        self.submitted: List[Query] = []
        self.entrez_queries: List[Optional[str]] = []
        self.poll_count = 0
        self.fetch_count = 0

    def submit(self, query, entrez_query=None):
        self.submitted.append(query)
        self.entrez_queries.append(entrez_query)
        return AlignmentJob(rid=self.rid)

    def poll(self, rid):
        self.poll_count += 1
        if self.statuses:
            return self.statuses.pop(0)
        return JobStatus.RUNNING

    def fetch(self, rid):
        self.fetch_count += 1
        return self.report


class FakeAssembler(Assembler):
    """Assembler double writing a fixed contigs file."""

    def __init__(self, contigs: str = CONTIGS_FASTA, produce: bool = True):
        self.contigs = contigs
        self.produce = produce
        self.calls = []

    def assemble(self, reads, output_dir):
        self.calls.append((reads, Path(output_dir)))
        if not self.produce:
            raise AssemblyError(f"Assembly failed: {output_dir}/contigs.fasta not found")
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        contigs = output_dir / "contigs.fasta"
        contigs.write_text(self.contigs)
        return contigs


def write_reads(path: Path, reads: int = 5) -> Path:
    """Write a FASTQ file with ``reads`` four-line records."""
    with open(path, 'w') as f:
        for i in range(reads):
            f.write(f"@read{i}\nACGTACGT\n+\nIIIIIIII\n")
    return path


@pytest.fixture
def contigs_fasta():
    return CONTIGS_FASTA


@pytest.fixture
def blast_report():
    return BLAST_REPORT


@pytest.fixture
def no_hits_report():
    return NO_HITS_REPORT


@pytest.fixture
def scripted_client():
    """Factory for scripted alignment service clients."""
    def factory(statuses, report=BLAST_REPORT):
        return ScriptedClient(statuses, report=report)
    return factory


@pytest.fixture
def no_sleep():
    """Sleep replacement recording the requested delays."""
    calls = []

    def sleep(seconds):
        calls.append(seconds)

    sleep.calls = calls
    return sleep
