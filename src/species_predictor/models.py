"""Data models for the species prediction pipeline."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class ReadSet:
    """One (single-end) or two (paired-end) read files."""

    forward: Path
    reverse: Optional[Path] = None

    @property
    def paired(self) -> bool:
        """Whether this is a paired-end read set."""
        return self.reverse is not None

    @property
    def files(self) -> List[Path]:
        """All read files in order."""
        return [self.forward, self.reverse] if self.paired else [self.forward]

    @classmethod
    def from_argument(cls, value: str, paired: bool = False) -> 'ReadSet':
        """Build a read set from the command line argument.

        Paired-end input is given as a base name that expands to
        ``<base>_1.fastq`` and ``<base>_2.fastq``.
        """
        if paired:
            return cls(Path(f"{value}_1.fastq"), Path(f"{value}_2.fastq"))
        return cls(Path(value))


@dataclass
class SubsampledReadSet:
    """Truncated copy of a read set handed to the assembler."""

    forward: Path
    reverse: Optional[Path] = None
    line_counts: List[int] = field(default_factory=list)

    @property
    def paired(self) -> bool:
        return self.reverse is not None

    @property
    def files(self) -> List[Path]:
        return [self.forward, self.reverse] if self.paired else [self.forward]


@dataclass
class Contig:
    """A single FASTA record with its body lines concatenated."""

    header: str
    sequence: str

    @property
    def length(self) -> int:
        return len(self.sequence)

    def to_fasta(self) -> str:
        """Two-line FASTA text: header and unwrapped sequence."""
        return f">{self.header}\n{self.sequence}\n"


@dataclass
class Query:
    """Record submitted to the alignment service."""

    header: str
    sequence: str
    truncated: bool = False

    @property
    def length(self) -> int:
        return len(self.sequence)

    def to_fasta(self) -> str:
        return f">{self.header}\n{self.sequence}\n"


class JobStatus(Enum):
    """Lifecycle states of a remote alignment job."""
    SUBMITTED = "submitted"
    RUNNING = "running"
    READY = "ready"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass
class AlignmentJob:
    """A submitted BLAST search identified by its RID."""

    rid: str
    status: JobStatus = JobStatus.SUBMITTED
    estimated_seconds: Optional[int] = None  # RTOE hint from the service
    polls: int = 0
    elapsed: float = 0.0


@dataclass
class SpeciesPrediction:
    """Organism name scraped from the top hit of a report."""

    name: str = ""
    hit_line: str = ""

    @property
    def found(self) -> bool:
        return bool(self.name)


@dataclass
class PipelineResult:
    """Everything a pipeline run produced."""

    read_set: ReadSet
    subsampled: SubsampledReadSet
    contigs_path: Path
    longest_contig_path: Path
    longest_contig: Contig
    query: Query
    query_path: Path
    job: AlignmentJob
    report_path: Path
    prediction: SpeciesPrediction
    contig_stats: Dict[str, int] = field(default_factory=dict)
    duration: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable run summary."""
        return {
            'reads': [str(p) for p in self.read_set.files],
            'paired': self.read_set.paired,
            'subsampled_reads': [str(p) for p in self.subsampled.files],
            'subsampled_lines': list(self.subsampled.line_counts),
            'contigs': str(self.contigs_path),
            'contig_stats': dict(self.contig_stats),
            'longest_contig': {
                'path': str(self.longest_contig_path),
                'header': self.longest_contig.header,
                'length': self.longest_contig.length,
            },
            'query': {
                'path': str(self.query_path),
                'length': self.query.length,
                'truncated': self.query.truncated,
            },
            'blast': {
                'rid': self.job.rid,
                'status': self.job.status.value,
                'polls': self.job.polls,
                'elapsed_seconds': self.job.elapsed,
                'report': str(self.report_path),
            },
            'prediction': {
                'species': self.prediction.name,
                'hit_line': self.prediction.hit_line,
                'found': self.prediction.found,
            },
            'duration_seconds': round(self.duration, 2),
        }
