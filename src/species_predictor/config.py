"""Configuration management for the species prediction pipeline."""

import json
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

BLAST_URL = "https://blast.ncbi.nlm.nih.gov/Blast.cgi"

# Reads are four-line FASTQ records, so this keeps the first 100k reads
DEFAULT_MAX_LINES = 400000
SHORT_QUERY_LENGTH = 1000


@dataclass
class SubsampleConfig:
    """Read subsampling settings."""
    max_lines: int = DEFAULT_MAX_LINES


@dataclass
class AssemblyConfig:
    """Assembler settings."""
    executable: str = "spades.py"
    mode: str = "isolate"
    threads: Optional[int] = None  # None: detect processor count
    memory_limit: Optional[int] = None  # GB
    output_dir: Optional[str] = None  # None: chosen from read layout


@dataclass
class BlastConfig:
    """Remote BLAST settings."""
    url: str = BLAST_URL
    program: str = "blastn"
    database: str = "nt"
    entrez_query: Optional[str] = None
    query_length: Optional[int] = None  # None: submit the full contig
    poll_interval: float = 20.0
    max_wait: float = 900.0
    request_timeout: float = 60.0
    retry_attempts: int = 3
    min_request_interval: float = 0.0
    tool: str = "species-predictor"
    email: Optional[str] = None


@dataclass
class ExtractionConfig:
    """Top-hit extraction settings."""
    window: int = 10
    skip_fields: int = 0
    max_fields: Optional[int] = 8
    allow_no_hits: bool = False


@dataclass
class OutputConfig:
    """Artifact names, relative to the work directory."""
    work_dir: str = "."
    longest_contig: str = "longest_contig.fasta"
    short_query: str = "short_query.fasta"
    report: str = "blast_result.txt"
    summary: str = "run_summary.json"


PRESETS = ('quick', 'thorough')


@dataclass
class Config:
    """Main configuration container."""
    subsample: SubsampleConfig
    assembly: AssemblyConfig
    blast: BlastConfig
    extraction: ExtractionConfig
    output: OutputConfig

    @classmethod
    def default(cls) -> 'Config':
        """Create default configuration."""
        return cls(
            subsample=SubsampleConfig(),
            assembly=AssemblyConfig(),
            blast=BlastConfig(),
            extraction=ExtractionConfig(),
            output=OutputConfig()
        )

    @classmethod
    def for_preset(cls, name: str) -> 'Config':
        """Create configuration for a named preset.

        ``quick`` submits a 1000 bp query restricted to mammals, polls every
        5 seconds for up to 5 minutes and keeps every field after the
        accession. ``thorough`` submits the full contig, polls every 20
        seconds for up to 15 minutes and keeps the first 8 fields.
        """
        config = cls.default()
        config.apply_preset(name)
        return config

    def apply_preset(self, name: str) -> None:
        """Overwrite the preset-controlled settings in place."""
        if name == 'quick':
            self.blast.query_length = SHORT_QUERY_LENGTH
            self.blast.entrez_query = "Mammalia[Organism]"
            self.blast.poll_interval = 5.0
            self.blast.max_wait = 300.0
            self.extraction.skip_fields = 1
            self.extraction.max_fields = None
        elif name == 'thorough':
            self.blast.query_length = None
            self.blast.entrez_query = None
            self.blast.poll_interval = 20.0
            self.blast.max_wait = 900.0
            self.extraction.skip_fields = 0
            self.extraction.max_fields = 8
        else:
            raise ValueError(f"Unknown preset: {name}")

    @classmethod
    def from_file(cls, path: Path) -> 'Config':
        """Load configuration from JSON file."""
        if not path.exists():
            return cls.default()

        with open(path, 'r') as f:
            data = json.load(f)

        return cls(
            subsample=SubsampleConfig(**data.get('subsample', {})),
            assembly=AssemblyConfig(**data.get('assembly', {})),
            blast=BlastConfig(**data.get('blast', {})),
            extraction=ExtractionConfig(**data.get('extraction', {})),
            output=OutputConfig(**data.get('output', {}))
        )

    def to_file(self, path: Path) -> None:
        """Save configuration to JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            'subsample': asdict(self.subsample),
            'assembly': asdict(self.assembly),
            'blast': asdict(self.blast),
            'extraction': asdict(self.extraction),
            'output': asdict(self.output)
        }

        with open(path, 'w') as f:
            json.dump(data, f, indent=2)

    def merge_env_vars(self) -> None:
        """Merge environment variables into configuration."""
        if os.getenv('SPADES_PATH'):
            self.assembly.executable = os.getenv('SPADES_PATH')
        if os.getenv('SPECIES_THREADS'):
            self.assembly.threads = int(os.getenv('SPECIES_THREADS'))

        if os.getenv('BLAST_URL'):
            self.blast.url = os.getenv('BLAST_URL')
        if os.getenv('BLAST_EMAIL'):
            self.blast.email = os.getenv('BLAST_EMAIL')

        if os.getenv('SPECIES_WORK_DIR'):
            self.output.work_dir = os.getenv('SPECIES_WORK_DIR')

    def merge_cli_args(self, **kwargs) -> None:
        """Merge CLI arguments into configuration.

        ``None`` values leave the current setting untouched.
        """
        if kwargs.get('max_lines') is not None:
            self.subsample.max_lines = kwargs['max_lines']

        if kwargs.get('spades'):
            self.assembly.executable = kwargs['spades']
        if kwargs.get('threads') is not None:
            self.assembly.threads = kwargs['threads']

        if kwargs.get('full_query'):
            self.blast.query_length = None
        elif kwargs.get('query_length') is not None:
            self.blast.query_length = kwargs['query_length']
        if kwargs.get('organism') is not None:
            # Empty string clears a preset filter
            self.blast.entrez_query = kwargs['organism'] or None
        if kwargs.get('poll_interval') is not None:
            self.blast.poll_interval = kwargs['poll_interval']
        if kwargs.get('max_wait') is not None:
            self.blast.max_wait = kwargs['max_wait']
        if kwargs.get('email'):
            self.blast.email = kwargs['email']

        if kwargs.get('allow_no_hits'):
            self.extraction.allow_no_hits = True

        if kwargs.get('work_dir'):
            self.output.work_dir = kwargs['work_dir']


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    locations = [
        Path.home() / '.species_predictor' / 'config.json',
        Path.home() / '.config' / 'species_predictor' / 'config.json',
        Path('species_predictor.config.json')
    ]

    for path in locations:
        if path.exists():
            return path

    return Path.home() / '.species_predictor' / 'config.json'


def create_example_config(path: Optional[Path] = None) -> Path:
    """Create an example configuration file."""
    if path is None:
        path = Path('species_predictor.config.example.json')

    config = Config.for_preset('thorough')
    config.blast.email = "your_email@example.com"
    config.assembly.threads = 4

    config.to_file(path)
    return path
