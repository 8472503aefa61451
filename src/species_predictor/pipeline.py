"""End-to-end species prediction pipeline."""

import json
import logging
import time
from pathlib import Path
from typing import Callable, Optional

from .assembler import Assembler, SpadesAssembler
from .blast_client import AlignmentServiceClient, NcbiBlastClient
from .config import Config
from .contigs import extract_longest_contig
from .error_handler import NoHitsError
from .logging_config import LogTimer
from .models import PipelineResult, ReadSet
from .poller import run_search
from .query import build_query, write_query
from .species_extractor import extract_species
from .subsampler import subsample_reads

logger = logging.getLogger(__name__)

SINGLE_SUBSET = "subset.fastq"
PAIRED_SUBSETS = ("subset_1.fastq", "subset_2.fastq")
SINGLE_ASSEMBLY_DIR = "spades_output_single"
PAIRED_ASSEMBLY_DIR = "spades_output"


class SpeciesPipeline:
    """Subsample, assemble, BLAST the longest contig and name its organism."""

    def __init__(self, config: Optional[Config] = None,
                 assembler: Optional[Assembler] = None,
                 client: Optional[AlignmentServiceClient] = None,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Args:
            config: Pipeline configuration
            assembler: Assembler to use, SPAdes from the config by default
            client: Alignment service client, NCBI BLAST by default
            sleep: Wait function used between status polls
        """
        self.config = config or Config.default()
        self.assembler = assembler or SpadesAssembler(
            executable=self.config.assembly.executable,
            mode=self.config.assembly.mode,
            threads=self.config.assembly.threads,
            memory_limit=self.config.assembly.memory_limit
        )
        self.client = client or NcbiBlastClient(self.config.blast)
        self.sleep = sleep
        self.work_dir = Path(self.config.output.work_dir)

    def _path(self, name: str) -> Path:
        return self.work_dir / name

    def _assembly_dir(self, read_set: ReadSet) -> Path:
        if self.config.assembly.output_dir:
            return self._path(self.config.assembly.output_dir)
        return self._path(PAIRED_ASSEMBLY_DIR if read_set.paired else SINGLE_ASSEMBLY_DIR)

    def run(self, read_set: ReadSet) -> PipelineResult:
        """Run every stage on a read set.

        Raises:
            PipelineError: Any stage failure; files from completed stages are kept
        """
        start = time.time()
        self.work_dir.mkdir(parents=True, exist_ok=True)
        cfg = self.config

        with LogTimer("Step 1: Creating subset", logger):
            subset_names = PAIRED_SUBSETS if read_set.paired else (SINGLE_SUBSET,)
            subsampled = subsample_reads(
                read_set, [self._path(name) for name in subset_names], cfg.subsample.max_lines
            )

        with LogTimer("Step 2: Running assembler", logger):
            contigs_path = self.assembler.assemble(subsampled, self._assembly_dir(read_set))

        with LogTimer("Step 3: Extracting longest contig", logger):
            longest_path = self._path(cfg.output.longest_contig)
            longest, stats = extract_longest_contig(contigs_path, longest_path)

        with LogTimer("Step 4: BLAST search", logger):
            query = build_query(longest, cfg.blast.query_length)
            if cfg.blast.query_length is not None:
                query_path = write_query(query, self._path(cfg.output.short_query))
            else:
                query_path = longest_path

            job, report = run_search(
                self.client, query,
                poll_interval=cfg.blast.poll_interval,
                max_wait=cfg.blast.max_wait,
                entrez_query=cfg.blast.entrez_query,
                sleep=self.sleep
            )
            report_path = self._path(cfg.output.report)
            report_path.write_text(report)

        with LogTimer("Step 5: Extracting species", logger):
            prediction = extract_species(
                report,
                window=cfg.extraction.window,
                skip_fields=cfg.extraction.skip_fields,
                max_fields=cfg.extraction.max_fields
            )

        result = PipelineResult(
            read_set=read_set,
            subsampled=subsampled,
            contigs_path=contigs_path,
            longest_contig_path=longest_path,
            longest_contig=longest,
            query=query,
            query_path=query_path,
            job=job,
            report_path=report_path,
            prediction=prediction,
            contig_stats=stats,
            duration=time.time() - start
        )
        self.write_summary(result)

        if not prediction.found:
            if not cfg.extraction.allow_no_hits:
                raise NoHitsError(f"No significant alignments found in {report_path}")
            logger.warning("No significant alignments found; reporting an empty prediction")
        else:
            logger.info(f"Predicted species: {prediction.name}")

        return result

    def write_summary(self, result: PipelineResult) -> Path:
        """Write the JSON run summary next to the other artifacts."""
        path = self._path(self.config.output.summary)
        with open(path, 'w') as f:
            json.dump(result.to_dict(), f, indent=2)
        logger.debug(f"Run summary written to {path}")
        return path
