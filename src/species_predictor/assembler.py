"""Genome assembly through an external assembler."""

import logging
import os
import re
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .error_handler import AssemblyError
from .models import SubsampledReadSet

logger = logging.getLogger(__name__)

CONTIGS_FILE = "contigs.fasta"


def detect_threads() -> Optional[int]:
    """Number of processors on this host, or None if unknown."""
    return os.cpu_count()


class Assembler(ABC):
    """Turns a read set into a contigs FASTA file."""

    @abstractmethod
    def assemble(self, reads: SubsampledReadSet, output_dir: Union[str, Path]) -> Path:
        """Assemble reads into ``output_dir``.

        Returns:
            Path to the contigs FASTA file

        Raises:
            AssemblyError: If the assembler fails or the contigs file is absent
        """


class SpadesAssembler(Assembler):
    """Runs SPAdes as a subprocess."""

    def __init__(self, executable: str = "spades.py", mode: Optional[str] = "isolate",
                 threads: Optional[int] = None, memory_limit: Optional[int] = None,
                 extra_args: Sequence[str] = ()):
        """
        Args:
            executable: SPAdes entry point
            mode: SPAdes mode flag without dashes (isolate, careful, ...), None for default
            threads: Thread count; detected from the host when None
            memory_limit: Memory limit in GB
            extra_args: Additional command line arguments
        """
        self.executable = executable
        self.mode = mode
        self.threads = threads if threads is not None else detect_threads()
        self.memory_limit = memory_limit
        self.extra_args = list(extra_args)

    def build_command(self, reads: SubsampledReadSet, output_dir: Union[str, Path]) -> List[str]:
        cmd = [self.executable]
        if self.mode:
            cmd.append(f"--{self.mode}")
        if self.threads:
            cmd += ["-t", str(self.threads)]
        if self.memory_limit:
            cmd += ["-m", str(self.memory_limit)]

        if reads.paired:
            cmd += ["-1", str(reads.forward), "-2", str(reads.reverse)]
        else:
            cmd += ["-s", str(reads.forward)]

        cmd += ["-o", str(output_dir)]
        cmd += self.extra_args
        return cmd

    def version(self) -> Optional[str]:
        """SPAdes version string, None if it cannot be determined."""
        try:
            stdout = subprocess.run(
                [self.executable, "--version"], encoding="utf-8",
                stderr=subprocess.STDOUT, stdout=subprocess.PIPE, check=True
            ).stdout
        except (OSError, subprocess.CalledProcessError) as e:
            logger.warning(f"Could not determine {self.executable} version: {e}")
            return None

        match = re.search(r'v(\d\S*)', stdout)
        return match[1] if match else stdout.strip() or None

    def assemble(self, reads: SubsampledReadSet, output_dir: Union[str, Path]) -> Path:
        output_dir = Path(output_dir)
        cmd = self.build_command(reads, output_dir)
        logger.info(f"Running: {' '.join(cmd)}")

        try:
            subprocess.run(cmd, check=True, stdout=subprocess.DEVNULL,
                           stderr=subprocess.PIPE, encoding="utf-8")
        except FileNotFoundError as e:
            raise AssemblyError(
                f"Assembler not found: {self.executable}",
                suggestion="Install SPAdes or point --spades / SPADES_PATH at spades.py."
            ) from e
        except subprocess.CalledProcessError as e:
            logger.debug(f"Assembler stderr:\n{e.stderr}")
            raise AssemblyError(
                f"{self.executable} exited with status {e.returncode}; "
                f"see {output_dir / 'spades.log'}"
            ) from e

        return check_assembly_output(output_dir)


def check_assembly_output(output_dir: Union[str, Path]) -> Path:
    """Return the contigs path, raising AssemblyError if it was not produced."""
    contigs = Path(output_dir) / CONTIGS_FILE
    if not contigs.is_file():
        logger.error("Genome assembly finished with errors.")
        logger.error(f"Please check {Path(output_dir) / 'spades.log'} for more information.")
        raise AssemblyError(f"Assembly failed: {contigs} not found")

    logger.info(f"Assembly finished: {contigs}")
    return contigs
