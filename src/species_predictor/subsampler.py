"""Read subsampling by leading-line truncation."""

import logging
from itertools import islice
from pathlib import Path
from typing import List, Union

from .config import DEFAULT_MAX_LINES
from .error_handler import InputNotFoundError
from .models import ReadSet, SubsampledReadSet

logger = logging.getLogger(__name__)


def subsample_file(source: Union[str, Path], destination: Union[str, Path],
                   max_lines: int = DEFAULT_MAX_LINES) -> int:
    """Copy the first ``max_lines`` lines of ``source`` to ``destination``.

    Lines are copied as raw bytes. A file shorter than the cap is copied whole.

    Returns:
        Number of lines written
    """
    source = Path(source)
    if not source.is_file():
        raise InputNotFoundError(f"Input file not found: {source}")

    written = 0
    with open(source, 'rb') as infile, open(destination, 'wb') as outfile:
        for line in islice(infile, max_lines):
            outfile.write(line)
            written += 1

    if written < max_lines:
        logger.debug(f"{source} has only {written} lines (cap {max_lines}); copied whole")
    return written


def subsample_reads(read_set: ReadSet, output_paths: List[Union[str, Path]],
                    max_lines: int = DEFAULT_MAX_LINES) -> SubsampledReadSet:
    """
    Truncate every file of a read set to its first ``max_lines`` lines.

    Args:
        read_set: Reads to subsample
        output_paths: One destination per read file, in the same order
        max_lines: Line cap per file

    Returns:
        SubsampledReadSet pointing at the written files

    Raises:
        InputNotFoundError: If any read file is missing (checked before writing)
    """
    if len(output_paths) != len(read_set.files):
        raise ValueError(
            f"Expected {len(read_set.files)} output paths, got {len(output_paths)}"
        )

    missing = [str(path) for path in read_set.files if not path.is_file()]
    if missing:
        raise InputNotFoundError(f"Input file(s) not found: {', '.join(missing)}")

    outputs = [Path(p) for p in output_paths]
    counts = [
        subsample_file(source, destination, max_lines)
        for source, destination in zip(read_set.files, outputs)
    ]

    logger.info(f"Subsampled {len(counts)} file(s) to at most {max_lines} lines "
                f"(~{max_lines // 4} reads): {counts}")

    return SubsampledReadSet(
        forward=outputs[0],
        reverse=outputs[1] if read_set.paired else None,
        line_counts=counts
    )
