"""Species prediction from sequencing reads.

Subsamples reads, assembles them with SPAdes, takes the longest contig and
identifies its organism through NCBI BLAST.
"""

__version__ = "1.0.0"
__author__ = "Austin P. Morrissey"
