"""Command-line interface for the species prediction pipeline."""

import sys
from pathlib import Path

import click

from . import __version__
from .assembler import SpadesAssembler
from .cli_utils import echo, print_prediction, set_quiet_mode
from .config import PRESETS, Config, create_example_config, get_default_config_path
from .error_handler import PipelineError, UsageError, get_error_handler
from .logging_config import get_logger, setup_logging
from .models import ReadSet
from .pipeline import SpeciesPipeline

logger = get_logger('cli')


class PipelineCommand(click.Command):
    """Command whose usage errors exit with status 1 like every other failure."""

    def parse_args(self, ctx, args):
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = 1
            raise


@click.command(cls=PipelineCommand)
@click.argument('reads', required=False)
@click.option('--paired/--single', default=False,
              help='Paired-end input: READS is a base name expanded to READS_1.fastq and READS_2.fastq')
@click.option('--preset', type=click.Choice(PRESETS),
              help='Search preset (default: quick for single-end, thorough for paired-end)')
@click.option('--query-length', type=click.IntRange(min=1), help='Submit only the first N bases of the longest contig')
@click.option('--full-query', is_flag=True, help='Submit the full longest contig')
@click.option('--organism', help='Entrez organism filter, e.g. "Mammalia[Organism]" ("" clears it)')
@click.option('--poll-interval', type=click.FloatRange(min=0), help='Seconds between BLAST status checks')
@click.option('--max-wait', type=click.FloatRange(min=0), help='Give up on BLAST after this many seconds')
@click.option('--threads', '-t', type=click.IntRange(min=1), help='Assembler threads (default: all processors)')
@click.option('--spades', envvar='SPADES_PATH', help='Path to spades.py')
@click.option('--max-lines', type=click.IntRange(min=1), help='Lines kept per read file (default: 400000)')
@click.option('--work-dir', type=click.Path(file_okay=False), help='Directory for intermediate files')
@click.option('--email', envvar='BLAST_EMAIL', help='Contact email sent to NCBI')
@click.option('--allow-no-hits', is_flag=True, help='Report an empty prediction instead of failing when nothing aligns')
@click.option('--config', type=click.Path(exists=True), help='Configuration file path')
@click.option('--generate-config', is_flag=True, help='Generate example configuration file')
@click.option('--log-dir', default='.species_logs', help='Directory for log files')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']), default='INFO', help='Logging level')
@click.option('--error-report', help='Export error report to file on failure')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Print only the predicted species')
@click.version_option(version=__version__, prog_name='species-predict')
def main(reads, paired, preset, query_length, full_query, organism, poll_interval, max_wait, threads,
         spades, max_lines, work_dir, email, allow_no_hits, config, generate_config, log_dir,
         log_level, error_report, verbose, quiet):
    """Predict the species of a sequencing sample.

    Subsamples READS, assembles them with SPAdes, submits the longest contig
    to NCBI BLAST and prints the organism of the top hit.

    Examples:
        species-predict sample.fastq
        species-predict --paired ERR123456
    """
    if quiet and verbose:
        click.echo("Error: Cannot use both --quiet and --verbose", err=True)
        sys.exit(1)

    if generate_config:
        config_path = create_example_config()
        click.echo(f"Generated example configuration file: {config_path}")
        sys.exit(0)

    if not reads:
        error = UsageError("Missing argument READS.")
        get_error_handler().handle_error(error, operation='parse_arguments')
        ctx = click.get_current_context()
        click.echo(ctx.get_usage(), err=True)
        click.echo(f"Error: {error}", err=True)
        sys.exit(error.exit_code)

    set_quiet_mode(quiet)
    setup_logging(
        log_level='DEBUG' if verbose else log_level,
        log_dir=log_dir,
        quiet=quiet
    )
    error_handler = get_error_handler()

    try:
        config_path = Path(config) if config else get_default_config_path()
        cfg = Config.from_file(config_path)
        if preset or not config_path.exists():
            cfg.apply_preset(preset or ('thorough' if paired else 'quick'))
        cfg.merge_env_vars()
        cfg.merge_cli_args(
            query_length=query_length,
            full_query=full_query,
            organism=organism,
            poll_interval=poll_interval,
            max_wait=max_wait,
            threads=threads,
            spades=spades,
            max_lines=max_lines,
            work_dir=work_dir,
            email=email,
            allow_no_hits=allow_no_hits
        )
        logger.debug(f"Configuration file: {config_path} (exists: {config_path.exists()})")

        read_set = ReadSet.from_argument(reads, paired=paired)
        echo(f"Reads: {', '.join(str(p) for p in read_set.files)} "
             f"({'paired-end' if read_set.paired else 'single-end'})")

        pipeline = SpeciesPipeline(cfg)
        if verbose and isinstance(pipeline.assembler, SpadesAssembler):
            logger.debug(f"SPAdes version: {pipeline.assembler.version()}")

        result = pipeline.run(read_set)
    except PipelineError as e:
        error_handler.handle_error(e, operation='species_prediction', reads=reads)
        click.echo(f"Error: {e}", err=True)
        if e.suggestion:
            click.echo(f"Suggestion: {e.suggestion}", err=True)
        if error_report:
            error_handler.export_error_report(error_report)
        sys.exit(e.exit_code)
    except Exception as e:
        error_handler.handle_error(e, operation='species_prediction', reads=reads)
        click.echo(f"Error: {e}", err=True)
        if error_report:
            error_handler.export_error_report(error_report)
        sys.exit(1)

    print_prediction(result.prediction.name)


if __name__ == '__main__':
    main()
