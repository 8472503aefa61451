"""Tests for the command-line interface."""

import json
from unittest.mock import Mock, patch

import pytest
from click.testing import CliRunner

from species_predictor import __version__
from species_predictor.cli import main
from species_predictor.cli_utils import set_quiet_mode
from species_predictor.error_handler import ErrorHandler, ErrorType, PollTimeoutError
from species_predictor.models import JobStatus, SpeciesPrediction
from species_predictor.pipeline import SpeciesPipeline

from conftest import FakeAssembler, ScriptedClient, write_reads


@pytest.fixture(autouse=True)
def cli_environment(tmp_path, monkeypatch):
    """Keep CLI runs away from real log handlers and user configuration."""
    for var in ('SPADES_PATH', 'SPECIES_THREADS', 'BLAST_URL', 'BLAST_EMAIL', 'SPECIES_WORK_DIR'):
        monkeypatch.delenv(var, raising=False)
    with patch('species_predictor.cli.setup_logging'), \
            patch('species_predictor.cli.get_default_config_path',
                  return_value=tmp_path / 'no_config.json'):
        yield
    set_quiet_mode(False)


@pytest.fixture
def runner():
    return CliRunner()


def mock_pipeline(name="Homo sapiens mitochondrion complete genome"):
    pipeline_class = Mock()
    pipeline_class.return_value.run.return_value = Mock(prediction=SpeciesPrediction(name=name))
    return pipeline_class


class TestCLI:
    """Test cases for the species-predict command."""

    def test_help(self, runner):
        result = runner.invoke(main, ['--help'])

        assert result.exit_code == 0
        assert 'Predict the species' in result.output
        assert '--paired' in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ['--version'])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_missing_reads_argument(self, runner):
        result = runner.invoke(main, [])

        assert result.exit_code == 1
        assert 'Usage:' in result.output
        assert 'Missing argument READS' in result.output

    def test_quiet_and_verbose(self, runner):
        result = runner.invoke(main, ['sample.fastq', '--quiet', '--verbose'])

        assert result.exit_code == 1
        assert 'Cannot use both --quiet and --verbose' in result.output

    def test_generate_config(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(main, ['--generate-config'])

            assert result.exit_code == 0
            assert 'Generated example configuration file' in result.output

    def test_prediction_output(self, runner):
        pipeline_class = mock_pipeline()
        with patch('species_predictor.cli.SpeciesPipeline', pipeline_class):
            result = runner.invoke(main, ['sample.fastq'])

        assert result.exit_code == 0
        assert 'Final Predicted Species (Top Hit):' in result.output
        assert 'Homo sapiens mitochondrion complete genome' in result.output

    def test_quiet_prints_only_species(self, runner):
        with patch('species_predictor.cli.SpeciesPipeline', mock_pipeline("Mus musculus")):
            result = runner.invoke(main, ['sample.fastq', '--quiet'])

        assert result.exit_code == 0
        assert result.output == "Mus musculus\n"

    def test_single_end_uses_quick_preset(self, runner):
        pipeline_class = mock_pipeline()
        with patch('species_predictor.cli.SpeciesPipeline', pipeline_class):
            runner.invoke(main, ['sample.fastq'])

        config = pipeline_class.call_args[0][0]
        assert config.blast.query_length == 1000
        assert config.blast.poll_interval == 5.0

    def test_paired_end_uses_thorough_preset(self, runner):
        pipeline_class = mock_pipeline()
        with patch('species_predictor.cli.SpeciesPipeline', pipeline_class):
            runner.invoke(main, ['ERR123456', '--paired'])

        config = pipeline_class.call_args[0][0]
        read_set = pipeline_class.return_value.run.call_args[0][0]
        assert config.blast.query_length is None
        assert config.blast.max_wait == 900.0
        assert [str(p) for p in read_set.files] == ['ERR123456_1.fastq', 'ERR123456_2.fastq']

    def test_options_override_preset(self, runner):
        pipeline_class = mock_pipeline()
        with patch('species_predictor.cli.SpeciesPipeline', pipeline_class):
            runner.invoke(main, ['sample.fastq', '--full-query', '--organism', '',
                                 '--max-wait', '60', '--threads', '2'])

        config = pipeline_class.call_args[0][0]
        assert config.blast.query_length is None
        assert config.blast.entrez_query is None
        assert config.blast.max_wait == 60.0
        assert config.assembly.threads == 2

    def test_pipeline_error_exits_1(self, runner, tmp_path):
        pipeline_class = Mock()
        pipeline_class.return_value.run.side_effect = PollTimeoutError(
            "Timeout: search RID1 took longer than 300s", rid="RID1"
        )
        report = tmp_path / "errors.json"

        with patch('species_predictor.cli.SpeciesPipeline', pipeline_class):
            result = runner.invoke(main, ['sample.fastq', '--error-report', str(report)])

        assert result.exit_code == 1
        assert 'Error: Timeout' in result.output
        assert 'Suggestion:' in result.output
        assert report.exists()

    def test_end_to_end(self, runner, tmp_path):
        """Test a full run with the assembler and BLAST service replaced."""
        reads = write_reads(tmp_path / "sample.fastq")
        client = ScriptedClient([JobStatus.RUNNING, JobStatus.READY])

        def build_pipeline(config):
            return SpeciesPipeline(config, assembler=FakeAssembler(), client=client,
                                   sleep=lambda seconds: None)

        with patch('species_predictor.cli.SpeciesPipeline', side_effect=build_pipeline):
            result = runner.invoke(main, [str(reads), '--quiet',
                                          '--work-dir', str(tmp_path / 'work')])

        assert result.exit_code == 0
        assert result.output == "Homo sapiens mitochondrion, complete genome 1847 0.0\n"
        assert client.fetch_count == 1
        assert (tmp_path / 'work' / 'blast_result.txt').exists()

    def test_end_to_end_missing_input(self, runner, tmp_path):
        result = runner.invoke(main, [str(tmp_path / 'missing.fastq'),
                                      '--work-dir', str(tmp_path / 'work')])

        assert result.exit_code == 1
        assert 'Input file(s) not found' in result.output

    def test_invalid_option_exits_1(self, runner):
        result = runner.invoke(main, ['sample.fastq', '--preset', 'sloppy'])

        assert result.exit_code == 1
        assert "Invalid value for '--preset'" in result.output

    def test_invalid_config_file(self, runner, tmp_path):
        """Test that a config file with an unknown key fails through the error handler."""
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({'blast': {'poll_intervall': 5}}))
        report = tmp_path / "errors.json"

        with patch('species_predictor.cli.SpeciesPipeline') as pipeline_class:
            result = runner.invoke(main, ['sample.fastq', '--config', str(config_file),
                                          '--error-report', str(report)])

        assert result.exit_code == 1
        assert 'Error:' in result.output
        assert 'poll_intervall' in result.output
        pipeline_class.assert_not_called()

        with open(report) as f:
            errors = json.load(f)['detailed_errors']
        assert errors[-1]['error_type'] == 'unknown'
        assert errors[-1]['severity'] == 'critical'

    def test_invalid_thread_env_var(self, runner, monkeypatch):
        monkeypatch.setenv('SPECIES_THREADS', 'abc')

        with patch('species_predictor.cli.SpeciesPipeline'):
            result = runner.invoke(main, ['sample.fastq'])

        assert result.exit_code == 1
        assert 'Error:' in result.output

    def test_missing_reads_recorded_by_error_handler(self, runner):
        handler = ErrorHandler()

        with patch('species_predictor.cli.get_error_handler', return_value=handler):
            result = runner.invoke(main, [])

        assert result.exit_code == 1
        assert handler.error_history[-1].error_type == ErrorType.USAGE
