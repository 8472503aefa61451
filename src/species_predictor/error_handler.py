"""Pipeline errors and the handler that reports them."""

import json
import logging
import time
import traceback
from dataclasses import dataclass, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorType(Enum):
    """Types of errors that can stop the pipeline."""
    USAGE = "usage"
    INPUT_NOT_FOUND = "input_not_found"
    ASSEMBLY_FAILURE = "assembly_failure"
    EMPTY_ASSEMBLY = "empty_assembly"
    SUBMISSION_FAILURE = "submission_failure"
    REMOTE_FAILURE = "remote_failure"
    TIMEOUT = "timeout"
    NETWORK = "network"
    NO_HITS = "no_hits"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class PipelineError(Exception):
    """Base class for fatal pipeline errors."""

    error_type = ErrorType.UNKNOWN
    suggestion: Optional[str] = None
    exit_code = 1

    def __init__(self, message: str, suggestion: Optional[str] = None):
        super().__init__(message)
        if suggestion is not None:
            self.suggestion = suggestion


class UsageError(PipelineError):
    error_type = ErrorType.USAGE
    suggestion = "Run with --help to see the expected arguments."


class InputNotFoundError(PipelineError):
    error_type = ErrorType.INPUT_NOT_FOUND
    suggestion = "Check the read file path (paired-end input expects <base>_1.fastq and <base>_2.fastq)."


class AssemblyError(PipelineError):
    error_type = ErrorType.ASSEMBLY_FAILURE
    suggestion = "Check the SPAdes log in the assembly output directory."


class EmptyAssemblyError(AssemblyError):
    error_type = ErrorType.EMPTY_ASSEMBLY
    suggestion = "The assembler produced no contigs; try more reads (--max-lines)."


class SubmissionError(PipelineError):
    """No RID could be parsed from the submission response."""

    error_type = ErrorType.SUBMISSION_FAILURE
    suggestion = "NCBI did not accept the query; see the response snippet in the log."

    def __init__(self, message: str, response_snippet: str = "", suggestion: Optional[str] = None):
        super().__init__(message, suggestion)
        self.response_snippet = response_snippet


class RemoteJobFailedError(PipelineError):
    error_type = ErrorType.REMOTE_FAILURE
    suggestion = "The BLAST search failed at NCBI; resubmit later."

    def __init__(self, message: str, rid: Optional[str] = None, suggestion: Optional[str] = None):
        super().__init__(message, suggestion)
        self.rid = rid


class PollTimeoutError(PipelineError):
    error_type = ErrorType.TIMEOUT
    suggestion = "Increase --max-wait or use a shorter query (--query-length)."

    def __init__(self, message: str, rid: Optional[str] = None, elapsed: float = 0.0,
                 suggestion: Optional[str] = None):
        super().__init__(message, suggestion)
        self.rid = rid
        self.elapsed = elapsed


class ServiceError(PipelineError):
    """HTTP failure talking to the alignment service."""

    error_type = ErrorType.NETWORK
    suggestion = "Check network connectivity and the BLAST URL."


class NoHitsError(PipelineError):
    error_type = ErrorType.NO_HITS
    suggestion = "No significant alignments; pass --allow-no-hits to accept an empty prediction."


@dataclass
class ErrorContext:
    """Context information for an error."""
    error_type: ErrorType
    severity: ErrorSeverity
    message: str
    timestamp: float
    operation: str
    details: Optional[Dict[str, Any]] = None
    traceback: Optional[str] = None
    suggestion: Optional[str] = None


class ErrorHandler:
    """Classifies, logs and records pipeline errors."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self.error_history: List[ErrorContext] = []

    def handle_error(self, error: Exception, operation: str, **details) -> ErrorContext:
        """
        Record and log an error.

        Args:
            error: The exception that occurred
            operation: Pipeline stage being performed
            **details: Additional context data

        Returns:
            ErrorContext with error details and suggestion
        """
        error_type = self._classify_error(error)
        severity = self._determine_severity(error, error_type)

        context = ErrorContext(
            error_type=error_type,
            severity=severity,
            message=str(error),
            timestamp=time.time(),
            operation=operation,
            details=details or None,
            traceback=traceback.format_exc() if severity == ErrorSeverity.CRITICAL else None,
            suggestion=getattr(error, 'suggestion', None),
        )

        self._log_error(context)
        self.error_history.append(context)
        return context

    def _classify_error(self, error: Exception) -> ErrorType:
        if isinstance(error, PipelineError):
            return error.error_type
        if isinstance(error, FileNotFoundError):
            return ErrorType.INPUT_NOT_FOUND
        if isinstance(error, (TimeoutError, ConnectionError)):
            return ErrorType.NETWORK
        return ErrorType.UNKNOWN

    def _determine_severity(self, error: Exception, error_type: ErrorType) -> ErrorSeverity:
        # Anything that is not one of ours is a bug, not an expected failure
        if not isinstance(error, PipelineError) and error_type == ErrorType.UNKNOWN:
            return ErrorSeverity.CRITICAL
        if error_type == ErrorType.NO_HITS:
            return ErrorSeverity.WARNING
        return ErrorSeverity.ERROR

    def _log_error(self, context: ErrorContext):
        log_message = f"{context.operation} - {context.error_type.value}: {context.message}"

        if context.severity == ErrorSeverity.WARNING:
            self.logger.warning(log_message)
        elif context.severity == ErrorSeverity.ERROR:
            self.logger.error(log_message)
        else:
            self.logger.critical(log_message)
            if context.traceback:
                self.logger.critical(f"Traceback:\n{context.traceback}")

        if context.suggestion:
            self.logger.info(f"Suggestion: {context.suggestion}")

    def get_error_summary(self) -> Dict[str, Any]:
        """Get summary of errors for reporting."""
        by_type: Dict[str, int] = {}
        for error in self.error_history:
            by_type[error.error_type.value] = by_type.get(error.error_type.value, 0) + 1

        return {
            'total_errors': len(self.error_history),
            'by_type': by_type,
            'recent_errors': [
                {
                    'type': error.error_type.value,
                    'severity': error.severity.value,
                    'message': error.message,
                    'operation': error.operation,
                    'timestamp': datetime.fromtimestamp(error.timestamp).isoformat(),
                    'suggestion': error.suggestion,
                }
                for error in self.error_history[-5:]
            ],
        }

    def export_error_report(self, output_file: str):
        """Export detailed error report as JSON."""
        report = {
            'generated_at': datetime.now().isoformat(),
            'summary': self.get_error_summary(),
            'detailed_errors': [],
        }

        for error in self.error_history:
            error_dict = asdict(error)
            error_dict['error_type'] = error.error_type.value
            error_dict['severity'] = error.severity.value
            error_dict['timestamp'] = datetime.fromtimestamp(error.timestamp).isoformat()
            report['detailed_errors'].append(error_dict)

        with open(output_file, 'w') as f:
            json.dump(report, f, indent=2, default=str)

        self.logger.info(f"Error report exported to {output_file}")


# Global error handler instance
_error_handler = None


def get_error_handler() -> ErrorHandler:
    """Get global error handler instance."""
    global _error_handler
    if _error_handler is None:
        _error_handler = ErrorHandler()
    return _error_handler


def setup_error_handler(**kwargs) -> ErrorHandler:
    """Replace the global error handler."""
    global _error_handler
    _error_handler = ErrorHandler(**kwargs)
    return _error_handler
