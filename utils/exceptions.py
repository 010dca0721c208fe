"""
Custom exception classes for the Exam Extractor

This module defines all custom exceptions used throughout the pipeline,
providing structured error handling with proper error codes and messages.
Per-document errors are reported and skipped by the batch service; only
output failures abort a run.
"""
import time
from typing import Optional, Dict, Any, List
from enum import Enum


class ErrorCode(Enum):
    """Enumeration of error codes for consistent error handling"""

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Source document errors
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    UNSUPPORTED_DOCUMENT_TYPE = "UNSUPPORTED_DOCUMENT_TYPE"
    DOCUMENT_READ_FAILED = "DOCUMENT_READ_FAILED"

    # Batch errors
    EMPTY_BATCH = "EMPTY_BATCH"

    # Output / table errors
    OUTPUT_WRITE_FAILED = "OUTPUT_WRITE_FAILED"
    TABLE_FORMAT_INVALID = "TABLE_FORMAT_INVALID"


class ExamExtractionError(Exception):
    """
    Base exception class for all Exam Extractor errors

    Provides structured error information with error codes, messages,
    and optional details for debugging and the end-of-run report.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        """
        Initialize the exception

        Args:
            message: Human-readable error message
            error_code: Structured error code for programmatic handling
            details: Optional dictionary with additional error details
            original_exception: Original exception that caused this error (if any)
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.original_exception = original_exception
        self.timestamp = time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary format for reports and structured logs

        Returns:
            Dictionary representation of the error
        """
        error_dict = {
            "error": {
                "code": self.error_code.value,
                "message": self.message,
                "timestamp": self.timestamp
            }
        }

        if self.details:
            error_dict["error"]["details"] = self.details

        return error_dict

    def __str__(self) -> str:
        """String representation of the exception"""
        return f"{self.error_code.value}: {self.message}"


class DocumentReadError(ExamExtractionError):
    """Source document is missing, corrupt, or unreadable"""

    def __init__(
        self,
        message: str,
        source_path: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.DOCUMENT_READ_FAILED,
        original_exception: Optional[Exception] = None
    ):
        details = {}
        if source_path:
            details["source_path"] = source_path

        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
            original_exception=original_exception
        )
        self.source_path = source_path


class EmptyBatchError(ExamExtractionError):
    """Input directory holds no documents matching the exam pattern"""

    def __init__(
        self,
        message: str,
        input_dir: Optional[str] = None,
        pattern: Optional[str] = None
    ):
        details = {}
        if input_dir:
            details["input_dir"] = input_dir
        if pattern:
            details["pattern"] = pattern

        super().__init__(
            message=message,
            error_code=ErrorCode.EMPTY_BATCH,
            details=details
        )


class OutputWriteError(ExamExtractionError):
    """Exception for failures writing the output tables"""

    def __init__(
        self,
        message: str,
        output_path: Optional[str] = None,
        original_exception: Optional[Exception] = None
    ):
        details = {}
        if output_path:
            details["output_path"] = output_path

        super().__init__(
            message=message,
            error_code=ErrorCode.OUTPUT_WRITE_FAILED,
            details=details,
            original_exception=original_exception
        )


class TableFormatError(ExamExtractionError):
    """A CSV table is missing required columns"""

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        missing_columns: Optional[List[str]] = None
    ):
        details = {}
        if table:
            details["table"] = table
        if missing_columns:
            details["missing_columns"] = missing_columns

        super().__init__(
            message=message,
            error_code=ErrorCode.TABLE_FORMAT_INVALID,
            details=details
        )


class ValidationError(ExamExtractionError):
    """Exception for invalid arguments passed to the pipeline"""

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        field_value: Optional[Any] = None,
        original_exception: Optional[Exception] = None
    ):
        details = {}
        if field_name:
            details["field_name"] = field_name
        if field_value is not None:
            # Truncate long values
            value_str = str(field_value)
            details["field_value"] = value_str[:100] + "..." if len(value_str) > 100 else value_str

        super().__init__(
            message=message,
            error_code=ErrorCode.VALIDATION_ERROR,
            details=details,
            original_exception=original_exception
        )


# Convenience functions for creating common exceptions

def create_document_not_found_error(source_path: str) -> DocumentReadError:
    """Create a document not found error"""
    return DocumentReadError(
        message=f"Document not found: {source_path}",
        source_path=source_path,
        error_code=ErrorCode.DOCUMENT_NOT_FOUND
    )


def create_unsupported_document_error(source_path: str, supported_types: list) -> DocumentReadError:
    """Create an unsupported document type error"""
    return DocumentReadError(
        message=f"Document '{source_path}' is not supported. Supported types: {', '.join(supported_types)}",
        source_path=source_path,
        error_code=ErrorCode.UNSUPPORTED_DOCUMENT_TYPE
    )


def create_empty_batch_error(input_dir: str, pattern: str) -> EmptyBatchError:
    """Create an empty batch error"""
    return EmptyBatchError(
        message=f"No exam documents matching '{pattern}' found in {input_dir}",
        input_dir=input_dir,
        pattern=pattern
    )
