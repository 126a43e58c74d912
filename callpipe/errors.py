"""Error taxonomy for the recording pipeline.

Batch sweeps catch these per record and move on; single-item operations let
them reach the caller, where the blueprints turn them into JSON responses
using ``status_code``.
"""


class PipelineError(Exception):
    status_code = 400

    def __init__(self, message, **context):
        super().__init__(message)
        self.message = message
        self.context = context


class ParseError(PipelineError):
    """Recording filename does not follow the expected grammar."""


class MissingFileError(PipelineError):
    """Audio file vanished before it could be processed."""
    status_code = 404


class TransportError(PipelineError):
    """Speech-to-text or language-model backend unreachable or erroring."""
    status_code = 502


class ValidationError(PipelineError):
    """Language-model response is not the expected typed JSON object."""
    status_code = 502


class ConfigurationError(PipelineError):
    """Missing setting, or unresolvable device -> project -> config chain."""
    status_code = 422


class NotFoundError(PipelineError):
    status_code = 404


class NotTranscribedError(PipelineError):
    status_code = 409


class JobInProgressError(PipelineError):
    status_code = 409
