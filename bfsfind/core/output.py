import json
import sys
from pathlib import Path
from typing import IO, Optional
import structlog

from bfsfind.config.settings import OutputFormat
from bfsfind.core.results import Failure, Match
from bfsfind.exceptions import OutputError

log = structlog.get_logger(__name__)

def format_match(match: Match, output_format: OutputFormat) -> str:
    if output_format == OutputFormat.JSON:
        return json.dumps(match.to_dict())
    if output_format == OutputFormat.LABELED:
        return f"Found: {match.path}"
    return str(match.path)

def format_failure(failure: Failure, output_format: OutputFormat) -> str:
    if output_format == OutputFormat.JSON:
        return json.dumps(failure.to_dict())
    return f"Error: {failure}"

def write_line(text: str, stream: Optional[IO[str]] = None):
    # writes one line and flushes, so results show up while the walk is still running.
    stream = stream if stream is not None else sys.stdout
    try:
        stream.write(text + "\n")
        stream.flush()
    except UnicodeEncodeError as e:
        log.warning("stream_write_failed_trying_binary_fallback", error=str(e))
        buffer = getattr(stream, "buffer", None)
        if buffer is None:
            raise OutputError(f"failed to write output: {e}")
        buffer.write((text + "\n").encode("utf-8", errors="replace"))
        buffer.flush()
    except BrokenPipeError:
        raise
    except OSError as e:
        raise OutputError(f"failed to write output: {e}")

def open_output_file(output_file_path: Path) -> IO[str]:
    log.info("writing_output_to_file", path=str(output_file_path))
    try:
        return output_file_path.open("w", encoding="utf-8")
    except OSError as e:
        raise OutputError(f"failed to open output file '{output_file_path}': {e}")
