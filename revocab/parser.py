"""
Loads stored extraction results (YAML or JSON files) for set creation.

Each file holds the output of one extraction call:

    metadata:
      language: English
      grade: "7"
    vocabulary:
      - original: house
        translation: Haus
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import yaml
from pydantic import ValidationError

from .exceptions import ExtractionFileError
from .extraction import ExtractionResult

logger = logging.getLogger(__name__)

EXTRACTION_FILE_PATTERNS = ("*.yaml", "*.yml", "*.json")


@dataclass
class ExtractionLoaderConfig:
    """Configuration for loading extraction result files."""

    fail_fast: bool = False


class ExtractionFileLoader:
    def __init__(self, config: Optional[ExtractionLoaderConfig] = None):
        self.config = config or ExtractionLoaderConfig()

    def load_file(self, file_path: Path) -> ExtractionResult:
        """
        Parse and validate one extraction result file.

        Raises:
            ExtractionFileError: If the file is missing or unreadable, is not
                UTF-8 text or valid YAML/JSON, is not a mapping, or fails
                validation.
        """
        try:
            content = file_path.read_text(encoding="utf-8")
            raw_content = yaml.safe_load(content)
        except FileNotFoundError:
            raise ExtractionFileError(file_path, "File not found.") from None
        except UnicodeDecodeError as e:
            raise ExtractionFileError(
                file_path, f"File is not valid UTF-8: {e}"
            ) from e
        except IOError as e:
            raise ExtractionFileError(
                file_path, f"Could not read file: {e}"
            ) from e
        except yaml.YAMLError as e:
            raise ExtractionFileError(
                file_path, f"Invalid YAML/JSON syntax: {e}"
            ) from e

        if not isinstance(raw_content, dict):
            raise ExtractionFileError(
                file_path,
                "Top level must be a mapping with 'metadata' and 'vocabulary'.",
            )

        try:
            return ExtractionResult.model_validate(raw_content)
        except ValidationError as e:
            error_details = e.errors()[0]
            field = ".".join(map(str, error_details["loc"]))
            msg = error_details["msg"]
            raise ExtractionFileError(
                file_path, f"Validation error in field '{field}': {msg}"
            ) from e

    def load_files(
        self, file_paths: Sequence[Path]
    ) -> Tuple[List[ExtractionResult], List[ExtractionFileError]]:
        """
        Load several files, collecting errors unless `fail_fast` is set.

        Results keep the order of `file_paths`.
        """
        results: List[ExtractionResult] = []
        errors: List[ExtractionFileError] = []
        for file_path in file_paths:
            try:
                results.append(self.load_file(file_path))
            except ExtractionFileError as e:
                if self.config.fail_fast:
                    raise
                logger.warning(f"Skipping extraction file: {e}")
                errors.append(e)

        logger.info(
            f"Loaded {len(results)} extraction results from "
            f"{len(file_paths)} files with {len(errors)} errors."
        )
        return results, errors


def find_extraction_files(source: Path) -> List[Path]:
    """
    Return the extraction files to load for `source`.

    A file path is returned as-is; a directory is searched (non-recursively)
    for YAML and JSON files, sorted by name so pages keep their order.
    """
    if source.is_file():
        return [source]
    if not source.is_dir():
        return []
    found = set()
    for pattern in EXTRACTION_FILE_PATTERNS:
        found.update(source.glob(pattern))
    return sorted(found)
