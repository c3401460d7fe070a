"""Export of rendered diagrams to SVG files."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from .errors import ExportFailedError
from .models import RenderResult

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "diagram.svg"


class ExportService:
    """Writes the current artifact to `<output_dir>/diagram.svg`."""

    def __init__(self, output_dir: str = ".", filename: str = EXPORT_FILENAME):
        self.output_dir = Path(output_dir)
        self.filename = filename

    @property
    def target_path(self) -> Path:
        return self.output_dir / self.filename

    def export_svg(self, result: RenderResult) -> Optional[Path]:
        """Write the artifact markup verbatim.

        A no-op returning None unless `result` is a success. Raises
        ExportFailedError when the file cannot be written.
        """
        if not result.is_success or result.artifact is None:
            logger.debug("Nothing to export (state: %s)", result.state.value)
            return None

        target = self.target_path
        temp_path = None
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(dir=self.output_dir, suffix=".svg.part")
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(result.artifact.svg)
            os.replace(temp_path, target)
        except OSError as e:
            logger.error("Export to %s failed: %s", target, e)
            raise ExportFailedError(f"Could not write {target}: {e.strerror or e}") from e
        finally:
            if temp_path and os.path.exists(temp_path):
                os.unlink(temp_path)

        logger.info("Exported %s (%s)", target, result.artifact.media_type)
        return target
