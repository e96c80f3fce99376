"""
jinspect Inspection Engine
===========================

Owns the boundary between the filesystem and the decoder: it opens the
class file, enforces the configured size limit, reads the bytes and
releases the handle before decoding starts, then runs
:class:`~jinspect.parsers.class_parser.ClassFileParser` with the decoder
settings from :class:`~shared.config.InspectConfig`.

Pipeline:
    1. Open and read the file (``FileUnavailable`` on failure)
    2. Decode header, pool, linkage, members and attributes
    3. Log recoverable diagnostics
    4. Return the :class:`ClassFile`
"""

from __future__ import annotations

import os
from pathlib import Path

from shared.config import InspectConfig
from shared.logger import InspectLogger

from jinspect.core.errors import FileUnavailable
from jinspect.core.models import ClassFile
from jinspect.parsers.class_parser import ClassFileParser


class InspectEngine:
    """Read and decode class files using one configuration.

    Usage::

        engine = InspectEngine()
        class_file = engine.inspect("build/App.class")
        print(class_file.name)
    """

    def __init__(
        self,
        config: InspectConfig | None = None,
        logger: InspectLogger | None = None,
    ) -> None:
        """Initialise the engine.

        Args:
            config: jinspect configuration.  Defaults are used if not provided.
            logger: Logger instance.  A new one is created if not provided.
        """
        self._config: InspectConfig = config or InspectConfig()
        self._logger: InspectLogger = logger or InspectLogger.from_config(
            "engine", self._config.global_settings
        )

    @property
    def config(self) -> InspectConfig:
        return self._config

    # ------------------------------------------------------------------ #
    #  Entry points
    # ------------------------------------------------------------------ #

    def inspect(self, file_path: str | Path) -> ClassFile:
        """Read *file_path* and decode it.

        Raises:
            FileUnavailable: The file is missing, unreadable or too large.
            ClassFileError: The contents are not a decodable class file.
        """
        data = self.read_file(file_path)
        return self.inspect_bytes(data, source=str(file_path))

    def inspect_bytes(self, data: bytes, source: str = "<bytes>") -> ClassFile:
        """Decode an in-memory class file."""
        settings = self._config.decoder
        parser = ClassFileParser(
            data,
            validate_magic=settings.validate_magic,
            strict_attribute_length=settings.strict_attribute_length,
            max_resolve_depth=settings.max_resolve_depth,
            logger=self._logger,
        )
        with self._logger.timed(f"decode {source}"):
            class_file = parser.parse()

        for diag in class_file.diagnostics:
            self._logger.warning("%s: %s", source, diag.message)
        self._logger.debug(
            "Decoded %s: %d field(s), %d method(s), %d attribute(s)",
            class_file.name,
            len(class_file.fields),
            len(class_file.methods),
            len(class_file.attributes),
        )
        return class_file

    # ------------------------------------------------------------------ #
    #  File access
    # ------------------------------------------------------------------ #

    def read_file(self, file_path: str | Path) -> bytes:
        """Read the whole file, closing it on every exit path.

        Raises:
            FileUnavailable: Missing, unreadable, or larger than
                ``decoder.max_file_size``.
        """
        path = Path(file_path)
        max_size = self._config.decoder.max_file_size
        try:
            with open(path, "rb") as fh:
                size = os.fstat(fh.fileno()).st_size
                if size > max_size:
                    raise FileUnavailable(
                        str(path),
                        f"file too large: {size:,} bytes (max: {max_size:,} bytes)",
                    )
                data = fh.read()
        except OSError as exc:
            raise FileUnavailable(str(path), exc.strerror or str(exc)) from exc

        self._logger.debug("Read %d byte(s) from %s", len(data), path)
        return data
