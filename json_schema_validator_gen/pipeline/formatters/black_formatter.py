"""
Optional black pass over the generated module.

When black is not installed the module keeps the layout ast.unparse
gives it, which is valid but long-lined.
"""

from __future__ import annotations

import logging

from ..config import FormatterConfig

logger = logging.getLogger(__name__)


class BlackFormatter:
    """Runs black on generated source when it can be imported."""

    def __init__(self):
        self._black = None
        # None until the first import attempt
        self._available = None

    def is_available(self) -> bool:
        if self._available is None:
            try:
                import black
            except ImportError:
                self._available = False
            else:
                self._black = black
                self._available = True
        return self._available

    def _mode(self, config: FormatterConfig):
        black = self._black
        target = getattr(black.TargetVersion, config.target_version.upper(), None)
        if target is None:
            logger.warning("Unknown black target version %r, letting black infer it", config.target_version)
        return black.Mode(
            target_versions={target} if target is not None else set(),
            line_length=config.line_length,
            string_normalization=config.string_normalization,
            magic_trailing_comma=config.magic_trailing_comma,
        )

    def format(self, code: str, config: FormatterConfig) -> str:
        """
        Reformat generated source.

        A missing black or a black failure is logged and the source is
        returned untouched; formatting never fails a run.
        """
        if not self.is_available():
            logger.warning("Formatting requested but black is not installed, keeping unformatted output")
            return code

        try:
            return self._black.format_str(code, mode=self._mode(config))
        except self._black.InvalidInput as e:
            logger.warning("black could not format the generated code: %s", e)
            return code
