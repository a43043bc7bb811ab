"""Request file parser with key positions for error reporting.

Both YAML and JSON request files go through PyYAML (JSON documents are
valid YAML). The loader records the source position of every mapping
key under its dotted path, with list items addressed by index
("prompts.0.text"), so validation errors can point at the exact line.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml


class RequestParseError(Exception):
    """Raised when a request file is not well-formed YAML/JSON.

    Attributes:
        line: 1-indexed line number of the problem, if known.
        column: 1-indexed column number of the problem, if known.
        message: Parser diagnostic.
        filename: Name of the file being parsed, or '<string>'.
    """

    def __init__(
        self,
        message: str,
        line: int | None = None,
        column: int | None = None,
        filename: str = "<string>",
    ) -> None:
        self.message = message
        self.line = line
        self.column = column
        self.filename = filename
        super().__init__(message)


class PositionLoader(yaml.SafeLoader):
    """SafeLoader that maps dotted key paths to (line, column) positions."""

    def __init__(self, stream: str, base_dir: Path | None = None) -> None:
        super().__init__(stream)
        self.positions: dict[str, tuple[int, int]] = {}
        self.base_dir = base_dir
        self._path: list[str] = []

    def _record(self, key: str, node: yaml.Node) -> None:
        dotted = ".".join([*self._path, key])
        self.positions[dotted] = (node.start_mark.line + 1, node.start_mark.column + 1)

    def _construct_child(self, segment: str, node: yaml.Node) -> Any:
        if isinstance(node, (yaml.MappingNode, yaml.SequenceNode)):
            self._path.append(segment)
            try:
                return self.construct_object(node, deep=True)
            finally:
                self._path.pop()
        return self.construct_object(node, deep=True)

    def construct_position_map(self, node: yaml.MappingNode) -> dict[Any, Any]:
        self.flatten_mapping(node)
        data: dict[Any, Any] = {}
        for key_node, value_node in node.value:
            key = self.construct_object(key_node, deep=True)
            if isinstance(key, str):
                self._record(key, key_node)
                data[key] = self._construct_child(key, value_node)
            else:
                data[key] = self.construct_object(value_node, deep=True)
        return data

    def construct_position_seq(self, node: yaml.SequenceNode) -> list[Any]:
        return [self._construct_child(str(idx), child) for idx, child in enumerate(node.value)]


PositionLoader.add_constructor("tag:yaml.org,2002:map", PositionLoader.construct_position_map)
PositionLoader.add_constructor("tag:yaml.org,2002:seq", PositionLoader.construct_position_seq)


def _include(loader: PositionLoader, node: yaml.ScalarNode) -> Any:
    """``!include prompts.yaml`` loads another file relative to the request file."""
    target = Path(loader.construct_scalar(node))
    if loader.base_dir is not None and not target.is_absolute():
        target = loader.base_dir / target
    return yaml.safe_load(target.read_text(encoding="utf-8"))


PositionLoader.add_constructor("!include", _include)


def parse_request_source(
    source: str,
    filename: str = "<string>",
    base_dir: Path | None = None,
) -> tuple[dict | None, dict[str, tuple[int, int]]]:
    """Parse request text and return (data, positions).

    Returns (None, {}) when the document is empty or not a mapping.

    Raises:
        RequestParseError: If the text is not well-formed.
    """
    loader = PositionLoader(source, base_dir=base_dir)
    try:
        data = loader.get_single_data()
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        raise RequestParseError(
            message=str(exc),
            line=mark.line + 1 if mark is not None else None,
            column=mark.column + 1 if mark is not None else None,
            filename=filename,
        ) from exc
    finally:
        loader.dispose()

    if not isinstance(data, dict):
        return None, {}
    return data, loader.positions


def parse_request_file(filepath: Path) -> tuple[dict | None, dict[str, tuple[int, int]]]:
    """Parse a request file; see parse_request_source.

    Raises:
        RequestParseError: If the file is not well-formed.
        FileNotFoundError: If the file does not exist.
    """
    return parse_request_source(
        filepath.read_text(encoding="utf-8"),
        filename=str(filepath),
        base_dir=filepath.parent,
    )
