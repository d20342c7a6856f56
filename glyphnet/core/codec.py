"""Plain-text persistence for network parameters.

A model file has two lines::

    784;64;10
    w w w ... b b b

The first line is the topology; the second holds every weight (layer,
source neuron, destination neuron) followed by every bias (layer, neuron)
as space-separated decimal text with ``.`` as the decimal point.
"""

from __future__ import annotations

import logging
import math
import re
from pathlib import Path
from typing import TYPE_CHECKING, List

import numpy as np

from .errors import ModelNotFoundError, ModelParseError, ShapeMismatchError
from .types import Array, Topology

if TYPE_CHECKING:  # pragma: no cover
    from .network import SigmoidNetwork

logger = logging.getLogger(__name__)

_DECIMAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


def format_value(value: float) -> str:
    """Shortest decimal text that parses back to exactly ``value``."""

    return repr(float(value))


def save_model(network: "SigmoidNetwork", path: str | Path) -> Path:
    """Write ``network`` to ``path`` and return the resolved path."""

    path = Path(path)
    values = network.params.flatten()
    if not np.all(np.isfinite(values)):
        raise ValueError("Refusing to save a network with non-finite parameters")
    path.parent.mkdir(parents=True, exist_ok=True)
    body = " ".join(format_value(v) for v in values).strip()
    with path.open("w", encoding="utf-8", newline="\n") as handle:
        handle.write(f"{network.topology}\n{body}\n")
    logger.debug("Saved %s parameters for topology %s to %s", values.size, network.topology, path)
    return path


def _read_lines(path: Path) -> List[str]:
    if not path.is_file():
        raise ModelNotFoundError(f"No saved model at {path}")
    return path.read_text(encoding="utf-8").splitlines()


def read_topology(path: str | Path) -> Topology:
    """Return the topology recorded on the first line of a model file."""

    path = Path(path)
    lines = _read_lines(path)
    if not lines or not lines[0].strip():
        raise ModelParseError(f"{path}: missing topology line", position=0)
    try:
        return Topology.parse(lines[0])
    except ValueError as exc:
        raise ModelParseError(f"{path}: {exc}", position=0) from exc


def parse_values(line: str, expected: int, *, source: str = "<model>") -> Array:
    """Parse exactly ``expected`` finite numbers from the parameter line."""

    tokens = line.split()
    if len(tokens) < expected:
        raise ModelParseError(
            f"{source}: expected {expected} parameters, found {len(tokens)}; "
            f"token {len(tokens) + 1} is missing",
            position=len(tokens) + 1,
        )
    if len(tokens) > expected:
        raise ModelParseError(
            f"{source}: expected {expected} parameters, found {len(tokens)}; "
            f"token {expected + 1} is surplus",
            position=expected + 1,
        )
    values = np.empty(expected, dtype=np.float64)
    for idx, token in enumerate(tokens):
        if not _DECIMAL.fullmatch(token):
            raise ModelParseError(
                f"{source}: token {idx + 1} ({token!r}) is not a number", position=idx + 1
            )
        value = float(token)
        if not math.isfinite(value):
            raise ModelParseError(
                f"{source}: token {idx + 1} ({token!r}) is not finite", position=idx + 1
            )
        values[idx] = value
    return values


def load_model(network: "SigmoidNetwork", path: str | Path) -> None:
    """Replace the parameters of ``network`` with those stored at ``path``.

    The whole file is validated before anything is written, so on any error
    the network keeps its previous parameters.
    """

    path = Path(path)
    stored = read_topology(path)
    if stored != network.topology:
        raise ShapeMismatchError(
            f"{path}: stored topology {stored} does not match network topology "
            f"{network.topology}"
        )
    lines = _read_lines(path)
    line = lines[1] if len(lines) > 1 else ""
    values = parse_values(line, network.topology.parameter_count, source=str(path))
    with network.lock:
        network.params.assign(values)
    logger.info("Loaded model %s from %s", network.topology, path)


def warm_start(network: "SigmoidNetwork", path: str | Path) -> bool:
    """Load ``path`` into ``network`` if it exists.

    Returns ``False`` when there is no prior model, leaving the random
    initialisation in place. Malformed or mismatched files still raise.
    """

    try:
        load_model(network, path)
    except ModelNotFoundError:
        logger.info("No prior model at %s; starting from random parameters", path)
        return False
    return True


__all__ = [
    "format_value",
    "load_model",
    "parse_values",
    "read_topology",
    "save_model",
    "warm_start",
]
