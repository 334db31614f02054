"""Compact encoding of tile coordinate sets for API payloads.

Raw form is a semicolon separated list of ``x,y`` pairs. The compact form sorts
the coordinates, delta-encodes consecutive pairs and prefixes the result with
``D:``:

    D:x0,y0|dx1,dy1|dx2,dy2|...

Layouts store tiles as sorted runs along x, so most deltas are ``0,1`` and the
compact form is usually a fraction of the raw size. When it is not shorter the
raw string is kept.
"""

from __future__ import annotations

from typing import Iterable, List, Tuple

Coord = Tuple[int, int]


def _parse_raw(raw: str) -> List[Coord]:
    coords = []
    for part in raw.split(";"):
        if not part:
            continue
        x_s, y_s = part.split(",")
        coords.append((int(x_s), int(y_s)))
    return coords


def join_tiles(coords: Iterable[Coord]) -> str:
    return ";".join(f"{x},{y}" for x, y in coords)


def compress_tiles(raw: str) -> str:
    """Return the ``D:`` form of a raw coordinate list, or ``raw`` when that is not shorter.

    Malformed input is returned unchanged.
    """
    if not raw or ";" not in raw:
        return raw
    try:
        coords = sorted(_parse_raw(raw))
    except ValueError:
        return raw
    if not coords:
        return ""
    pieces = []
    prev = None
    for x, y in coords:
        if prev is None:
            pieces.append(f"{x},{y}")
        else:
            pieces.append(f"{x - prev[0]},{y - prev[1]}")
        prev = (x, y)
    compressed = "D:" + "|".join(pieces)
    return compressed if len(compressed) < len(raw) else raw


def decompress_tiles(data: str) -> str:
    """Inverse of :func:`compress_tiles`; non ``D:`` input passes through, bad input yields ``""``."""
    if not data or not data.startswith("D:"):
        return data
    try:
        return join_tiles(_expand(data[2:]))
    except ValueError:
        return ""


def _expand(body: str) -> List[Coord]:
    coords: List[Coord] = []
    for token in body.split("|"):
        dx_s, dy_s = token.split(",")
        dx, dy = int(dx_s), int(dy_s)
        if coords:
            px, py = coords[-1]
            coords.append((px + dx, py + dy))
        else:
            coords.append((dx, dy))
    return coords


def encode_tiles(coords: Iterable[Coord]) -> str:
    """Coordinates -> compact string (``D:`` form when it saves space)."""
    return compress_tiles(join_tiles(sorted(coords)))


def decode_tiles(data: str) -> List[Coord]:
    """Compact or raw string -> sorted coordinate list. Raises ValueError on malformed input."""
    if not data:
        return []
    if data.startswith("D:"):
        return sorted(_expand(data[2:]))
    return sorted(_parse_raw(data))


__all__ = ["compress_tiles", "decompress_tiles", "encode_tiles", "decode_tiles", "join_tiles"]
