"""Positional code-point allocation.

Code points are handed out in input order starting at a fixed base in
the BMP private-use area: the k-th asset receives ``base + k``.

Allocation is purely positional and nothing is persisted between builds.
Reordering, inserting or removing icons shifts the code points of every
icon after the change, so fonts from different builds are only
compatible when their asset lists are identical. The code-point manifest
written next to each font records the assignment of that build.
"""

from collections.abc import Sized

from iconsmith.config.settings import PRIVATE_USE_END, PRIVATE_USE_START
from iconsmith.exceptions import CodePointRangeError

DEFAULT_BASE_CODE_POINT = 0xE614


def allocate_code_points(
    assets: Sized,
    base: int = DEFAULT_BASE_CODE_POINT,
) -> list[int]:
    """Allocate one code point per asset.

    Args:
        assets: Assets in build order (only the count matters)
        base: First code point to hand out

    Returns:
        Strictly increasing code points ``[base, base + 1, ...]``

    Raises:
        CodePointRangeError: If the range leaves the private-use area
    """
    count = len(assets)
    if base < PRIVATE_USE_START or base + max(count - 1, 0) > PRIVATE_USE_END:
        raise CodePointRangeError(base, count)
    return list(range(base, base + count))


def code_point_map(
    names: list[str],
    base: int = DEFAULT_BASE_CODE_POINT,
) -> dict[str, int]:
    """Map each name to its allocated code point, preserving order."""
    return dict(zip(names, allocate_code_points(names, base), strict=True))
