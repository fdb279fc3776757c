"""Per-pixel skin-tone classification.

Two fixed analytic rules are combined with a logical OR: a direct RGB
threshold rule and a YCbCr chroma-window rule. ``is_skin_tone`` classifies a
single sample; ``skin_tone_mask`` applies the same rules to whole channels.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray


def _matches_rgb_rule(r: int, g: int, b: int) -> bool:
    # r > g already holds, so the signed difference also covers |r - g| > 15.
    return r > 95 and g > 40 and b > 20 and r > g and r > b and (r - g) > 15


def _matches_ycbcr_rule(r: int, g: int, b: int) -> bool:
    y = 0.299 * r + 0.587 * g + 0.114 * b
    cb = 128 - 0.169 * r - 0.331 * g + 0.5 * b
    cr = 128 + 0.5 * r - 0.419 * g - 0.081 * b
    return y > 80 and 77 < cb < 127 and 133 < cr < 173


def is_skin_tone(r: int, g: int, b: int) -> bool:
    """Return True if an RGB sample looks like skin under either rule."""
    return _matches_rgb_rule(r, g, b) or _matches_ycbcr_rule(r, g, b)


def skin_tone_mask(r: NDArray[np.uint8], g: NDArray[np.uint8], b: NDArray[np.uint8]) -> NDArray[np.bool_]:
    """Vectorized ``is_skin_tone`` over equally shaped channel arrays."""
    ri, gi, bi = (c.astype(np.int16) for c in (r, g, b))
    rgb_rule = (ri > 95) & (gi > 40) & (bi > 20) & (ri > gi) & (ri > bi) & ((ri - gi) > 15)

    rf, gf, bf = (c.astype(np.float64) for c in (r, g, b))
    y = 0.299 * rf + 0.587 * gf + 0.114 * bf
    ycbcr_rule = y > 80
    del y
    cb = 128 - 0.169 * rf - 0.331 * gf + 0.5 * bf
    ycbcr_rule &= (cb > 77) & (cb < 127)
    del cb
    cr = 128 + 0.5 * rf - 0.419 * gf - 0.081 * bf
    ycbcr_rule &= (cr > 133) & (cr < 173)

    return rgb_rule | ycbcr_rule
