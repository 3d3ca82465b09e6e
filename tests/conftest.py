"""
Shared fixtures.
Raster algebra runs on an in-memory numpy image that mimics the few
ee.Image methods the constraint and combination code relies on, so no
Earth Engine session is needed.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


class ArrayImage:
    """Single band image backed by a numpy masked array."""

    def __init__(self, values, name="b1"):
        self.data = np.ma.asarray(np.ma.array(values, dtype=float))
        self.name = name

    def _wrap(self, data, name=None):
        return ArrayImage(data, name or self.name)

    @staticmethod
    def _operand(other):
        return other.data if isinstance(other, ArrayImage) else other

    def gte(self, other):
        return self._wrap((self.data >= self._operand(other)).astype(int))

    def lte(self, other):
        return self._wrap((self.data <= self._operand(other)).astype(int))

    def And(self, other):
        both = (self.data != 0) & (self._operand(other) != 0)
        return self._wrap(both.astype(int))

    def add(self, other):
        return self._wrap(self.data + self._operand(other))

    def divide(self, other):
        return self._wrap(self.data / self._operand(other))

    def rename(self, name):
        return self._wrap(self.data, name)

    def selfMask(self):
        return self._wrap(np.ma.masked_where(self.data == 0, self.data))

    def values(self):
        """Values as a list, with None for masked pixels."""
        return [
            None if np.ma.is_masked(v) else float(v)
            for v in self.data.ravel()
        ]


@pytest.fixture
def make_image():
    return ArrayImage


@pytest.fixture
def make_series():
    """Build a MonthlySeries from {month: values}; unset months get `fill`."""
    from retrieval import MonthlySeries

    def _make(band, by_month=None, fill=0.0, size=1):
        by_month = by_month or {}
        images = {}
        for month in range(1, 13):
            values = by_month.get(month, [fill] * size)
            images[month] = ArrayImage(values, band)
        return MonthlySeries(band=band, collection_id="test/normals", images=images)

    return _make


@pytest.fixture
def make_normals(make_series):
    """
    Build ClimateNormals for pixels given annual precipitation, May-Aug
    mean temperatures and April minimum temperature per pixel.
    """
    from retrieval import ClimateNormals

    def _make(annual_precip, season_temps, april_min):
        size = len(annual_precip)
        # the whole annual total falls in January so sums stay exact
        precip = make_series("ppt", fill=0.0, size=size,
                             by_month={1: annual_precip})
        tmean = make_series("tmean", fill=10.0, size=size, by_month={
            month: [temps[i] for temps in season_temps]
            for i, month in enumerate((5, 6, 7, 8))
        })
        tmin = make_series("tmin", fill=-5.0, size=size, by_month={4: april_min})
        return ClimateNormals(
            precipitation=precip,
            mean_temperature=tmean,
            min_temperature=tmin,
        )

    return _make
