"""Tests for the ASCII grid export and hillshading."""
import numpy as np
import pytest

import pyfastscape as pfs


class TestAsciiGrid:
    def test_write_read(self, tmp_path):
        z = np.arange(42, dtype=np.float64).reshape(6, 7) * 0.5
        path = tmp_path / "dem.asc"
        assert pfs.io.write_ascii_grid(path, z, cellsize=500.0) == (4, 5)
        zr, header = pfs.io.read_ascii_grid(path)
        np.testing.assert_allclose(zr, z[1:-1, 1:-1], atol=1e-6)
        assert header["ncols"] == 5
        assert header["nrows"] == 4
        assert header["cellsize"] == 500.0
        assert header["xllcorner"] == 637500.0
        assert header["yllcorner"] == 206000.0

    def test_header_layout(self, tmp_path):
        path = tmp_path / "dem.asc"
        pfs.io.write_ascii_grid(path, np.zeros((5, 5)), cellsize=1.0, trim=0)
        lines = path.read_text().splitlines()
        assert [l.split()[0] for l in lines[:6]] == list(pfs.io.ascii_grid.HEADER_KEYS)
        assert len(lines) == 6 + 5

    def test_nodata_to_nan(self, tmp_path):
        z = np.ones((3, 3))
        z[1, 1] = -9999
        path = tmp_path / "dem.asc"
        pfs.io.write_ascii_grid(path, z, cellsize=1.0, trim=0)
        zr, _ = pfs.io.read_ascii_grid(path)
        assert np.isnan(zr[1, 1])
        assert np.count_nonzero(np.isnan(zr)) == 1

    def test_trim_too_large(self, tmp_path):
        with pytest.raises(ValueError):
            pfs.io.write_ascii_grid(tmp_path / "x.asc", np.zeros((4, 4)), cellsize=1.0, trim=2)


class TestHillshade:
    def test_flat_surface(self):
        hs = pfs.visu.hillshade_numpy(np.zeros((10, 12)), altitude_deg=45.0)
        np.testing.assert_allclose(hs, np.sin(np.radians(45.0)))

    def test_range(self):
        z = pfs.grid.random_terrain(30, 20, seed=1, amplitude=20.0)
        hs = pfs.visu.hillshade_numpy(z, dx=2.0)
        assert hs.shape == z.shape
        assert np.all((hs >= 0.0) & (hs <= 1.0))

    def test_mask(self):
        mask = np.zeros((5, 5), dtype=bool)
        mask[0, 0] = True
        hs = pfs.visu.hillshade_numpy(np.zeros((5, 5)), mask=mask)
        assert np.isnan(hs[0, 0])
        assert np.count_nonzero(np.isnan(hs)) == 1

    def test_grid_field_matches_numpy(self, make_grid):
        z = pfs.grid.random_terrain(16, 11, seed=3, amplitude=10.0)
        grid = make_grid(z, dx=5.0)
        np.testing.assert_allclose(grid.hillshade(), pfs.visu.hillshade_numpy(z, dx=5.0))

    def test_opposite_planes_along_azimuth(self):
        rows, cols = np.mgrid[0:10, 0:10]
        plane = (rows - cols).astype(np.float64) * 0.5
        lit = pfs.visu.hillshade_numpy(plane)
        shadowed = pfs.visu.hillshade_numpy(-plane)
        slope = np.arctan(np.sqrt(0.5))
        np.testing.assert_allclose(lit, np.cos(np.radians(45.0) - slope))
        np.testing.assert_allclose(shadowed, np.cos(np.radians(45.0) + slope))

    def test_not_2d(self):
        with pytest.raises(ValueError):
            pfs.visu.hillshade_numpy(np.zeros(10))


class TestPlotting:
    def test_plot_topography(self):
        matplotlib = pytest.importorskip("matplotlib")
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        fig, ax = pfs.visu.plot_topography(pfs.grid.ramp_terrain(10, 8), dx=10.0, title="ramp")
        assert ax.get_title() == "ramp"
        plt.close(fig)

    def test_plot_drainage_area(self):
        matplotlib = pytest.importorskip("matplotlib")
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        fig, ax = pfs.visu.plot_drainage_area(np.ones((8, 8)))
        plt.close(fig)
