import gzip
import io
from datetime import datetime, timezone
from pathlib import Path

import numpy as np
import pytest

from furuno_app.services.furuno import (
    FormatError,
    FurunoDecodeError,
    ParamDescription,
    RadarFile,
    TruncatedInputError,
    UnsupportedMomentError,
    build_param_table,
    decode_furuno,
    decode_header,
    iter_rays,
    read_furuno_bytes,
    read_furuno_file,
    scale_moment,
)
from furuno_app.services.furuno.structures import HEADER_SIZE, ByteReader
from samples import REF_ONLY, pack_header, pack_ray

TOL: float = 1e-9

ALL_MOMENTS = 0b1_1111_1111
QUALITY = 1 << 8


class TestScaleMoment:

    @pytest.mark.parametrize(
        ["raw", "moment", "expected"],
        [
            (32768, "REF", 0.0),
            (0, "REF", -327.68),
            (65535, "REF", 327.67),
            (32868, "VEL", 1.0),
            (32668, "ZDR", -1.0),
            (33768, "KDP", 10.0),
            (32768, "R", 0.0),
            (32768, "PHI", 0.0),
            (65535, "PHI", 360.0 * 32767 / 65535),
            (1, "RHO", 0.0),
            (65535, "RHO", 2.0),
            (32768, "RHO", 2.0 * 32767 / 65534),
            (1, "SW", 0.0),
            (101, "SW", 1.0),
        ],
    )
    def test_scaling_law(self, raw: int, moment: str, expected: float) -> None:

        value = scale_moment(raw, moment)
        assert isinstance(value, float)
        assert np.isclose(value, expected, atol=TOL)

    def test_phi_upper_bound(self) -> None:
        # 65535 queda media escala por encima de 32768: poco menos de 180 grados
        assert 179.99 < scale_moment(65535, "PHI") < 180.0

    def test_vectorised(self) -> None:

        raw = np.array([0, 32768, 65535], dtype="<u2")
        out = scale_moment(raw, "REF")
        assert out.dtype == np.float64
        np.testing.assert_allclose(out, [-327.68, 0.0, 327.67], atol=TOL)

        # Mismo resultado escalar y vectorial
        for v, o in zip(raw, out):
            assert scale_moment(int(v), "REF") == pytest.approx(o)

    @pytest.mark.parametrize("moment", ["", "DBZH", "ref", None])
    def test_unknown_moment(self, moment) -> None:

        with pytest.raises(UnsupportedMomentError):
            scale_moment(32768, moment)

        # Es un error de invariante, no un error de formato del archivo
        assert not issubclass(UnsupportedMomentError, FurunoDecodeError)


class TestDecodeHeader:

    def test_decode_valid_header(self) -> None:

        reader = ByteReader(pack_header(gate_count=400, gate_resolution=50))
        context = decode_header(reader)

        assert reader.position == HEADER_SIZE
        assert reader.at_end()
        assert context.start_time == datetime(2022, 7, 1, 12, 30, 15, tzinfo=timezone.utc)
        assert context.end_time == datetime(2022, 7, 1, 12, 30, 45, tzinfo=timezone.utc)
        assert np.isclose(context.latitude, 35.61234, atol=TOL)
        assert np.isclose(context.longitude, 139.71234, atol=TOL)
        assert np.isclose(context.altitude, 42.5, atol=TOL)
        assert np.isclose(context.nyquist_velocity, 16.0, atol=TOL)
        assert np.isclose(context.rotation_speed, 2.0 / 60.0 * 360.0, atol=TOL)
        assert context.gate_count == 400
        assert context.gate_resolution == 50
        assert context.moment_mask == REF_ONLY
        assert context.version == 3
        assert context.header["header_size"] == HEADER_SIZE

    def test_negative_coordinates(self) -> None:

        context = decode_header(
            ByteReader(pack_header(latitude=-3356789, longitude=-7012345))
        )
        assert np.isclose(context.latitude, -33.56789, atol=TOL)
        assert np.isclose(context.longitude, -70.12345, atol=TOL)

    @pytest.mark.parametrize("header_size", [0, 155, 157, 512, 65535])
    def test_wrong_header_size(self, header_size: int) -> None:

        with pytest.raises(FormatError):
            decode_header(ByteReader(pack_header(header_size=header_size)))

    def test_wrong_header_size_in_short_file(self) -> None:

        # Una variante distinta se reporta como FormatError aunque sea corta
        with pytest.raises(FormatError):
            decode_header(ByteReader(b"\x10\x00"))

    @pytest.mark.parametrize("length", [0, 1, 2, 20, 155])
    def test_truncated_header(self, length: int) -> None:

        with pytest.raises(TruncatedInputError):
            decode_header(ByteReader(pack_header()[:length]))

    @pytest.mark.parametrize(
        "start_time",
        [(2022, 13, 1, 0, 0, 0), (0, 0, 0, 0, 0, 0)],
        ids=["Month out of range", "Zeroed timestamp"],
    )
    def test_invalid_start_time(self, start_time: tuple) -> None:

        # La cabecera se decodifica; el error aparece con el primer rayo
        context = decode_header(ByteReader(pack_header(start_time=start_time)))
        assert context.start_time is None

        radar = decode_furuno(pack_header(start_time=start_time))
        assert radar.sweep.nrays == 0

        with pytest.raises(FormatError, match="start time"):
            decode_furuno(
                pack_header(start_time=start_time) + pack_ray(9000, [[1, 2]])
            )

    def test_invalid_end_time_is_ignored(self) -> None:

        context = decode_header(
            ByteReader(pack_header(end_time=(0, 0, 0, 0, 0, 0)))
        )
        assert context.end_time is None

    def test_moment_mask_derivations(self) -> None:

        context = decode_header(
            ByteReader(pack_header(gate_count=10, record_item=ALL_MOMENTS))
        )
        assert context.moment_count == 9
        assert context.named_moments == [
            "R", "REF", "VEL", "ZDR", "KDP", "PHI", "RHO", "SW",
        ]
        assert context.ray_block_size == 2 + 2 * 10 * 9

    def test_context_is_immutable(self) -> None:

        context = decode_header(ByteReader(pack_header()))
        with pytest.raises(AttributeError):
            context.gate_count = 10  # type: ignore[misc]


class TestParamTable:

    def test_param_table_excludes_quality(self) -> None:

        context = decode_header(
            ByteReader(pack_header(gate_resolution=75, record_item=ALL_MOMENTS))
        )
        params = build_param_table(context)

        assert list(params) == ["R", "REF", "VEL", "ZDR", "KDP", "PHI", "RHO", "SW"]
        assert all(isinstance(p, ParamDescription) for p in params.values())
        assert all(p.meters_between_cells == 75.0 for p in params.values())
        assert all(p.meters_to_first_cell == 0.0 for p in params.values())
        assert params["REF"].units == "dBZ"
        assert params["VEL"].units == "m/s"

    def test_param_table_quality_only(self) -> None:

        context = decode_header(ByteReader(pack_header(record_item=QUALITY)))
        assert build_param_table(context) == {}


class TestIterRays:

    @staticmethod
    def _reader(body: bytes, **header) -> tuple:
        reader = ByteReader(pack_header(**header) + body)
        context = decode_header(reader)
        return reader, context

    def test_empty_stream(self) -> None:

        reader, context = self._reader(b"")
        assert list(iter_rays(reader, context)) == []

    @pytest.mark.parametrize(
        ["azimuth", "elevation", "expected"],
        [
            (0, 9000, 0.0),
            (12345, 9000, 0.0),
            (0, 0, 90.0),
            (9000, 4550, 44.5),
            (0, 18000, -90.0),
            (35999, 36000, -270.0),
        ],
    )
    def test_azimuth_from_elevation_field(
        self, azimuth: int, elevation: int, expected: float
    ) -> None:

        reader, context = self._reader(
            pack_ray(elevation, [[32768, 32768]], azimuth=azimuth)
        )
        (ray,) = list(iter_rays(reader, context))
        assert np.isclose(ray.azimuth, expected, atol=TOL)

    def test_ray_time_is_scan_start(self) -> None:

        body = pack_ray(0, [[1, 2]]) + pack_ray(100, [[3, 4]])
        reader, context = self._reader(body)
        rays = list(iter_rays(reader, context))
        assert len(rays) == 2
        assert all(ray.time == context.start_time for ray in rays)

    @pytest.mark.parametrize("angle_block_size", [0, 4, 7, 8])
    def test_wrong_angle_block_size(self, angle_block_size: int) -> None:

        reader, context = self._reader(
            pack_ray(9000, [[1, 2]], angle_block_size=angle_block_size)
        )
        with pytest.raises(FormatError):
            list(iter_rays(reader, context))

    @pytest.mark.parametrize("block_size", [0, 2, 5, 7, 8, 10])
    def test_wrong_observed_block_size(self, block_size: int) -> None:

        reader, context = self._reader(
            pack_ray(9000, [[1, 2]], block_size=block_size)
        )
        with pytest.raises(FormatError):
            list(iter_rays(reader, context))

    def test_mask_gate_count_mismatch(self) -> None:

        # La cabecera anuncia 3 gates pero el rayo trae 2
        reader, context = self._reader(pack_ray(9000, [[1, 2]]), gate_count=3)
        with pytest.raises(FormatError):
            list(iter_rays(reader, context))

    @pytest.mark.parametrize("cut", [1, 2, 6, 8, 10])
    def test_truncated_ray(self, cut: int) -> None:

        complete = pack_ray(9000, [[32768, 32868]])
        partial = pack_ray(4500, [[32768, 32868]])[:cut]
        reader, context = self._reader(complete + partial)

        rays = []
        with pytest.raises(TruncatedInputError):
            for ray in iter_rays(reader, context):
                rays.append(ray)

        # Solo el rayo completo fue emitido
        assert len(rays) == 1
        assert np.isclose(rays[0].azimuth, 0.0, atol=TOL)

    def test_quality_channel_is_discarded(self) -> None:

        body = (
            pack_ray(9000, [[32768, 32868], [7, 7]])
            + pack_ray(8000, [[32668, 32768], [9, 9]])
        )
        reader, context = self._reader(body, record_item=REF_ONLY | QUALITY)
        rays = list(iter_rays(reader, context))

        assert len(rays) == 2
        for ray in rays:
            assert list(ray.data) == ["REF"]
        np.testing.assert_allclose(rays[0].data["REF"], [0.0, 1.0], atol=TOL)
        np.testing.assert_allclose(rays[1].data["REF"], [-1.0, 0.0], atol=TOL)
        assert np.isclose(rays[1].azimuth, 10.0, atol=TOL)

    def test_moments_follow_bit_order(self) -> None:

        # R, VEL, PHI, RHO, SW en orden de bits
        mask = (1 << 0) | (1 << 2) | (1 << 5) | (1 << 6) | (1 << 7)
        samples = [[32868], [32668], [32768], [65535], [101]]
        reader, context = self._reader(
            pack_ray(9000, samples), gate_count=1, record_item=mask
        )
        (ray,) = list(iter_rays(reader, context))

        assert list(ray.data) == ["R", "VEL", "PHI", "RHO", "SW"]
        assert np.isclose(ray.data["R"][0], 1.0, atol=TOL)
        assert np.isclose(ray.data["VEL"][0], -1.0, atol=TOL)
        assert np.isclose(ray.data["PHI"][0], 0.0, atol=TOL)
        assert np.isclose(ray.data["RHO"][0], 2.0, atol=TOL)
        assert np.isclose(ray.data["SW"][0], 1.0, atol=TOL)

    def test_rays_are_lazy(self) -> None:

        # El segundo bloque es inválido, pero el primero se obtiene antes
        body = pack_ray(9000, [[1, 2]]) + pack_ray(9000, [[1, 2]], angle_block_size=4)
        reader, context = self._reader(body)
        rays = iter_rays(reader, context)
        first = next(rays)
        assert first.data["REF"].shape == (2,)
        with pytest.raises(FormatError):
            next(rays)


class TestDecodeFuruno:

    def test_minimal_file(self, minimal_file_bytes: bytes) -> None:

        radar = decode_furuno(minimal_file_bytes)

        assert isinstance(radar, RadarFile)
        assert radar.name == "FWLX"
        assert len(radar.sweeps) == 1
        assert list(radar.params) == ["REF"]
        assert radar.params["REF"].meters_between_cells == 150.0

        sweep = radar.sweep
        assert sweep.elevation == 0.0
        assert np.isclose(sweep.nyquist_velocity, 16.0, atol=TOL)
        assert np.isclose(sweep.latitude, 35.61234, atol=TOL)
        assert sweep.nrays == 1

        ray = sweep.rays[0]
        assert np.isclose(ray.azimuth, 0.0, atol=TOL)
        np.testing.assert_allclose(ray.data["REF"], [0.0, 1.0], atol=TOL)

    def test_file_object_and_name(self, minimal_file_bytes: bytes) -> None:

        radar = decode_furuno(io.BytesIO(minimal_file_bytes), name="KOBE")
        assert radar.name == "KOBE"
        assert radar.sweep.nrays == 1

    def test_header_only(self) -> None:

        radar = decode_furuno(pack_header(record_item=ALL_MOMENTS))
        assert radar.sweep.nrays == 0
        assert len(radar.params) == 8

    def test_no_moments(self) -> None:

        body = pack_ray(9000, []) + pack_ray(8900, [])
        radar = decode_furuno(pack_header(record_item=0) + body)
        assert radar.params == {}
        assert radar.sweep.nrays == 2
        assert radar.sweep.rays[1].data == {}

    def test_many_rays(self) -> None:

        gates = 5
        body = b"".join(
            pack_ray(elev, [[elev] * gates, [1] * gates])
            for elev in range(0, 36000, 100)
        )
        radar = decode_furuno(
            pack_header(gate_count=gates, record_item=REF_ONLY | (1 << 7)) + body
        )

        assert radar.sweep.nrays == 360
        np.testing.assert_allclose(
            radar.sweep.azimuths(), 90.0 - np.arange(0, 360.0), atol=1e-6
        )
        refs = radar.sweep.moment_array("REF", gates)
        assert refs.shape == (360, gates)
        np.testing.assert_allclose(
            refs[:, 0], (np.arange(0, 36000, 100) - 32768) / 100.0, atol=1e-9
        )
        assert np.all(radar.sweep.moment_array("SW", gates) == 0.0)

    def test_corrupt_stream_returns_nothing(self, minimal_file_bytes: bytes) -> None:

        with pytest.raises(TruncatedInputError):
            decode_furuno(minimal_file_bytes + b"\x06\x00\x00")


class TestReadFuruno:

    def test_read_rhix(self, rhix_file: Path, minimal_file_bytes: bytes) -> None:

        assert read_furuno_bytes(rhix_file) == minimal_file_bytes
        radar = read_furuno_file(rhix_file)
        assert radar.sweep.nrays == 1

    def test_read_gz(self, tmp_path: Path, minimal_file_bytes: bytes) -> None:

        path = tmp_path / "scan.rhix.gz"
        path.write_bytes(gzip.compress(minimal_file_bytes))
        assert read_furuno_bytes(path) == minimal_file_bytes
        radar = read_furuno_file(path)
        np.testing.assert_allclose(radar.sweep.rays[0].data["REF"], [0.0, 1.0])

    def test_unknown_extension(self, tmp_path: Path, minimal_file_bytes: bytes) -> None:

        path = tmp_path / "scan.nc"
        path.write_bytes(minimal_file_bytes)
        with pytest.raises(ValueError):
            read_furuno_bytes(path)

    def test_missing_file(self, tmp_path: Path) -> None:

        with pytest.raises(FileNotFoundError):
            read_furuno_file(tmp_path / "missing.rhix")

    def test_corrupt_gzip(self, tmp_path: Path, minimal_file_bytes: bytes) -> None:

        path = tmp_path / "scan.gz"
        path.write_bytes(minimal_file_bytes)
        with pytest.raises(OSError):
            read_furuno_file(path)
