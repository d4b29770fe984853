"""Tests for core.image_io -- source loading, error kinds, placeholder fallback, writers."""

import base64
import logging
from io import BytesIO
from unittest import mock

import numpy as np
import pytest
import requests
from PIL import Image

from core.buffer import PLACEHOLDER
from core.image_io import (
    DecodeFailure,
    ImageLoadError,
    SourceUnavailable,
    UnsupportedFormat,
    decode_image,
    fit_dimensions,
    load_source,
    load_with_fallback,
    save_frame,
    save_gif,
)

from conftest import make_gradient, make_noise


def _png_bytes(buffer, mode="RGBA"):
    out = BytesIO()
    Image.fromarray(buffer.pixels).convert(mode).save(out, format="PNG")
    return out.getvalue()


def _data_url(data, mime="image/png"):
    return f"data:{mime};base64," + base64.b64encode(data).decode("ascii")


class TestFitDimensions:
    @pytest.mark.parametrize("src,expected", [
        ((300, 200), (300, 200)),
        ((600, 600), (600, 600)),
        ((1200, 800), (600, 400)),
        ((800, 1200), (400, 600)),
        ((2000, 2000), (600, 600)),
        ((1800, 1001), (600, 334)),   # 333.67 rounds up
        ((6000, 5), (600, 1)),        # 0.5 rounds half up
        ((6000, 1), (600, 1)),        # never collapses to 0
    ])
    def test_policy(self, src, expected):
        assert fit_dimensions(*src) == expected

    def test_custom_max(self):
        assert fit_dimensions(400, 100, max_dimension=200) == (200, 50)

    def test_rejects_empty(self):
        with pytest.raises(ValueError):
            fit_dimensions(0, 10)


class TestDecode:
    def test_rgba_png(self):
        src = make_noise(9, 7)
        buf = decode_image(_png_bytes(src))
        assert buf == src

    def test_rgb_gets_opaque_alpha(self):
        src = make_gradient(8, 6)
        buf = decode_image(_png_bytes(src, mode="RGB"))
        assert buf.size == (8, 6)
        assert (buf.pixels[..., 3] == 255).all()
        assert np.array_equal(buf.pixels[..., :3], src.pixels[..., :3])

    def test_grayscale_promoted(self):
        gray = np.arange(12, dtype=np.uint8).reshape(3, 4) * 20
        out = BytesIO()
        Image.fromarray(gray).save(out, format="PNG")
        buf = decode_image(out.getvalue())
        assert buf.size == (4, 3)
        assert buf.pixel(3, 2) == (220, 220, 220, 255)

    def test_palette_converted(self):
        src = make_gradient(8, 6)
        out = BytesIO()
        Image.fromarray(src.pixels).convert("RGB").convert("P").save(out, format="PNG")
        buf = decode_image(out.getvalue())
        assert buf.size == (8, 6)
        assert (buf.pixels[..., 3] == 255).all()

    def test_decoded_buffer_is_writable_copy(self):
        buf = decode_image(_png_bytes(make_noise(4, 4)))
        assert buf.pixels.flags.writeable
        assert buf.pixels.flags.c_contiguous

    def test_garbage_is_unsupported(self):
        with pytest.raises(UnsupportedFormat):
            decode_image(b"definitely not an image")

    def test_truncated_is_decode_failure(self):
        data = _png_bytes(make_noise(128, 128))
        with pytest.raises(DecodeFailure):
            decode_image(data[:len(data) // 2])

    def test_errors_share_base(self):
        for cls in (SourceUnavailable, UnsupportedFormat, DecodeFailure):
            assert issubclass(cls, ImageLoadError)


class TestLoadFile:
    def test_png(self, tmp_path):
        src = make_noise(12, 10)
        path = tmp_path / "in.png"
        path.write_bytes(_png_bytes(src))
        assert load_source(path) == src

    def test_missing(self, tmp_path):
        with pytest.raises(SourceUnavailable):
            load_source(tmp_path / "nope.png")

    def test_wrong_extension(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        with pytest.raises(UnsupportedFormat):
            load_source(path)

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "bad.png"
        path.write_bytes(b"\x00\x01\x02garbage")
        with pytest.raises(UnsupportedFormat):
            load_source(path)


class TestLoadDataUrl:
    def test_base64_png(self):
        src = make_gradient(5, 4)
        assert load_source(_data_url(_png_bytes(src))) == src

    def test_non_image_mime(self):
        with pytest.raises(UnsupportedFormat):
            load_source(_data_url(b"hello", mime="text/plain"))

    def test_bad_base64(self):
        with pytest.raises(DecodeFailure):
            load_source("data:image/png;base64,@@@not-base64@@@")

    def test_missing_separator(self):
        with pytest.raises(UnsupportedFormat):
            load_source("data:image/png;base64")


class TestLoadUrl:
    def test_fetch(self):
        src = make_noise(6, 6)
        resp = mock.Mock(content=_png_bytes(src))
        resp.raise_for_status.return_value = None
        with mock.patch("requests.get", return_value=resp) as get:
            buf = load_source("https://example.com/a.png", timeout=3.0)
        get.assert_called_once_with("https://example.com/a.png", timeout=3.0)
        assert buf == src

    def test_network_error(self):
        with mock.patch("requests.get", side_effect=requests.ConnectionError("down")):
            with pytest.raises(SourceUnavailable):
                load_source("http://example.com/a.png")

    def test_http_error(self):
        resp = mock.Mock()
        resp.raise_for_status.side_effect = requests.HTTPError("404")
        with mock.patch("requests.get", return_value=resp):
            with pytest.raises(SourceUnavailable):
                load_source("https://example.com/missing.png")

    def test_html_body_is_unsupported(self):
        resp = mock.Mock(content=b"<html>nope</html>")
        resp.raise_for_status.return_value = None
        with mock.patch("requests.get", return_value=resp):
            with pytest.raises(UnsupportedFormat):
                load_source("https://example.com/page")

    def test_unknown_scheme(self):
        with pytest.raises(UnsupportedFormat):
            load_source("ftp://example.com/a.png")


class TestFallback:
    def test_success_has_no_error(self, tmp_path):
        src = make_noise(4, 4)
        path = tmp_path / "ok.png"
        path.write_bytes(_png_bytes(src))
        buf, err = load_with_fallback(path)
        assert err is None
        assert buf == src

    def test_failure_returns_placeholder(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            buf, err = load_with_fallback(tmp_path / "missing.png")
        assert buf is PLACEHOLDER
        assert isinstance(err, SourceUnavailable)
        assert "placeholder" in caplog.text

    def test_data_url_is_abbreviated_in_log(self, caplog):
        url = _data_url(b"x" * 500, mime="text/plain")
        with caplog.at_level(logging.WARNING):
            buf, err = load_with_fallback(url)
        assert isinstance(err, UnsupportedFormat)
        assert url not in caplog.text


class TestWriters:
    def test_save_frame_round_trip(self, tmp_path):
        src = make_noise(10, 8)
        path = save_frame(src, tmp_path / "sub" / "out.png")
        assert path.exists()
        assert load_source(path) == src

    def test_save_gif(self, tmp_path):
        frames = [make_gradient(8, 8), make_noise(8, 8, seed=1), make_noise(8, 8, seed=2)]
        path = save_gif(frames, tmp_path / "anim.gif", fps=10)
        with Image.open(path) as img:
            assert img.n_frames == 3
            assert img.size == (8, 8)

    def test_save_gif_empty(self, tmp_path):
        with pytest.raises(ValueError):
            save_gif([], tmp_path / "x.gif")
