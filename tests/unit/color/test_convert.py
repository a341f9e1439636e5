"""Unit tests for RGB / HSV / hex conversion."""

import pytest


def _hue_distance(a, b):
    d = abs(a - b) % 360
    return min(d, 360 - d)


class TestParseHex:
    """Test parse_hex accepted and rejected inputs."""

    def test_parses_with_and_without_hash(self):
        from color_sampler.color.convert import RGB, parse_hex

        assert parse_hex("8B4513") == RGB(139, 69, 19)
        assert parse_hex("#8b4513") == RGB(139, 69, 19)

    def test_surrounding_whitespace_is_ignored(self):
        from color_sampler.color.convert import parse_hex

        assert parse_hex("  #00ff00 ") == (0, 255, 0)

    @pytest.mark.parametrize("text", ["", "#", "12345", "1234567", "#GGGGGG", "fff", "#12 345"])
    def test_malformed_text_raises_invalid_format(self, text):
        from color_sampler.color.convert import parse_hex
        from color_sampler.errors import InvalidFormat

        with pytest.raises(InvalidFormat) as exc_info:
            parse_hex(text)
        assert exc_info.value.text == text

    def test_non_string_raises_invalid_format(self):
        from color_sampler.color.convert import parse_hex
        from color_sampler.errors import InvalidFormat

        with pytest.raises(InvalidFormat):
            parse_hex(0x8B4513)

    def test_invalid_format_is_a_value_error(self):
        from color_sampler.color.convert import parse_hex

        with pytest.raises(ValueError):
            parse_hex("nope")

    def test_is_valid_hex(self):
        from color_sampler.color.convert import is_valid_hex

        assert is_valid_hex("#ABCDEF")
        assert not is_valid_hex("#ABCDE")
        assert not is_valid_hex(None)


class TestToHex:
    """Test canonical hex output."""

    def test_uppercase_without_hash(self):
        from color_sampler.color.convert import RGB, to_hex

        assert to_hex(RGB(139, 69, 19)) == "8B4513"
        assert to_hex((0, 0, 0)) == "000000"
        assert to_hex((255, 255, 255)) == "FFFFFF"

    def test_hsv_input_is_converted(self):
        from color_sampler.color.convert import HSV, to_hex

        assert to_hex(HSV(0, 100, 100)) == "FF0000"
        assert to_hex(HSV(120, 100, 100)) == "00FF00"
        assert to_hex(HSV(240, 100, 100)) == "0000FF"

    def test_out_of_range_channels_are_clamped(self):
        from color_sampler.color.convert import to_hex

        assert to_hex((300, -5, 127.5)) == "FF0080"

    def test_normalize_hex(self):
        from color_sampler.color.convert import normalize_hex

        assert normalize_hex("#ab12cd") == "AB12CD"


class TestRgbToHsv:
    """Test RGB to HSV conversion."""

    def test_primary_colors(self):
        from color_sampler.color.convert import rgb_to_hsv

        assert rgb_to_hsv((255, 0, 0)) == pytest.approx((0.0, 100.0, 100.0), abs=1e-3)
        assert rgb_to_hsv((0, 255, 0)) == pytest.approx((120.0, 100.0, 100.0), abs=1e-3)
        assert rgb_to_hsv((0, 0, 255)) == pytest.approx((240.0, 100.0, 100.0), abs=1e-3)

    def test_saddle_brown(self):
        from color_sampler.color.convert import rgb_to_hsv

        h, s, v = rgb_to_hsv((139, 69, 19))
        assert h == pytest.approx(25.0, abs=0.01)
        assert s == pytest.approx(86.33, abs=0.01)
        assert v == pytest.approx(54.51, abs=0.01)

    def test_grey_reports_hue_zero(self):
        from color_sampler.color.convert import rgb_to_hsv

        h, s, v = rgb_to_hsv((128, 128, 128))
        assert h == 0.0
        assert s == 0.0
        assert v == pytest.approx(50.2, abs=0.01)

    def test_black_reports_zero_saturation(self):
        from color_sampler.color.convert import rgb_to_hsv

        assert rgb_to_hsv((0, 0, 0)) == (0.0, 0.0, 0.0)

    def test_hue_stays_below_360(self):
        from color_sampler.color.convert import rgb_to_hsv

        h, _, _ = rgb_to_hsv((255, 0, 1))
        assert 0.0 <= h < 360.0


class TestHsvToRgb:
    """Test HSV to RGB conversion."""

    def test_hue_360_wraps_to_red(self):
        from color_sampler.color.convert import hsv_to_rgb

        assert hsv_to_rgb((360, 100, 100)) == (255, 0, 0)

    def test_zero_value_is_black_for_any_hue(self):
        from color_sampler.color.convert import hsv_to_rgb

        assert hsv_to_rgb((200, 70, 0)) == (0, 0, 0)

    def test_saturation_and_value_are_clamped(self):
        from color_sampler.color.convert import hsv_to_rgb

        assert hsv_to_rgb((0, 150, 200)) == (255, 0, 0)
        assert hsv_to_rgb((0, -10, 100)) == (255, 255, 255)

    def test_non_finite_components_are_zeroed(self):
        from color_sampler.color.convert import clamp_hsv

        assert clamp_hsv((float("nan"), float("inf"), 50)) == (0.0, 0.0, 50.0)


class TestRoundTrips:
    """Conversions stay within one step of the source value."""

    @pytest.mark.parametrize("rgb", [(139, 69, 19), (12, 200, 99), (250, 250, 5), (1, 2, 3), (77, 77, 78)])
    def test_rgb_through_hsv(self, rgb):
        from color_sampler.color.convert import hsv_to_rgb, rgb_to_hsv

        back = hsv_to_rgb(rgb_to_hsv(rgb))
        assert all(abs(a - b) <= 1 for a, b in zip(back, rgb))

    def test_hsv_through_rgb(self):
        from color_sampler.color.convert import HSV, hsv_to_rgb, rgb_to_hsv

        source = HSV(210, 65, 80)
        h, s, v = rgb_to_hsv(hsv_to_rgb(source))
        assert h == pytest.approx(210, abs=1)
        assert s == pytest.approx(65, abs=1)
        assert v == pytest.approx(80, abs=1)

    def test_rgb_grid_through_hsv(self):
        from color_sampler.color.convert import hsv_to_rgb, rgb_to_hsv

        levels = range(0, 256, 15)
        misses = [
            (r, g, b)
            for r in levels
            for g in levels
            for b in levels
            if any(abs(x - y) > 1 for x, y in zip(hsv_to_rgb(rgb_to_hsv((r, g, b))), (r, g, b)))
        ]
        assert misses == []

    def test_hsv_grid_through_rgb_above_half_saturation_and_value(self):
        from color_sampler.color.convert import hsv_to_rgb, rgb_to_hsv

        misses = []
        for h in range(0, 360, 5):
            for s in range(50, 101, 10):
                for v in range(50, 101, 10):
                    h2, s2, v2 = rgb_to_hsv(hsv_to_rgb((h, s, v)))
                    if _hue_distance(h, h2) > 1 or abs(s - s2) > 1 or abs(v - v2) > 1:
                        misses.append(((h, s, v), (h2, s2, v2)))
        assert misses == []

    def test_low_chroma_hue_error_is_bounded_by_channel_spread(self):
        from color_sampler.color.convert import hsv_to_rgb, rgb_to_hsv

        misses = []
        for h in range(0, 360, 7):
            for s in range(20, 50, 10):
                for v in range(20, 101, 20):
                    chroma = 255 * (s / 100) * (v / 100)
                    h2, _, _ = rgb_to_hsv(hsv_to_rgb((h, s, v)))
                    if _hue_distance(h, h2) > 60 / (chroma - 1) + 1e-3:
                        misses.append(((h, s, v), h2))
        assert misses == []

    def test_hex_round_trip_is_exact(self):
        from color_sampler.color.convert import parse_hex, to_hex

        for rgb in [(0, 0, 0), (1, 128, 254), (139, 69, 19)]:
            assert parse_hex(to_hex(rgb)) == rgb


class TestCoerceRgb:
    """Test coerce_rgb input forms."""

    def test_accepts_hex_hsv_and_triples(self):
        from color_sampler.color.convert import HSV, coerce_rgb

        assert coerce_rgb("#FF0000") == (255, 0, 0)
        assert coerce_rgb(HSV(0, 100, 100)) == (255, 0, 0)
        assert coerce_rgb([254.6, 0, 0.4]) == (255, 0, 0)
