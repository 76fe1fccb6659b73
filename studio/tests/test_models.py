from __future__ import annotations

import pytest

from studio.src.pixel_pipeline.colorspace import rgb_to_hex, rgb_to_hsl
from studio.src.pixel_pipeline.models import SampledColor, ScaleFactor


def test_sampled_color_derives_hex_and_hsl_from_rgb():
    color = SampledColor.from_rgb(12.4, 300, -2, position=(0.25, 0.5))

    assert color.rgb == (12, 255, 0)
    assert color.hex == rgb_to_hex(*color.rgb) == "#0CFF00"
    assert color.hsl == rgb_to_hsl(*color.rgb)
    assert color.position == (0.25, 0.5)
    assert color.timestamp > 0


def test_sampled_color_is_immutable():
    color = SampledColor(rgb=(1, 2, 3))
    with pytest.raises(AttributeError):
        color.hex = "#000000"


def test_sampled_color_strings():
    color = SampledColor(rgb=(255, 0, 0))
    assert color.to_dict() == {
        "hex": "#FF0000",
        "rgb": "rgb(255, 0, 0)",
        "hsl": "hsl(0, 100%, 50%)",
    }


def test_scale_factor_between_spaces():
    scale = ScaleFactor.between((400, 300), (800, 900))

    assert (scale.x, scale.y) == (2.0, 3.0)
    assert scale.apply(10, 10) == (20.0, 30.0)
    assert scale.inverse().apply(20, 30) == pytest.approx((10.0, 10.0))
    assert scale.scale_length(4) == 10.0
    assert ScaleFactor().is_identity


def test_scale_factor_rejects_non_positive():
    with pytest.raises(ValueError):
        ScaleFactor(0, 1)
    with pytest.raises(ValueError):
        ScaleFactor.between((0, 10), (10, 10))
