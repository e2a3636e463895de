import numpy as np
import pytest

from chessbot_vision.letterbox import PAD_COLOR, compute_letterbox, letterbox_image


def test_wide_image_is_padded_vertically():
    t = compute_letterbox(1280, 720, 640, 640)

    assert t.scale == pytest.approx(0.5)
    assert (t.new_width, t.new_height) == (640, 360)
    assert (t.pad_x, t.pad_y) == (0, 140)
    assert t.trailing_pad_y == 140


def test_odd_padding_goes_to_trailing_edge():
    # 51 * 0.64 = 32.64 -> 33 rows, 31 rows of padding
    t = compute_letterbox(100, 51, 64, 64)

    assert t.new_height == 33
    assert t.pad_y == 15
    assert t.trailing_pad_y == 16
    assert t.pad_x == 0 and t.trailing_pad_x == 0


def test_never_exceeds_target():
    t = compute_letterbox(300, 1200, 640, 480)

    assert t.scale == pytest.approx(min(640 / 300, 480 / 1200))
    assert t.new_width <= 640 and t.new_height <= 480
    assert t.new_width + t.pad_x + t.trailing_pad_x == 640
    assert t.new_height + t.pad_y + t.trailing_pad_y == 480


@pytest.mark.parametrize("src_w,src_h,dst_w,dst_h", [
    (1280, 720, 640, 640),
    (100, 51, 64, 64),
    (333, 777, 416, 256),
    (640, 640, 640, 640),
    (50, 40, 640, 640),
])
def test_forward_then_inverse_returns_point(src_w, src_h, dst_w, dst_h):
    t = compute_letterbox(src_w, src_h, dst_w, dst_h)

    for x, y in [(0, 0), (src_w, src_h), (src_w / 3.0, src_h / 7.0), (src_w - 1, 1)]:
        mx, my = t.to_model(x, y)
        bx, by = t.to_image(mx, my)
        assert abs(bx - x) <= 1
        assert abs(by - y) <= 1


def test_zero_size_rejected():
    with pytest.raises(ValueError):
        compute_letterbox(0, 10, 640, 640)
    with pytest.raises(ValueError):
        compute_letterbox(10, 10, 640, 0)


def test_letterbox_image_pads_with_fill_colour(blank_image):
    image = blank_image(100, 51, value=255)
    t = compute_letterbox(100, 51, 64, 64)

    out = letterbox_image(image, t)

    assert out.shape == (64, 64, 3)
    assert (out[0] == PAD_COLOR).all()
    assert (out[14] == PAD_COLOR).all()
    assert (out[15] == 255).all()
    assert (out[47] == 255).all()
    assert (out[48] == PAD_COLOR).all()
    assert (out[63] == PAD_COLOR).all()
    # input untouched
    assert (image == 255).all()
