import pytest

from utils.coordinates import (
    clamp_zoom,
    document_from_screen,
    document_point_from_screen,
    screen_from_document,
    screen_point_from_document,
    zoom_in,
    zoom_out,
)


class TestMapping:
    @pytest.mark.parametrize("scale", [0.4, 1.0, 1.2, 2.6, 7.3])
    @pytest.mark.parametrize("point", [(0.0, 0.0), (10.0, 20.0), (123.456, 789.01), (-5.5, 3.25)])
    def test_round_trip(self, scale, point):
        screen = screen_point_from_document(point, scale)
        back = document_point_from_screen(screen, scale)
        assert back == pytest.approx(point)

    def test_screen_from_document_multiplies(self):
        assert screen_from_document(50.0, 2.0) == 100.0

    def test_document_from_screen_divides(self):
        assert document_from_screen(100.0, 2.0) == 50.0
        assert document_from_screen(30.0, 1.5) == pytest.approx(20.0)

    @pytest.mark.parametrize("scale", [0.0, -1.0])
    def test_non_positive_scale_rejected(self, scale):
        with pytest.raises(ValueError):
            document_from_screen(1.0, scale)
        with pytest.raises(ValueError):
            screen_from_document(1.0, scale)


class TestZoomPolicy:
    def test_zoom_in_steps_by_point_two(self):
        assert zoom_in(1.0) == 1.2
        assert zoom_in(1.2) == 1.4

    def test_zoom_in_has_no_ceiling(self):
        scale = 1.0
        for _ in range(50):
            scale = zoom_in(scale)
        assert scale == pytest.approx(11.0)

    def test_zoom_out_floors_at_minimum(self):
        assert zoom_out(1.0) == 0.8
        assert zoom_out(0.6) == 0.4
        assert zoom_out(0.4) == 0.4
        assert zoom_out(0.5) == 0.4

    def test_clamp_zoom(self):
        assert clamp_zoom(0.1) == 0.4
        assert clamp_zoom(3.0) == 3.0
