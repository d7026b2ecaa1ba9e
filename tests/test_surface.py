from __future__ import annotations

import unittest

import torch

from crispcache_core.render.errors import ConfigurationError, ResourceExhaustionError
from crispcache_core.render.raster import RasterImage, Size
from crispcache_core.render.surface import Surface
from crispcache_core.render.transform import Affine2D

RED = (255, 0, 0, 255)
WHITE = (255, 255, 255, 255)


def _solid_image(width: int, height: int, color: tuple[int, int, int, int]) -> RasterImage:
    rgba = torch.empty((height, width, 4), dtype=torch.uint8)
    rgba[:, :] = torch.tensor(color, dtype=torch.uint8)
    return RasterImage(rgba=rgba, width=width, height=height)


class SurfaceTests(unittest.TestCase):
    def test_rejects_non_positive_dimensions(self) -> None:
        with self.assertRaises(ConfigurationError):
            Surface(0, 10)
        with self.assertRaises(ConfigurationError):
            Surface(10, -1)

    def test_rejects_allocation_over_budget(self) -> None:
        with self.assertRaises(ResourceExhaustionError):
            Surface(100, 100, max_pixels=1000)

    def test_size_reports_pixel_dimensions(self) -> None:
        surface = Surface(40, 30)
        self.assertEqual(surface.size, Size(40, 30))
        self.assertEqual(tuple(surface.read_pixels().shape), (30, 40, 4))

    def test_fill_integer_rect(self) -> None:
        surface = Surface(10, 10)
        surface.rectangle(2, 2, 4, 4)
        surface.set_source_rgba(RED)
        surface.fill()
        px = surface.read_pixels()
        self.assertTrue(torch.equal(px[3, 3], torch.tensor(RED, dtype=torch.uint8)))
        self.assertEqual(int(px[0, 0, 3]), 0)
        self.assertEqual(int(px[6, 6, 3]), 0)

    def test_fill_half_pixel_edge_is_antialiased(self) -> None:
        surface = Surface(4, 1)
        surface.rectangle(0.5, 0, 1, 1)
        surface.set_source_rgba(WHITE)
        surface.fill()
        px = surface.read_pixels()
        self.assertIn(int(px[0, 0, 3]), (127, 128))
        self.assertIn(int(px[0, 1, 3]), (127, 128))
        self.assertEqual(int(px[0, 2, 3]), 0)

    def test_fill_clears_path_but_fill_preserve_keeps_it(self) -> None:
        surface = Surface(8, 8)
        surface.rectangle(0, 0, 4, 4)
        surface.set_source_rgba(RED)
        surface.fill_preserve()
        surface.set_source_rgba(WHITE)
        surface.fill()
        px = surface.read_pixels()
        self.assertTrue(torch.equal(px[1, 1], torch.tensor(WHITE, dtype=torch.uint8)))
        surface.set_source_rgba(RED)
        surface.fill()
        self.assertTrue(torch.equal(surface.read_pixels()[1, 1], torch.tensor(WHITE, dtype=torch.uint8)))

    def test_half_pixel_offset_stroke_is_crisp(self) -> None:
        surface = Surface(10, 10)
        surface.set_line_width(1)
        surface.translate(1.5, 1.5)
        surface.rectangle(0, 0, 4, 4)
        surface.set_source_rgba(RED)
        surface.stroke()
        px = surface.read_pixels()
        self.assertTrue(torch.equal(px[1, 1], torch.tensor(RED, dtype=torch.uint8)))
        self.assertTrue(torch.equal(px[3, 5], torch.tensor(RED, dtype=torch.uint8)))
        self.assertEqual(int(px[3, 3, 3]), 0)
        self.assertEqual(int(px[0, 0, 3]), 0)

    def test_transform_save_and_restore_by_value(self) -> None:
        surface = Surface(10, 10)
        surface.scale(2.0, 2.0)
        saved = surface.get_transform()
        surface.translate(1.5, 1.5)
        self.assertFalse(surface.get_transform().is_close(saved))
        surface.set_transform(saved)
        self.assertTrue(surface.get_transform().is_close(Affine2D.scaling(2.0, 2.0)))
        surface.identity_matrix()
        self.assertTrue(surface.get_transform().is_identity())

    def test_draw_raster_image_under_inverse_scale_shrinks_it(self) -> None:
        surface = Surface(4, 4)
        surface.scale(0.5, 0.5)
        surface.draw_raster_image(_solid_image(4, 4, RED))
        px = surface.read_pixels()
        self.assertTrue(torch.equal(px[1, 1], torch.tensor(RED, dtype=torch.uint8)))
        self.assertEqual(int(px[2, 2, 3]), 0)
        self.assertEqual(int(px[0, 3, 3]), 0)

    def test_draw_raster_image_at_offset(self) -> None:
        surface = Surface(6, 6)
        surface.draw_raster_image(_solid_image(2, 2, RED), 3, 1)
        px = surface.read_pixels()
        self.assertTrue(torch.equal(px[1, 3], torch.tensor(RED, dtype=torch.uint8)))
        self.assertTrue(torch.equal(px[2, 4], torch.tensor(RED, dtype=torch.uint8)))
        self.assertEqual(int(px[0, 3, 3]), 0)
        self.assertEqual(int(px[1, 2, 3]), 0)

    def test_draw_raster_image_rotated_does_not_raise(self) -> None:
        surface = Surface(20, 20)
        surface.translate(10, 2)
        surface.rotate(0.5)
        surface.draw_raster_image(_solid_image(8, 8, RED))
        self.assertGreater(int(surface.read_pixels()[:, :, 3].sum()), 0)

    def test_off_surface_geometry_is_a_noop(self) -> None:
        surface = Surface(5, 5)
        surface.set_source_rgba(RED)
        surface.rectangle(50, 50, 10, 10)
        surface.fill()
        surface.draw_raster_image(_solid_image(3, 3, RED), -10, -10)
        self.assertEqual(int(surface.read_pixels().sum()), 0)

    def test_finalize_snapshot_is_independent_of_later_drawing(self) -> None:
        surface = Surface(4, 4)
        image = surface.finalize()
        surface.rectangle(0, 0, 4, 4)
        surface.set_source_rgba(RED)
        surface.fill()
        self.assertEqual(image.size, Size(4, 4))
        self.assertEqual(int(image.rgba.sum()), 0)

    def test_measure_and_draw_text(self) -> None:
        surface = Surface(160, 30)
        surface.select_font_face("DejaVu Sans")
        surface.set_font_size(12)
        width, height = surface.measure_text("Hello")
        self.assertGreater(width, 0.0)
        self.assertGreater(height, 0.0)
        surface.set_source_rgba(WHITE)
        surface.draw_text("Hello", 5, 20)
        self.assertGreater(int(surface.read_pixels()[:, :, 3].sum()), 0)

    def test_text_under_scale_covers_more_pixels(self) -> None:
        plain = Surface(200, 60)
        plain.set_font_size(10)
        plain.set_source_rgba(WHITE)
        plain.draw_text("Hello", 5, 20)

        scaled = Surface(200, 60)
        scaled.scale(2.0, 2.0)
        scaled.set_font_size(10)
        scaled.set_source_rgba(WHITE)
        scaled.draw_text("Hello", 5, 20)

        plain_ink = int((plain.read_pixels()[:, :, 3] > 0).sum())
        scaled_ink = int((scaled.read_pixels()[:, :, 3] > 0).sum())
        self.assertGreater(scaled_ink, plain_ink)


if __name__ == "__main__":
    unittest.main()
