import unittest

from tmxrender.objects import Image, Tileset
from tmxrender.resolver import resolve_gid, tile_source_rect, tileset_columns


class ResolveGidTest(unittest.TestCase):
    def setUp(self):
        self.tilesets = [
            Tileset(firstgid=1, name="terrain", tilecount=49),
            Tileset(firstgid=50, name="items", tilecount=10),
        ]

    def test_first_tileset(self):
        self.assertEqual(resolve_gid(1, self.tilesets), (0, 0))
        self.assertEqual(resolve_gid(49, self.tilesets), (0, 48))

    def test_second_tileset(self):
        self.assertEqual(resolve_gid(50, self.tilesets), (1, 0))
        self.assertEqual(resolve_gid(55, self.tilesets), (1, 5))

    def test_last_tileset_is_open_ended(self):
        self.assertEqual(resolve_gid(500, self.tilesets), (1, 450))

    def test_below_first_tileset(self):
        tilesets = [Tileset(firstgid=10, tilecount=4)]
        self.assertIsNone(resolve_gid(3, tilesets))

    def test_no_tilesets(self):
        self.assertIsNone(resolve_gid(1, []))


class SourceRectTest(unittest.TestCase):
    def test_declared_columns(self):
        tileset = Tileset(firstgid=1, tilewidth=32, tileheight=32, columns=2)
        self.assertEqual(tile_source_rect(0, tileset), (0, 0, 32, 32))
        self.assertEqual(tile_source_rect(1, tileset), (32, 0, 32, 32))
        self.assertEqual(tile_source_rect(3, tileset), (32, 32, 32, 32))

    def test_margin_and_spacing(self):
        tileset = Tileset(
            firstgid=1, tilewidth=16, tileheight=16, columns=4, margin=1, spacing=2
        )
        self.assertEqual(tile_source_rect(0, tileset), (1, 1, 16, 16))
        self.assertEqual(tile_source_rect(5, tileset), (19, 19, 16, 16))

    def test_columns_derived_from_image(self):
        tileset = Tileset(
            firstgid=1,
            tilewidth=16,
            tileheight=16,
            margin=1,
            spacing=2,
            image=Image("sheet.png", width=70, height=70),
        )
        # (70 - 2 + 2) // 18
        self.assertEqual(tileset_columns(tileset), 3)
        self.assertEqual(tile_source_rect(4, tileset), (19, 19, 16, 16))

    def test_no_columns(self):
        tileset = Tileset(firstgid=1, tilewidth=8, tileheight=12)
        self.assertEqual(tileset_columns(tileset), 0)
        self.assertEqual(tile_source_rect(7, tileset), (0, 0, 8, 12))
