import copy
import os
import unittest

from tmxrender import builder
from tmxrender.decoder import empty_flags
from tmxrender.objects import Polyline, Rectangle
from tmxrender.renderdata import (
    MapRenderData,
    compile_map,
    load_render_data,
    resolve_image_path,
)

RESOURCES = os.path.join(os.path.dirname(__file__), "resources")


def resource(name):
    return os.path.join(RESOURCES, name)


def small_map(tilesets, data):
    return (
        '<map width="2" height="2" tilewidth="16" tileheight="16">'
        "{0}"
        '<layer name="l" width="2" height="2"><data encoding="csv">{1}</data></layer>'
        "</map>"
    ).format(tilesets, data)


class CompileMapTest(unittest.TestCase):
    def setUp(self):
        self.tmxmap = builder.load_tmxmap(resource("test_csv.tmx"))
        self.render_data = compile_map(self.tmxmap)

    def test_map_info(self):
        rd = self.render_data
        self.assertEqual((rd.map_width, rd.map_height), (10, 10))
        self.assertEqual((rd.tile_width, rd.tile_height), (32, 32))
        self.assertEqual((rd.pixel_width, rd.pixel_height), (320, 320))
        self.assertEqual(rd.background_color, (0x33, 0x66, 0x99, 255))

    def test_tileset_info(self):
        info = self.render_data.tilesets[0]
        self.assertEqual(info.name, "test_tileset")
        self.assertEqual(info.image_path, "tiles.png")
        self.assertEqual((info.image_width, info.image_height), (64, 64))
        self.assertEqual(info.firstgid, 1)
        self.assertEqual(info.columns, 2)
        self.assertEqual(info.tile_count, 4)
        self.assertEqual(len(info.animations), 1)
        self.assertEqual(info.animations[0].base_tile_id, 1)
        self.assertEqual(info.animations[0].total_duration, 250)

    def test_layer(self):
        layer = self.render_data.get_layer_by_name("ground")
        self.assertTrue(layer.visible)
        self.assertEqual(layer.opacity, 1.0)
        self.assertEqual(len(layer.tiles), 100)
        self.assertEqual(layer.bounds(), (0, 0, 320, 320))

    def test_tiles_are_row_major(self):
        tiles = self.render_data.layers[0].tiles
        self.assertEqual(tiles[0].dest_rect, (0, 0, 32, 32))
        self.assertEqual(tiles[1].dest_rect, (32, 0, 32, 32))
        self.assertEqual(tiles[10].dest_rect, (0, 32, 32, 32))
        self.assertEqual(tiles[99].dest_rect, (288, 288, 32, 32))

    def test_tile_resolution(self):
        tiles = self.render_data.layers[0].tiles
        # gid 1
        self.assertEqual(tiles[0].tile_id, 0)
        self.assertEqual(tiles[0].src_rect, (0, 0, 32, 32))
        self.assertFalse(tiles[0].is_animated)
        self.assertIsNone(tiles[0].animation_index)
        # gid 2 is the animated tile
        self.assertEqual(tiles[1].tile_id, 1)
        self.assertEqual(tiles[1].src_rect, (32, 0, 32, 32))
        self.assertTrue(tiles[1].is_animated)
        self.assertEqual(tiles[1].animation_index, 0)
        # gid 4
        self.assertEqual(tiles[9].tile_id, 3)
        self.assertEqual(tiles[9].src_rect, (32, 32, 32, 32))
        self.assertEqual(tiles[9].tileset_index, 0)
        self.assertEqual(tiles[9].flags, empty_flags)

    def test_object_group(self):
        group = self.render_data.object_groups[0]
        self.assertEqual(group.name, "things")
        self.assertEqual(group.opacity, 0.5)
        self.assertEqual([o.name for o in group.objects], ["box", "ring", "door", "path"])

        box = group.objects[0]
        self.assertEqual(box.shape, Rectangle(32.0, 16.0))
        self.assertIsNone(box.tileset_index)
        self.assertIsNone(box.src_rect)

        door = group.objects[2]
        self.assertEqual(door.gid, 2)
        self.assertEqual(door.tileset_index, 0)
        self.assertEqual(door.src_rect, (32, 0, 32, 32))
        self.assertEqual((door.width, door.height), (32.0, 32.0))

        path = group.objects[3]
        self.assertIsInstance(path.shape, Polyline)
        self.assertEqual(len(path.points), 3)
        self.assertEqual(path.rotation, 45.0)

    def test_compile_is_repeatable(self):
        before = copy.deepcopy(self.tmxmap)
        again = compile_map(self.tmxmap)
        self.assertEqual(again, self.render_data)
        self.assertEqual(self.tmxmap, before)

    def test_from_map(self):
        self.assertEqual(MapRenderData.from_map(self.tmxmap), self.render_data)

    def test_render_data_is_immutable(self):
        with self.assertRaises(AttributeError):
            self.render_data.pixel_width = 0

    def test_get_layer_by_name_missing(self):
        with self.assertRaises(ValueError):
            self.render_data.get_layer_by_name("nothing")


class InfiniteMapTest(unittest.TestCase):
    def setUp(self):
        self.render_data = compile_map(builder.load_tmxmap(resource("test_infinite.tmx")))

    def test_chunks(self):
        tiles = self.render_data.layers[0].tiles
        self.assertEqual(len(tiles), 5)
        self.assertEqual(
            [(t.dest_x, t.dest_y) for t in tiles],
            [(-512, 0), (-480, 32), (0, -64), (32, -64), (32, -32)],
        )
        self.assertEqual([t.tile_id for t in tiles], [0, 1, 2, 2, 3])

    def test_bounds(self):
        self.assertEqual(self.render_data.layers[0].bounds(), (-512, -64, 576, 128))


class ExternalTilesetTest(unittest.TestCase):
    def test_external(self):
        rd = load_render_data(resource("test_external.tmx"))
        external, second = rd.tilesets
        self.assertEqual(
            external.image_path, os.path.join(RESOURCES, "tilesets", "external.png")
        )
        self.assertEqual(second.image_path, os.path.join(RESOURCES, "second.png"))
        self.assertEqual(second.firstgid, 50)

        animation = external.animations[0]
        self.assertEqual(animation.base_tile_id, 5)
        self.assertEqual([(f.src_x, f.src_y) for f in animation.frames], [(80, 0), (96, 0)])

        tiles = rd.layers[0].tiles
        self.assertEqual([t.tile_id for t in tiles], [0, 1, 2, 3])
        self.assertEqual([t.tileset_index for t in tiles], [0, 0, 0, 0])
        self.assertEqual(tiles[3].src_rect, (48, 0, 16, 16))

    def test_asset_base_path(self):
        tmxmap = builder.load_tmxmap(resource("test_external.tmx"))
        rd = compile_map(tmxmap, "assets")
        self.assertEqual(rd.tilesets[1].image_path, os.path.join("assets", "second.png"))


class ResolveImagePathTest(unittest.TestCase):
    def test_join(self):
        self.assertEqual(
            resolve_image_path("tiles.png", "assets"), os.path.join("assets", "tiles.png")
        )

    def test_no_base_path(self):
        self.assertEqual(resolve_image_path("tiles.png"), "tiles.png")
        self.assertEqual(resolve_image_path("tiles.png", ""), "tiles.png")

    def test_empty_source(self):
        self.assertEqual(resolve_image_path("", "assets"), "")

    def test_absolute_source(self):
        path = os.path.abspath("tiles.png")
        self.assertEqual(resolve_image_path(path, "assets"), path)


class GidEdgeCaseTest(unittest.TestCase):
    tileset = (
        '<tileset firstgid="5" name="t" tilewidth="16" tileheight="16" '
        'tilecount="4" columns="2"/>'
    )

    def test_unresolved_gids_are_skipped(self):
        tmxmap = builder.parse_tmxmap(small_map(self.tileset, "0,3,5,6"))
        tiles = compile_map(tmxmap).layers[0].tiles
        self.assertEqual([t.tile_id for t in tiles], [0, 1])
        self.assertEqual([t.dest_rect[:2] for t in tiles], [(0, 16), (16, 16)])

    def test_no_tilesets(self):
        tmxmap = builder.parse_tmxmap(small_map("", "1,2,3,4"))
        rd = compile_map(tmxmap)
        self.assertEqual(rd.tilesets, ())
        self.assertEqual(rd.layers[0].tiles, ())
        self.assertIsNone(rd.layers[0].bounds())

    def test_flipped_gid_keeps_flags(self):
        # 0x80000006 and 0x60000005
        tmxmap = builder.parse_tmxmap(small_map(self.tileset, "2147483654,1610612741,0,0"))
        flipped, rotated = compile_map(tmxmap).layers[0].tiles
        self.assertEqual(flipped.tile_id, 1)
        self.assertTrue(flipped.flags.flipped_horizontally)
        self.assertFalse(flipped.flags.flipped_vertically)
        self.assertEqual(rotated.tile_id, 0)
        self.assertTrue(rotated.flags.flipped_vertically)
        self.assertTrue(rotated.flags.flipped_diagonally)

    def test_layer_opacity_is_carried(self):
        text = small_map(self.tileset, "5,0,0,0").replace(
            '<layer name="l"', '<layer name="l" opacity="0.5" visible="0"'
        )
        layer = compile_map(builder.parse_tmxmap(text)).layers[0]
        self.assertFalse(layer.visible)
        self.assertEqual(layer.opacity, 0.5)
        self.assertEqual(layer.tiles[0].opacity, 0.5)

    def compile_objects(self, *gids):
        objects = "".join(
            '<object id="{0}" x="8" y="8" width="16" height="16" gid="{1}"/>'.format(i, gid)
            for i, gid in enumerate(gids, 1)
        )
        text = small_map(self.tileset, "0,0,0,0").replace(
            "</map>", "<objectgroup>{0}</objectgroup></map>".format(objects)
        )
        return compile_map(builder.parse_tmxmap(text)).object_groups[0].objects

    def test_unresolved_tile_object(self):
        (obj,) = self.compile_objects(3)
        self.assertEqual(obj.gid, 3)
        self.assertIsNone(obj.tileset_index)
        self.assertIsNone(obj.src_rect)
        self.assertEqual(obj.flags, empty_flags)
        self.assertEqual((obj.x, obj.y, obj.width), (8.0, 8.0, 16.0))

    def test_flipped_tile_object(self):
        # 0x80000006
        (obj,) = self.compile_objects(2147483654)
        self.assertEqual(obj.gid, 6)
        self.assertTrue(obj.flags.flipped_horizontally)
        self.assertFalse(obj.flags.flipped_vertically)
        self.assertFalse(obj.flags.flipped_diagonally)
        self.assertEqual(obj.tileset_index, 0)
        self.assertEqual(obj.src_rect, (16, 0, 16, 16))
