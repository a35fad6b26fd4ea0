import random

import pytest
from PIL import Image

from spritec.errors import DuplicateIdentifier, PaletteTooLarge, SpriteIOError, UnsupportedColorType
from spritec.tree import Leaf, Namespace, build_tree, count_sprites, flatten
from spritec.watchlist import render_watch_list

from tests.sprite_utils import SAMPLE_BYTES, SPRITE_TREE, TWO_COLORS, gray_palette


def shape(node):
    """(key, children) skeleton of a tree, for comparisons."""
    if isinstance(node, Leaf):
        return node.identifier
    return (node.name, [shape(c) for c in node.children])


def test_scenario_fonts_and_tiles(tmp_path, make_png):
    root = tmp_path / "sprites"
    make_png(root / "fonts" / "letters.png", width=320, height=32, colors=TWO_COLORS)
    make_png(root / "tiles" / "tiles.png", width=32, height=32, indices=[i % 4 for i in range(32 * 32)])

    tree = build_tree(root)

    assert tree.name == ""
    assert [c.name for c in tree.children] == ["fonts", "tiles"]
    letters = tree.child("fonts").child("letters.png")
    tiles = tree.child("tiles").child("tiles.png")
    assert letters.identifier == "LETTERS"
    assert int(letters.sprite.flags) == 0
    assert len(letters.sprite.data) == 32 * 40
    assert tiles.identifier == "TILES"
    assert int(tiles.sprite.flags) == 1
    assert len(tiles.sprite.data) == 32 * 8
    assert tiles.sprite.data[:8] == bytes([0x1B] * 8)
    assert render_watch_list(tree) == [
        root / "fonts" / "letters.png",
        root / "tiles" / "tiles.png",
    ]


def test_nested_tree_is_sorted(sprite_dir):
    tree = build_tree(sprite_dir)
    assert shape(tree) == (
        "",
        [
            (
                "characters",
                [
                    ("bosses", ["BEHEMOTH", "DRAGON"]),
                    ("npcs", ["BLACKSMITH", "VENDOR"]),
                    "PLAYER",
                ],
            ),
            ("tiles", ["DESERT", "FOREST", "TOWN"]),
        ],
    )
    assert count_sprites(tree) == 8
    assert all(leaf.sprite.data == SAMPLE_BYTES for leaf in tree.leaves())


def test_order_does_not_depend_on_creation_order(tmp_path, make_png):
    names = ["zeta", "Alpha", "mid_1", "mid-0", "beta"]
    trees = []
    for attempt in range(3):
        root = tmp_path / f"run{attempt}"
        shuffled = names[:]
        random.Random(attempt).shuffle(shuffled)
        for name in shuffled:
            make_png(root / "group" / f"{name}.png")
        trees.append(build_tree(root))
    keys = [[leaf.key for leaf in t.leaves()] for t in trees]
    assert keys[0] == ["alpha", "beta", "mid_0", "mid_1", "zeta"]
    assert keys[0] == keys[1] == keys[2]


def test_parallel_and_serial_builds_match(sprite_dir):
    assert build_tree(sprite_dir, jobs=1) == build_tree(sprite_dir, jobs=4)


def test_case_insensitive_duplicate(tmp_path, make_png):
    root = tmp_path / "sprites"
    make_png(root / "Fonts" / "a.png")
    make_png(root / "fonts" / "b.png")
    with pytest.raises(DuplicateIdentifier) as exc:
        build_tree(root)
    assert exc.value.name == "fonts"
    assert {p.name for p in exc.value.paths} == {"Fonts", "fonts"}
    assert exc.value.path == root


def test_duplicate_after_sanitizing(tmp_path, make_png):
    root = tmp_path / "sprites"
    make_png(root / "big-tree.png")
    make_png(root / "big tree.png")
    with pytest.raises(DuplicateIdentifier):
        build_tree(root)


def test_directory_and_image_with_same_key(tmp_path, make_png):
    root = tmp_path / "sprites"
    make_png(root / "tiles.png")
    make_png(root / "tiles" / "grass.png")
    with pytest.raises(DuplicateIdentifier):
        build_tree(root)


def test_skips_hidden_and_other_files(tmp_path, make_png):
    root = tmp_path / "sprites"
    make_png(root / "hero.png")
    make_png(root / ".cache" / "hero.png")
    make_png(root / ".hidden.png")
    (root / "notes.txt").write_text("not a sprite")
    (root / "hero.aseprite").write_bytes(b"\x00")
    tree = build_tree(root)
    assert shape(tree) == ("", ["HERO"])


def test_image_suffix_is_case_insensitive(tmp_path, make_png):
    root = tmp_path / "sprites"
    make_png(root / "HERO.PNG")
    assert shape(build_tree(root)) == ("", ["HERO"])


def test_empty_directories_are_dropped(tmp_path, make_png):
    root = tmp_path / "sprites"
    (root / "empty" / "deeper").mkdir(parents=True)
    (root / "docs").mkdir()
    (root / "docs" / "readme.md").write_text("hi")
    make_png(root / "only" / "nested" / "ship.png")
    tree = build_tree(root)
    assert shape(tree) == ("", [("only", [("nested", ["SHIP"])])])


def test_empty_root(tmp_path):
    root = tmp_path / "sprites"
    root.mkdir()
    tree = build_tree(root)
    assert tree.children == ()
    assert render_watch_list(tree) == []


def test_missing_root(tmp_path):
    with pytest.raises(SpriteIOError):
        build_tree(tmp_path / "nope")


def test_large_palette_fails_whole_build(tmp_path, make_png):
    root = tmp_path / "sprites"
    make_png(root / "fine" / "ok.png")
    bad = make_png(root / "fine" / "rainbow.png", width=5, height=1, indices=[0, 1, 2, 3, 4], colors=gray_palette(5))
    with pytest.raises(PaletteTooLarge) as exc:
        build_tree(root, jobs=2)
    assert exc.value.size == 5
    assert exc.value.path == bad


def test_truecolor_image_fails_build(tmp_path, make_png):
    root = tmp_path / "sprites"
    make_png(root / "ok.png")
    Image.new("RGBA", (4, 4)).save(root / "photo.png")
    with pytest.raises(UnsupportedColorType):
        build_tree(root)


def test_punctuation_directory_name(tmp_path, make_png):
    root = tmp_path / "sprites"
    make_png(root / "ok.png")
    make_png(root / "-" / "x.png")
    tree = build_tree(root)
    assert [c.key for c in tree.children] == ["_", "ok"]


def test_child_lookup(sprite_dir):
    tree = build_tree(sprite_dir)
    assert isinstance(tree.child("characters"), Namespace)
    with pytest.raises(KeyError):
        tree.child("missing")


def test_flatten(sprite_dir):
    flat = flatten(build_tree(sprite_dir))
    assert shape(flat) == (
        "",
        ["BEHEMOTH", "BLACKSMITH", "DESERT", "DRAGON", "FOREST", "PLAYER", "TOWN", "VENDOR"],
    )


def test_flatten_collision(tmp_path, make_png):
    root = tmp_path / "sprites"
    make_png(root / "a" / "hero.png")
    make_png(root / "b" / "hero.png")
    tree = build_tree(root)
    with pytest.raises(DuplicateIdentifier) as exc:
        flatten(tree)
    assert exc.value.name == "hero"


def test_tree_is_immutable(sprite_dir):
    tree = build_tree(sprite_dir)
    with pytest.raises(AttributeError):
        tree.name = "other"
    assert isinstance(tree.children, tuple)


def test_every_source_is_listed(sprite_dir):
    tree = build_tree(sprite_dir)
    listed = {p.relative_to(sprite_dir).as_posix() for p in render_watch_list(tree)}
    assert listed == set(SPRITE_TREE)
