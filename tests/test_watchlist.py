from pathlib import Path, PureWindowsPath

from spritec.tree import build_tree, flatten
from spritec.watchlist import format_cargo, format_depfile, format_plain, render_watch_list


def test_watch_list_follows_emission_order(sprite_dir):
    tree = build_tree(sprite_dir)
    rel = [p.relative_to(sprite_dir).as_posix() for p in render_watch_list(tree)]
    assert rel == [
        "characters/bosses/behemoth.png",
        "characters/bosses/dragon.png",
        "characters/npcs/blacksmith.png",
        "characters/npcs/vendor.png",
        "characters/player.png",
        "tiles/desert.png",
        "tiles/forest.png",
        "tiles/town.png",
    ]


def test_flattened_tree_lists_the_same_images(sprite_dir):
    tree = build_tree(sprite_dir)
    assert sorted(render_watch_list(flatten(tree))) == sorted(render_watch_list(tree))


def test_format_plain():
    paths = [Path("sprites/a.png"), Path("sprites/b.png")]
    assert format_plain(paths) == "sprites/a.png\nsprites/b.png\n"
    assert format_plain([]) == ""


def test_format_cargo():
    paths = [Path("sprites/fonts/letters.png"), PureWindowsPath("sprites\\tiles\\tiles.png")]
    assert format_cargo(paths) == (
        "cargo:rerun-if-changed=sprites/fonts/letters.png\n"
        "cargo:rerun-if-changed=sprites/tiles/tiles.png\n"
    )


def test_format_depfile():
    paths = [Path("art/hero.png"), Path("art/big tree.png"), Path("art/#1.png")]
    assert format_depfile("src/sprites.rs", paths) == (
        "src/sprites.rs: art/hero.png art/big\\ tree.png art/\\#1.png\n"
    )


def test_format_depfile_without_images():
    assert format_depfile("out.hpp", []) == "out.hpp: \n"
