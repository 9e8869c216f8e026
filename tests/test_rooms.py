import pytest

from caveflyer.rooms import RoomGenerator


def open_grid(width, height):
    return RoomGenerator(width, height)


def walled_grid(width, height):
    generator = RoomGenerator(width, height)
    generator.grid = [1] * (width * height)
    return generator


def test_index_position_round_trip():
    generator = open_grid(5, 7)
    for x in range(5):
        for y in range(7):
            assert generator.get_position(generator.get_index(x, y)) == (x, y)


def test_out_of_bounds_reads_wall_and_ignores_writes():
    generator = open_grid(3, 3)
    assert generator.get(-1, 0) == 1
    assert generator.get(3, 1) == 1
    generator.set(5, 5, 1)
    assert generator.grid == [0] * 9
    generator.set(1, 2, 1)
    assert generator.get(1, 2) == 1


def test_count_neighbors_includes_self_and_border():
    generator = open_grid(5, 5)
    centre = generator.get_index(2, 2)
    assert generator.count_neighbors(centre, 0) == 9
    corner = generator.get_index(0, 0)
    assert generator.count_neighbors(corner, 1) == 5


def test_update_on_open_grid_walls_corners_only():
    generator = open_grid(5, 5)
    generator.update()
    assert generator.get(0, 0) == 1
    assert generator.get(4, 4) == 1
    assert generator.get(2, 2) == 0
    assert generator.get(2, 0) == 0


def test_update_keeps_all_walls():
    generator = walled_grid(4, 4)
    generator.update()
    assert generator.grid == [1] * 16


def test_build_room_open_grid():
    generator = open_grid(3, 3)
    assert generator.build_room(0) == set(range(9))


def test_build_room_isolated_cell_and_wall():
    generator = walled_grid(3, 3)
    generator.set(1, 1, 0)
    assert generator.build_room(generator.get_index(1, 1)) == set()
    assert generator.build_room(0) == set()


def test_build_room_rejects_bad_index():
    with pytest.raises(IndexError):
        open_grid(3, 3).build_room(9)


def test_find_path_is_shortest_and_connected():
    generator = open_grid(6, 6)
    src = generator.get_index(0, 0)
    dst = generator.get_index(4, 3)
    path = generator.find_path(src, dst)
    assert path[0] == src
    assert path[-1] == dst
    assert len(path) == 4 + 3 + 1
    for a, b in zip(path, path[1:]):
        ax, ay = generator.get_position(a)
        bx, by = generator.get_position(b)
        assert abs(ax - bx) + abs(ay - by) == 1


def test_find_path_same_cell():
    generator = open_grid(3, 3)
    assert generator.find_path(4, 4) == [4]


def test_find_path_blocked():
    generator = open_grid(5, 5)
    for y in range(5):
        generator.set(2, y, 1)
    assert generator.find_path(generator.get_index(0, 0), generator.get_index(4, 4)) == []
    generator.set(0, 0, 1)
    assert generator.find_path(generator.get_index(0, 0), generator.get_index(1, 1)) == []


def test_find_best_room_picks_largest():
    generator = open_grid(6, 4)
    for y in range(4):
        generator.set(1, y, 1)
    best = generator.find_best_room()
    assert best == {generator.get_index(x, y) for x in range(2, 6) for y in range(4)}


def test_expand_room_grows_without_mutating_input():
    generator = open_grid(5, 5)
    start = {generator.get_index(2, 2)}
    assert generator.expand_room(start, 0) == start
    grown = generator.expand_room(start, 1)
    assert grown == {generator.get_index(x, y) for x in range(1, 4) for y in range(1, 4)}
    assert start == {generator.get_index(2, 2)}
    assert generator.expand_room(start, 2) == set(range(25))


def test_expand_room_stops_at_walls():
    generator = open_grid(5, 5)
    for y in range(5):
        generator.set(3, y, 1)
    grown = generator.expand_room({generator.get_index(0, 0)}, 10)
    assert grown == {generator.get_index(x, y) for x in range(3) for y in range(5)}