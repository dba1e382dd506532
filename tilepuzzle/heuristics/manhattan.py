from tilepuzzle.domains.puzzlemn import Goal, State


def manhattan(s: State, goal: Goal) -> int:
    dist = 0
    C = s.cols
    for idx, tile in enumerate(s.tiles):
        if tile.value == 0:
            continue
        r, c = divmod(idx, C)
        gr, gc = goal.position(tile.value)
        dist += abs(r - gr) + abs(c - gc)
    return dist
