import random

import pytest

from app.core.game_config import CORNERS, Difficulty, Mark
from app.services.board import empty_indices
from app.services.opponent import (
    HeuristicStrategy, MinimaxStrategy, RandomStrategy, get_strategy
)
from app.services.outcome import evaluate, is_full

X, O, E = Mark.X, Mark.O, Mark.EMPTY


def grid(text):
    return [X if c == "X" else O if c == "O" else E for c in text]


def play_out(cells, to_move, computer, strategy):
    """
    Walk every line of play where the human tries every cell and the
    computer answers with strategy. Yields the final grids.
    """
    outcome = evaluate(cells)
    if outcome.winner is not None or is_full(cells):
        yield cells
        return
    if to_move == computer:
        index = strategy.choose_move(tuple(cells), computer, computer.other())
        child = list(cells)
        child[index] = computer
        yield from play_out(child, to_move.other(), computer, strategy)
    else:
        for index in empty_indices(cells):
            child = list(cells)
            child[index] = to_move
            yield from play_out(child, to_move.other(), computer, strategy)


class TestFactory:

    def test_strategy_per_difficulty(self):
        assert isinstance(get_strategy(Difficulty.EASY), RandomStrategy)
        assert isinstance(get_strategy(Difficulty.MEDIUM), HeuristicStrategy)
        assert isinstance(get_strategy(Difficulty.HARD), MinimaxStrategy)

    def test_accepts_plain_strings(self):
        assert isinstance(get_strategy("hard"), MinimaxStrategy)


class TestRandomStrategy:

    def test_only_picks_empty_cells(self, rng):
        strategy = RandomStrategy(rng)
        cells = grid("XOXOOXX..")
        for _ in range(50):
            assert strategy.choose_move(cells, O, X) in (7, 8)

    def test_covers_all_empty_cells(self, rng):
        strategy = RandomStrategy(rng)
        picks = {strategy.choose_move(grid("X........"), O, X) for _ in range(300)}
        assert picks == set(range(1, 9))

    def test_full_board_is_a_precondition_failure(self, rng):
        with pytest.raises(ValueError):
            RandomStrategy(rng).choose_move(grid("XOXXOOOXX"), O, X)


class TestHeuristicStrategy:

    def test_takes_the_win(self, rng):
        # O can win at 2 and X threatens at 5: winning comes first
        assert HeuristicStrategy(rng).choose_move(grid("OO.XX...."), O, X) == 2

    def test_blocks_the_human(self, rng):
        assert HeuristicStrategy(rng).choose_move(grid("XX..O...."), O, X) == 2

    def test_takes_center(self, rng):
        assert HeuristicStrategy(rng).choose_move(grid("X........"), O, X) == 4

    def test_takes_a_free_corner(self, rng):
        strategy = HeuristicStrategy(rng)
        picks = {strategy.choose_move(grid("....X...."), O, X) for _ in range(200)}
        assert picks == set(CORNERS)

    def test_falls_back_to_edges(self, rng):
        # Center and corners gone, no line to win or block
        cells = grid("XOOOXXX.O")
        assert evaluate(cells).winner is None
        assert HeuristicStrategy(rng).choose_move(cells, O, X) == 7

    def test_respects_computer_mark(self, rng):
        # Computer plays X here: wins at 2 rather than blocking O at 5
        assert HeuristicStrategy(rng).choose_move(grid("XX.OO...."), X, O) == 2


class TestMinimaxStrategy:

    def test_takes_the_only_win(self):
        # O wins at 2; any other move lets X win at 5
        assert MinimaxStrategy().choose_move(grid("OO.XX.X.."), O, X) == 2

    def test_blocks_the_human(self):
        assert MinimaxStrategy().choose_move(grid("XX..O...."), O, X) == 2

    def test_ties_go_to_lowest_index(self):
        # Against a center opening, every corner draws; 0 comes first
        assert MinimaxStrategy().choose_move(grid("....X...."), O, X) == 0

    def test_deterministic(self):
        cells = grid("X...O...X")
        picks = {MinimaxStrategy(random.Random(seed)).choose_move(cells, O, X) for seed in range(5)}
        assert len(picks) == 1

    def test_never_loses_playing_second(self):
        strategy = MinimaxStrategy()
        for final in play_out([E] * 9, X, O, strategy):
            assert evaluate(final).winner != X

    def test_never_loses_playing_first(self):
        strategy = MinimaxStrategy()
        for final in play_out([E] * 9, O, O, strategy):
            assert evaluate(final).winner != X

    def test_never_loses_as_x(self):
        strategy = MinimaxStrategy()
        for final in play_out([E] * 9, O, X, strategy):
            assert evaluate(final).winner != O
