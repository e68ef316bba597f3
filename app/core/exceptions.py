class GameException(Exception):
    """Base exception for game-related errors."""
    pass


class IllegalMove(GameException):
    """Raised when a move is rejected. The board is left untouched."""
    pass


class CellOccupied(IllegalMove):
    """Raised when trying to move to an occupied cell."""
    pass


class NotYourTurn(IllegalMove):
    """Raised when a player tries to move out of turn."""
    pass


class RoundOver(IllegalMove):
    """Raised when trying to move in a round that has ended."""
    pass


class SessionNotFound(GameException):
    """Raised when a game session is neither live nor saved."""
    pass


class CorruptPersistedState(GameException):
    """Raised when a saved settings blob cannot be decoded."""
    pass
